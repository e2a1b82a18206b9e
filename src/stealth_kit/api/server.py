import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stealth_kit import __version__
from stealth_kit.api.routes import router
from stealth_kit.config import StealthConfig
from stealth_kit.core.announcements import InMemoryAnnouncementLog
from stealth_kit.core.registry import InMemoryKeyRegistry
from stealth_kit.errors import AuthorizationFailed, UnknownRecipient

logger = logging.getLogger("stealth_kit.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load configuration (STEALTH_CURVE, STEALTH_HASH, ...)
    config = StealthConfig.from_env()
    logger.info(f"Starting stealth API on {config.curve} / {config.hash_name}")

    # One registry and one log per process, shared by all requests
    app.state.config = config
    app.state.registry = InMemoryKeyRegistry(curve=config.curve_adapter())
    app.state.log = InMemoryAnnouncementLog()

    yield


app = FastAPI(
    title="Stealth Kit - Stealth Address API",
    description="Key registry, announcement log and stealth address derivation",
    version=__version__,
    lifespan=lifespan,
)

# Allow CORS for easy frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(router)


@app.exception_handler(AuthorizationFailed)
async def authorization_error_handler(request: Request, exc: AuthorizationFailed):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(UnknownRecipient)
async def unknown_recipient_handler(request: Request, exc: UnknownRecipient):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}
