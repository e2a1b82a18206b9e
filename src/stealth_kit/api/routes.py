from fastapi import APIRouter, HTTPException, Query, Request

from stealth_kit.api.models import (
    AnnouncementRequest,
    AppendResponse,
    GenerateRequest,
    GenerateResponse,
    RegisterKeysRequest,
    RegistryEntryResponse,
    ScanMatchResponse,
    ScanRequest,
    ScanResponse,
)
from stealth_kit.core.generator import generate_from_meta_address, generate_stealth_address
from stealth_kit.core.models import Announcement
from stealth_kit.core.scanner import scan_announcements_view_only
from stealth_kit.crypto.keys import StealthMetaAddress
from stealth_kit.errors import StealthError, UnknownRecipient

router = APIRouter(tags=["Stealth Addresses"])

MAX_PAGE_SIZE = 1000


def get_state(request: Request):
    """Retrieve the registry, log and config initialized in the lifespan handler."""
    state = request.app.state
    if getattr(state, "registry", None) is None or getattr(state, "log", None) is None:
        raise HTTPException(status_code=500, detail="stealth services not initialized")
    return state


def _parse_hex(value: str, field: str) -> bytes:
    body = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        return bytes.fromhex(body)
    except ValueError:
        raise StealthError(f"{field} is not valid hex") from None


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------


@router.get("/registry/{identifier}", response_model=RegistryEntryResponse)
async def get_registry_entry(request: Request, identifier: str):
    """Return the published keys for an identifier (404 if not registered)."""
    state = get_state(request)
    keys = state.registry.get_public_keys(identifier)
    if keys is None:
        raise HTTPException(status_code=404, detail=f"No stealth keys registered for '{identifier}'")
    spend, view = keys
    return RegistryEntryResponse(
        identifier=identifier,
        spending_public_key=spend.hex(),
        viewing_public_key=view.hex(),
        meta_address=StealthMetaAddress(spend, view).encode(),
    )


@router.put("/registry/{identifier}", response_model=RegistryEntryResponse)
async def set_registry_entry(request: Request, identifier: str, req: RegisterKeysRequest):
    """Publish or replace the keys for an identifier (403 if the caller is not authorized)."""
    state = get_state(request)
    state.registry.set_public_keys(
        identifier,
        req.spending_public_key,
        req.viewing_public_key,
        caller=req.caller,
    )
    return await get_registry_entry(request, identifier)


# ------------------------------------------------------------------
# Generation
# ------------------------------------------------------------------


@router.post("/stealth/generate", response_model=GenerateResponse)
async def generate(request: Request, req: GenerateRequest):
    """
    Derive a one-time stealth address for a registered identifier or a meta-address.

    A fresh ephemeral key is drawn per request and discarded afterwards.
    """
    state = get_state(request)
    curve = state.config.curve_adapter()
    hasher = state.config.hash_adapter()

    if (req.identifier is None) == (req.meta_address is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of identifier or meta_address")

    if req.identifier is not None:
        keys = state.registry.get_public_keys(req.identifier)
        if keys is None:
            raise UnknownRecipient(f"No stealth keys registered for '{req.identifier}'")
        generated = generate_stealth_address(keys[0], keys[1], curve=curve, hasher=hasher)
    else:
        generated = generate_from_meta_address(req.meta_address, curve=curve, hasher=hasher)

    return GenerateResponse(
        stealth_address=generated.stealth_address,
        ephemeral_public_key=generated.ephemeral_public_key.hex(),
        view_tag=generated.view_tag.hex(),
        stealth_public_key=generated.stealth_public_key.hex(),
    )


# ------------------------------------------------------------------
# Announcement log
# ------------------------------------------------------------------


@router.post("/announcements", response_model=AppendResponse)
async def append_announcement(request: Request, req: AnnouncementRequest):
    """Append an announcement to the log."""
    state = get_state(request)
    offset = state.log.append(
        _parse_hex(req.ephemeral_public_key, "ephemeral_public_key"),
        req.stealth_address,
        _parse_hex(req.view_tag, "view_tag"),
        _parse_hex(req.metadata, "metadata"),
    )
    return AppendResponse(offset=offset)


@router.get("/announcements", response_model=list[Announcement])
async def list_announcements(
    request: Request,
    from_offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=MAX_PAGE_SIZE),
):
    """Return up to `limit` announcements starting at `from_offset`."""
    state = get_state(request)
    entries = []
    for announcement in state.log.iterate(from_offset):
        entries.append(announcement)
        if len(entries) >= limit:
            break
    return entries


# ------------------------------------------------------------------
# Delegated scanning
# ------------------------------------------------------------------


@router.post("/stealth/scan", response_model=ScanResponse)
async def scan(request: Request, req: ScanRequest):
    """
    View-only scan of the log from `from_offset`.

    Matches identify announcements that belong to the recipient; the
    spending private key is still required to spend from them.
    """
    state = get_state(request)
    curve = state.config.curve_adapter()
    hasher = state.config.hash_adapter()
    viewing_private = int.from_bytes(_parse_hex(req.viewing_private_key, "viewing_private_key"), "big")

    skipped = []
    next_offset = req.from_offset

    def entries():
        nonlocal next_offset
        for announcement in state.log.iterate(req.from_offset):
            next_offset = announcement.offset + 1
            yield announcement

    matches = [
        ScanMatchResponse(
            announcement=match.announcement,
            stealth_public_key=match.stealth_key_pair.public_key_hex,
        )
        for match in scan_announcements_view_only(
            entries(),
            viewing_private,
            req.spending_public_key,
            on_error=lambda announcement, error: skipped.append(announcement.offset),
            curve=curve,
            hasher=hasher,
        )
    ]
    return ScanResponse(matches=matches, skipped=len(skipped), next_offset=next_offset)
