"""FastAPI application exposing the stealth registry, log and generator."""
