from pydantic import BaseModel, Field

from stealth_kit.core.models import Announcement


class RegisterKeysRequest(BaseModel):
    """Request model for publishing a recipient's stealth keys."""

    spending_public_key: str = Field(..., description="Compressed spending public key (hex)")
    viewing_public_key: str = Field(..., description="Compressed viewing public key (hex)")
    caller: str | None = Field(
        None,
        description="Identity performing the write. Must be the identifier itself or an approved operator.",
    )


class RegistryEntryResponse(BaseModel):
    """Published keys for one identifier."""

    identifier: str
    spending_public_key: str = Field(..., description="Compressed spending public key (hex)")
    viewing_public_key: str = Field(..., description="Compressed viewing public key (hex)")
    meta_address: str = Field(..., description="st:<chain>:0x... meta-address")


class GenerateRequest(BaseModel):
    """Request model for deriving a stealth address. Provide exactly one field."""

    identifier: str | None = Field(None, description="Registered recipient identifier")
    meta_address: str | None = Field(None, description="Recipient meta-address (st:eth:0x...)")


class GenerateResponse(BaseModel):
    """A freshly derived stealth address. The ephemeral private key is never returned."""

    stealth_address: str
    ephemeral_public_key: str
    view_tag: str
    stealth_public_key: str


class AnnouncementRequest(BaseModel):
    """Request model for appending to the announcement log."""

    ephemeral_public_key: str = Field(..., description="Ephemeral public key (hex)")
    stealth_address: str = Field(..., description="20-byte stealth address (0x hex)")
    view_tag: str = Field(..., description="12-byte view tag (hex)")
    metadata: str = Field("", description="Arbitrary metadata (hex)")


class AppendResponse(BaseModel):
    """Offset assigned to an appended announcement."""

    offset: int


class ScanRequest(BaseModel):
    """
    Delegated (view-only) scan request.

    Only the viewing private key is sent; spending private keys never
    cross the API.
    """

    viewing_private_key: str = Field(..., description="Viewing private key (32-byte hex)")
    spending_public_key: str = Field(..., description="Compressed spending public key (hex)")
    from_offset: int = Field(0, ge=0, description="First log offset to scan")


class ScanMatchResponse(BaseModel):
    """One announcement that belongs to the scanned recipient."""

    announcement: Announcement
    stealth_public_key: str


class ScanResponse(BaseModel):
    """Result of a delegated scan."""

    matches: list[ScanMatchResponse]
    skipped: int = Field(..., description="Number of malformed entries skipped")
    next_offset: int = Field(..., description="Checkpoint to resume the next scan from")
