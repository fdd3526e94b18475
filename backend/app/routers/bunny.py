"""Bunny.net storage diagnostics router (admin only)."""

from fastapi import APIRouter, Depends, HTTPException

from app.auth.dependencies import require_admin
from app.models.bunny import CredentialReport, CredentialTestRequest
from app.services.bunny_storage import BunnyStorageClient, get_bunny_client

router = APIRouter(prefix="/bunny", tags=["bunny"])

UNSTORED_KEY_NOTE = (
    "API key is not stored. If tests pass, update backend secrets to use the same values."
)


@router.get("/test", response_model=CredentialReport)
async def test_configured_credentials(
    current_user: dict = Depends(require_admin),
    client: BunnyStorageClient = Depends(get_bunny_client),
) -> CredentialReport:
    """Check the server's configured storage zone against every storage host."""
    return await client.check_credentials()


@router.post("/credentials/test", response_model=CredentialReport)
async def test_submitted_credentials(
    body: CredentialTestRequest,
    current_user: dict = Depends(require_admin),
    client: BunnyStorageClient = Depends(get_bunny_client),
) -> CredentialReport:
    """
    Validate a storage zone / API key pair before it is saved as a secret.

    The key is only used for the probe requests and never persisted.
    """
    storage_zone = body.storage_zone.strip()
    api_key = body.api_key.strip()
    if not storage_zone or not api_key:
        raise HTTPException(status_code=400, detail="Missing storageZone or apiKey")

    return await client.check_credentials(storage_zone, api_key, note=UNSTORED_KEY_NOTE)
