"""
FastAPI server: identity snapshots and mint preparation over HTTP.

GET  /health                          liveness
GET  /identity/{address}              fresh snapshot (score, tier, traits, badges)
POST /mint-requests                   snapshot -> metadata upload -> pending mint request
POST /mint-requests/{request_id}/claim consume a pending request (mint step)

Snapshot failures map to 400 (invalid address), 500 (no endpoints
configured) or 503 (upstream), always with the generic user message only.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from identity_prism import __version__
from identity_prism.analytics.models import WalletSnapshot
from identity_prism.analytics.scoring_engine import MAX_SCORE
from identity_prism.analytics.snapshot_builder import IdentitySnapshotBuilder
from identity_prism.config.settings import Settings, get_settings
from identity_prism.core.exceptions import ErrorKind, PrismError
from identity_prism.mint.metadata import build_metadata_json
from identity_prism.mint.mint_requests import MintRequest, MintRequestRegistry
from identity_prism.mint.storage_client import MetadataStorageClient
from identity_prism.prism_logging import get_logger, short_wallet

logger = get_logger(__name__)

ERROR_STATUS = {
    ErrorKind.INVALID_ADDRESS: 400,
    ErrorKind.NO_ENDPOINTS_CONFIGURED: 500,
}
UPSTREAM_ERROR_STATUS = 503


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------

class IdentityResponse(BaseModel):
    """GET /identity/{address} response."""

    address: str = Field(..., description="Wallet address (base58)")
    score: int = Field(..., ge=0, le=MAX_SCORE, description="Identity score (0-1400)")
    tier: str = Field(..., description="Planet tier")
    badges: list[str] = Field(default_factory=list, description="Earned badge keys")
    traits: dict[str, Any] = Field(default_factory=dict, description="Wallet traits (camelCase)")


class MintPrepareRequest(BaseModel):
    """POST /mint-requests body."""

    address: str = Field(..., min_length=32, max_length=44, description="Solana wallet (base58)")


class MintPrepareResponse(BaseModel):
    """POST /mint-requests response."""

    request_id: str = Field(..., description="Pending mint request id")
    metadata_uri: str = Field(..., description="Uploaded metadata URI")
    score: int = Field(..., ge=0, le=MAX_SCORE)
    tier: str


# -----------------------------------------------------------------------------
# Lifespan and dependencies
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """One shared httpx client, snapshot builder, storage client and mint registry per process."""
    settings = get_settings()
    client = httpx.AsyncClient(timeout=httpx.Timeout(settings.request_timeout_sec))
    app.state.settings = settings
    app.state.builder = IdentitySnapshotBuilder(settings, http_client=client)
    app.state.registry = MintRequestRegistry(settings.mint_request_ttl_sec)
    app.state.storage = (
        MetadataStorageClient(settings.metadata_base_url, http_client=client)
        if settings.metadata_base_url
        else None
    )
    logger.info(
        "api_server_started",
        proxy=bool(settings.helius_proxy_url),
        api_key_count=len(settings.helius_api_keys),
        storage=bool(settings.metadata_base_url),
    )
    try:
        yield
    finally:
        await client.aclose()
        logger.info("api_server_stopped")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_builder(request: Request) -> IdentitySnapshotBuilder:
    return request.app.state.builder


def get_registry(request: Request) -> MintRequestRegistry:
    return request.app.state.registry


def get_storage(request: Request) -> MetadataStorageClient | None:
    return request.app.state.storage


def _raise_for_snapshot(snapshot: WalletSnapshot) -> None:
    if snapshot.ok:
        return
    assert snapshot.error is not None
    status = ERROR_STATUS.get(snapshot.error, UPSTREAM_ERROR_STATUS)
    raise HTTPException(status_code=status, detail=snapshot.message)


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Identity Prism API",
    description="Identity score, planet tier and traits for Solana wallets.",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@app.get("/identity/{address}", response_model=IdentityResponse)
async def get_identity(
    address: str,
    builder: IdentitySnapshotBuilder = Depends(get_builder),
) -> IdentityResponse:
    """Build a fresh snapshot for the wallet."""
    snapshot = await builder.build(address)
    _raise_for_snapshot(snapshot)
    assert snapshot.traits is not None
    return IdentityResponse(
        address=snapshot.address,
        score=snapshot.score,
        tier=snapshot.tier.value,
        badges=list(snapshot.badges),
        traits=snapshot.traits.to_dict(),
    )


@app.post("/mint-requests", response_model=MintPrepareResponse, status_code=201)
async def prepare_mint(
    body: MintPrepareRequest,
    builder: IdentitySnapshotBuilder = Depends(get_builder),
    registry: MintRequestRegistry = Depends(get_registry),
    storage: MetadataStorageClient | None = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> MintPrepareResponse:
    """
    Score the wallet, upload its metadata document and register a pending
    mint request for the external mint step.
    """
    if storage is None or not settings.metadata_image_url:
        raise HTTPException(status_code=500, detail="Metadata storage not configured")
    snapshot = await builder.build(body.address)
    _raise_for_snapshot(snapshot)

    document = build_metadata_json(
        snapshot,
        image_url=settings.metadata_image_url,
        app_base_url=settings.app_base_url,
    )
    try:
        metadata_uri = await storage.upload_metadata(document)
    except PrismError as e:
        logger.error("mint_metadata_upload_failed", wallet=short_wallet(snapshot.address), error=str(e))
        raise HTTPException(status_code=UPSTREAM_ERROR_STATUS, detail=e.user_message) from e

    request = MintRequest.from_snapshot(snapshot, metadata_uri)
    request_id = registry.register(request)
    return MintPrepareResponse(
        request_id=request_id,
        metadata_uri=metadata_uri,
        score=request.score,
        tier=request.tier,
    )


@app.post("/mint-requests/{request_id}/claim")
def claim_mint_request(
    request_id: str,
    registry: MintRequestRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Consume a pending mint request. 404 when unknown, already claimed or expired."""
    request = registry.claim(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Mint request not found or expired")
    return request.to_dict()


@app.exception_handler(HTTPException)
def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
