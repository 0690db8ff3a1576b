"""
Identity snapshot builder: address in, WalletSnapshot out.

IdentitySnapshotBuilder.build() validates the address, resolves endpoints,
runs the account-data chain and the indexed-asset chain concurrently, then
aggregates and scores. Failures never produce a partial snapshot: the caller
gets a failed snapshot with an ErrorKind and the generic user message, and
the detailed cause is logged.

SnapshotSession tracks one consumer's current snapshot through
idle -> fetching -> ready | failed, and makes sure a superseded request can
never overwrite the result of a newer one.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

import httpx

from identity_prism.analytics.models import SnapshotState, WalletSnapshot
from identity_prism.analytics.scoring_engine import badges, calculate_score
from identity_prism.analytics.trait_aggregator import account_stats, aggregate_traits
from identity_prism.config.settings import Settings, get_settings
from identity_prism.core.exceptions import NoEndpointsConfigured, PrismError
from identity_prism.ledger.client import LedgerClient, gather_all, validate_address
from identity_prism.ledger.endpoints import build_endpoints
from identity_prism.prism_logging import get_logger, short_wallet

logger = get_logger(__name__)


class IdentitySnapshotBuilder:
    """
    Builds snapshots from live ledger data.

    clock returns Unix seconds and drives wallet age; inject a fixed clock
    for reproducible results.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._clock = clock

    @property
    def settings(self) -> Settings:
        return self._settings

    async def _build(self, address: str) -> WalletSnapshot:
        address = validate_address(address)
        endpoints = build_endpoints(self._settings, address)
        if not endpoints:
            raise NoEndpointsConfigured()

        client = LedgerClient(
            endpoints,
            http_client=self._http_client,
            timeout_sec=self._settings.request_timeout_sec,
        )
        async with client:
            account, assets = await gather_all(
                client.fetch_account_data(address),
                client.fetch_assets(address),
            )

        stats = account_stats(account.balance_lamports, account.signatures, now=self._clock())
        traits = aggregate_traits(stats, assets, account.token_accounts)
        score = calculate_score(traits)
        return WalletSnapshot(
            address=address,
            score=score,
            tier=traits.planet_tier,
            traits=traits,
            badges=tuple(badges(traits)),
        )

    async def build(self, address: str) -> WalletSnapshot:
        """Build one snapshot. PrismError is turned into a failed snapshot, never raised."""
        wallet = short_wallet(address or "")
        logger.info("snapshot_build_start", wallet=wallet)
        try:
            snapshot = await self._build(address)
        except PrismError as e:
            logger.error(
                "snapshot_build_failed",
                wallet=wallet,
                error_kind=e.kind.value,
                error=str(e),
            )
            return WalletSnapshot.failed(address, e.kind, e.user_message)
        logger.info(
            "snapshot_build_done",
            wallet=wallet,
            score=snapshot.score,
            tier=snapshot.tier.value,
            badges=list(snapshot.badges),
        )
        return snapshot


class SnapshotSession:
    """
    One consumer's view of the current wallet snapshot.

    Every refresh() bumps a generation counter and cancels the in-flight
    task. A result is committed only while its generation is still current.
    """

    def __init__(self, builder: IdentitySnapshotBuilder) -> None:
        self._builder = builder
        self._generation = 0
        self._task: asyncio.Task[WalletSnapshot] | None = None
        self._state = SnapshotState.IDLE
        self._snapshot: WalletSnapshot | None = None
        self._address: str | None = None

    @property
    def state(self) -> SnapshotState:
        return self._state

    @property
    def snapshot(self) -> WalletSnapshot | None:
        return self._snapshot

    @property
    def address(self) -> str | None:
        return self._address

    @property
    def generation(self) -> int:
        return self._generation

    def _discard_in_flight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def cancel(self) -> None:
        """Drop in-flight work and return to idle."""
        self._generation += 1
        self._discard_in_flight()
        self._state = SnapshotState.IDLE

    async def refresh(self, address: str) -> WalletSnapshot | None:
        """
        Start a fetch for address and wait for it.

        Returns the committed snapshot, or None when a newer refresh (or
        cancel) superseded this one before it finished.
        """
        self._generation += 1
        generation = self._generation
        self._discard_in_flight()
        self._address = address
        self._snapshot = None
        self._state = SnapshotState.FETCHING

        task = asyncio.ensure_future(self._builder.build(address))
        self._task = task
        try:
            snapshot = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.info("snapshot_superseded", wallet=short_wallet(address), generation=generation)
                return None
            raise

        if generation != self._generation:
            logger.info("snapshot_superseded", wallet=short_wallet(address), generation=generation)
            return None
        self._task = None
        self._snapshot = snapshot
        self._state = SnapshotState.READY if snapshot.ok else SnapshotState.FAILED
        return snapshot
