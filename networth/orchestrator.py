"""
Main Orchestrator for the Net Worth engine

This module ties together all the components and defines the end-to-end
flows for:
1. Aggregation (identity -> fan-out fetch -> normalize -> reduce -> commit)
2. Session synchronization (login / switch / logout -> run or reset)
3. Record writes (delegate to provider -> full re-run)

DESIGN DECISION: The orchestrator enforces the boundaries:
- A snapshot is only ever visible for the identity it was computed for
- The zero snapshot is committed before any fetch of a new run
- A failing provider empties its own category and nothing else
- A run commits only while it is the most recent run (generation token)
- Every step is audited
"""

import asyncio
from collections.abc import Mapping
from typing import Any, Coroutine, Optional
from uuid import UUID

import httpx

from networth.aggregation import SnapshotListener, SnapshotStore, partition_cash, reduce_bucket
from networth.audit import AuditLogger, create_correlation_id, get_logger
from networth.config import AppSettings, MonitorSettings, get_settings
from networth.goals import GoalSynchronizer
from networth.models.records import Category, Identity
from networth.models.snapshot import (
    Assets,
    Liabilities,
    NetWorthSnapshot,
    SnapshotState,
)
from networth.normalization import RecordNormalizer
from networth.services.providers import (
    ProviderError,
    RawRecord,
    RecordProvider,
    WritableRecordProvider,
    create_http_client,
    create_http_providers,
)
from networth.services.session import SessionStoreInterface
from networth.services.storage import (
    GoalStoreInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsGoalStore,
)
from networth.session import IdentityMonitor, IdentityObserver


logger = get_logger(__name__)


class NotAuthenticatedError(Exception):
    """A write was requested while nobody is logged in."""
    pass


class AggregationOrchestrator:
    """
    Computes and commits net worth snapshots.

    Flow of one run:
    1. No identity -> commit zero snapshot (not loading), stop
    2. Commit zero snapshot (loading) before any fetch
    3. Fetch every category concurrently, each fetch guarded
    4. Join all fetches
    5. Normalize, partition cash, reduce every bucket
    6. Compose totals, stamp owner and time
    7. Commit, unless a newer run or reset has started meanwhile
    8. Schedule the goal synchronizer
    """

    def __init__(
        self,
        providers: Mapping[Category, RecordProvider],
        session_store: SessionStoreInterface,
        store: SnapshotStore,
        normalizer: Optional[RecordNormalizer] = None,
        goal_synchronizer: Optional[GoalSynchronizer] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        missing = [c.value for c in Category if c not in providers]
        if missing:
            raise ValueError(f"No record provider for: {', '.join(missing)}")

        self._providers = dict(providers)
        self._session_store = session_store
        self._store = store
        self._normalizer = normalizer or RecordNormalizer()
        self._goal_synchronizer = goal_synchronizer
        self._audit_logger = audit_logger
        self._wallet_account_type = (settings or get_settings().app).wallet_account_type
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def current_identity(self) -> Optional[Identity]:
        """The identity to aggregate for; unreadable sessions count as none."""
        try:
            return self._session_store.current_identity()
        except Exception as e:
            logger.warning("session_unreadable", error=str(e))
            return None

    def invalidate(self) -> int:
        """Make every run still in flight discard its result."""
        self._generation += 1
        return self._generation

    def reset(self, loading: bool = False) -> SnapshotState:
        """
        Show the zero snapshot now and discard any run still in flight.

        loading=True is used when a new run is about to follow.
        """
        self.invalidate()
        return self._store.commit(NetWorthSnapshot.zero(), loading=loading)

    async def run(self) -> Optional[NetWorthSnapshot]:
        """
        Aggregate for the currently known identity.

        Returns the committed snapshot, or None if nobody is logged in or
        the run was superseded. Provider, normalization and goal failures
        never raise from here.
        """
        identity = self.current_identity()
        generation = self.invalidate()

        if identity is None:
            self._store.commit(NetWorthSnapshot.zero(), loading=False)
            return None

        # Reset before load: nothing of a previous identity survives this line
        self._store.commit(NetWorthSnapshot.zero(), loading=True)

        correlation_id = create_correlation_id()
        if self._audit_logger:
            await self._audit_logger.log_aggregation_started(
                user_id=identity.user_id,
                generation=generation,
                correlation_id=correlation_id,
            )

        categories = list(self._providers)
        results = await asyncio.gather(*(
            self._fetch(category, identity, correlation_id)
            for category in categories
        ))
        raw_by_category = {c: records for c, (records, _) in zip(categories, results)}
        failed = [c.value for c, (_, error) in zip(categories, results) if error]

        if generation != self._generation:
            await self._discard(identity, generation, correlation_id)
            return None

        try:
            snapshot = self.compose_snapshot(raw_by_category, owner=identity.user_id)
        except Exception as e:
            logger.exception("snapshot_composition_failed", user_id=identity.user_id)
            self._store.commit(NetWorthSnapshot.zero(), loading=False)
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="snapshot_composition_failed",
                    error_message=str(e),
                    details={"user_id": identity.user_id},
                    correlation_id=correlation_id,
                )
            return None

        # A polled session can change before the monitor next samples it
        active = self.current_identity()
        if not identity.same_user(active):
            await self._discard(identity, generation, correlation_id, active)
            self._store.commit(NetWorthSnapshot.zero(), loading=False)
            return None

        self._store.commit(snapshot, loading=False)

        if self._goal_synchronizer:
            self._goal_synchronizer.schedule(identity.user_id, snapshot.net_worth)

        if self._audit_logger:
            await self._audit_logger.log_snapshot_committed(
                user_id=identity.user_id,
                generation=generation,
                net_worth=str(snapshot.net_worth),
                failed_categories=failed,
                correlation_id=correlation_id,
            )

        return snapshot

    async def _fetch(
        self,
        category: Category,
        identity: Identity,
        correlation_id: UUID,
    ) -> tuple[list[Any], Optional[str]]:
        """
        Fetch one category. A failure becomes an empty list plus the error.
        """
        provider = self._providers[category]
        try:
            records = await provider.get_all(identity)
            if not isinstance(records, list):
                raise ProviderError(
                    category,
                    f"expected a list of records, got {type(records).__name__}",
                )
            return records, None
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.warning(
                "provider_fetch_failed",
                category=category.value,
                user_id=identity.user_id,
                error=error,
            )
            if self._audit_logger:
                await self._audit_logger.log_provider_fetch_failed(
                    category=category.value,
                    user_id=identity.user_id,
                    error_message=error,
                    correlation_id=correlation_id,
                )
            return [], error

    async def _discard(
        self,
        identity: Identity,
        generation: int,
        correlation_id: UUID,
        active: Optional[Identity] = None,
    ) -> None:
        """Drop a settled run whose result no longer belongs on screen."""
        logger.debug(
            "run_superseded",
            generation=generation,
            latest=self._generation,
            user_id=identity.user_id,
            active_user_id=active.user_id if active else None,
        )
        if self._audit_logger:
            await self._audit_logger.log_run_superseded(
                user_id=identity.user_id,
                generation=generation,
                latest_generation=self._generation,
                correlation_id=correlation_id,
            )

    def compose_snapshot(
        self,
        raw_by_category: Mapping[Category, list[Any]],
        owner: Optional[str],
    ) -> NetWorthSnapshot:
        """Normalize, reduce and total the raw records of every category."""
        def bucket(category: Category):
            records = self._normalizer.normalize(category, raw_by_category.get(category, []))
            return reduce_bucket(records)

        bank_records = self._normalizer.normalize(
            Category.BANK_ACCOUNTS,
            raw_by_category.get(Category.BANK_ACCOUNTS, []),
        )

        assets = Assets(
            gold=bucket(Category.GOLD),
            bonds=bucket(Category.BONDS),
            stocks=bucket(Category.STOCKS),
            property=bucket(Category.PROPERTY),
            mutual_funds=bucket(Category.MUTUAL_FUNDS),
            cash=partition_cash(bank_records, self._wallet_account_type),
        )
        liabilities = Liabilities(
            loans=bucket(Category.LOANS),
            credit_cards=bucket(Category.CREDIT_CARDS),
        )
        return NetWorthSnapshot.compose(assets, liabilities, owner=owner)


class NetWorthEngine(IdentityObserver):
    """
    The public face of the engine.

    Reads (state, snapshot, is_loading) never raise. Writes go to the
    category's record provider and are followed by a full re-run.
    """

    def __init__(
        self,
        providers: Mapping[Category, RecordProvider],
        session_store: SessionStoreInterface,
        goal_store: Optional[GoalStoreInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
        monitor_settings: Optional[MonitorSettings] = None,
    ):
        self._providers = dict(providers)
        self._audit_logger = audit_logger
        self._app_settings = app_settings or get_settings().app
        self._store = SnapshotStore()
        self._goal_synchronizer = (
            GoalSynchronizer(goal_store, audit_logger) if goal_store else None
        )
        self._orchestrator = AggregationOrchestrator(
            providers=self._providers,
            session_store=session_store,
            store=self._store,
            goal_synchronizer=self._goal_synchronizer,
            audit_logger=audit_logger,
            settings=self._app_settings,
        )
        self._monitor = IdentityMonitor(session_store, self, monitor_settings)
        self._tasks: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start watching the session; an active identity triggers a run."""
        self._monitor.start()

    async def aclose(self) -> None:
        """Stop the monitor, discard in-flight runs and drain side effects."""
        await self._monitor.stop()
        self._orchestrator.invalidate()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._goal_synchronizer:
            await self._goal_synchronizer.aclose()

    async def __aenter__(self) -> "NetWorthEngine":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Read surface
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SnapshotState:
        return self._store.state

    @property
    def snapshot(self) -> NetWorthSnapshot:
        return self._store.snapshot

    @property
    def is_loading(self) -> bool:
        return self._store.is_loading

    @property
    def monitor(self) -> IdentityMonitor:
        return self._monitor

    @property
    def orchestrator(self) -> AggregationOrchestrator:
        return self._orchestrator

    def subscribe(self, listener: SnapshotListener):
        """Be told about every committed state. Returns an unsubscribe callable."""
        return self._store.subscribe(listener)

    async def refresh(self) -> Optional[NetWorthSnapshot]:
        """Run a full aggregation for the current identity."""
        return await self._orchestrator.run()

    def reset(self) -> SnapshotState:
        """Drop to the zero snapshot and discard any run in flight."""
        return self._orchestrator.reset()

    async def wait_idle(self) -> None:
        """Wait until every scheduled run and goal sync has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if self._goal_synchronizer:
            await self._goal_synchronizer.drain()

    # -------------------------------------------------------------------------
    # Identity events
    # -------------------------------------------------------------------------

    def identity_appeared(self, identity: Identity) -> None:
        if self._audit_logger:
            self._spawn(self._audit_logger.log_identity_appeared(identity.user_id))
        self._spawn(self._orchestrator.run())

    def identity_changed(self, old: Identity, new: Identity) -> None:
        # The old user's figures disappear before the new run is even scheduled
        self._orchestrator.reset(loading=True)
        if self._audit_logger:
            self._spawn(self._audit_logger.log_identity_changed(old.user_id, new.user_id))
        self._spawn(self._orchestrator.run())

    def identity_disappeared(self, old: Identity) -> None:
        self._orchestrator.reset()
        if self._audit_logger:
            self._spawn(self._audit_logger.log_identity_disappeared(old.user_id))
            self._spawn(self._audit_logger.log_snapshot_reset(old.user_id))

    # -------------------------------------------------------------------------
    # Writes (full reload on every write)
    # -------------------------------------------------------------------------

    async def save_record(
        self,
        category: Category,
        payload: RawRecord,
        record_id: Optional[str] = None,
    ) -> RawRecord:
        """
        Create (no record_id) or update a record, then re-aggregate.

        Raises:
            NotAuthenticatedError: If nobody is logged in
            ProviderError: If the record service rejects the write
        """
        identity = self._require_identity()
        provider = self._writable(category)

        if record_id is None:
            stored = await provider.create(identity, payload)
            operation = "created"
        else:
            stored = await provider.update(identity, record_id, payload)
            operation = "updated"

        if self._audit_logger:
            await self._audit_logger.log_record_written(
                category=category.value,
                operation=operation,
                user_id=identity.user_id,
                record_id=str(stored.get("id", record_id or "")) or None,
            )

        await self.refresh()
        return stored

    async def save_wallet(
        self,
        payload: RawRecord,
        record_id: Optional[str] = None,
    ) -> RawRecord:
        """Wallets are bank accounts carrying the wallet account type."""
        wallet = {**payload, "accountType": self._app_settings.wallet_account_type}
        return await self.save_record(Category.BANK_ACCOUNTS, wallet, record_id)

    async def delete_record(self, category: Category, record_id: str) -> bool:
        """Delete a record, then re-aggregate."""
        identity = self._require_identity()
        provider = self._writable(category)

        deleted = await provider.delete(identity, record_id)

        if self._audit_logger and deleted:
            await self._audit_logger.log_record_written(
                category=category.value,
                operation="deleted",
                user_id=identity.user_id,
                record_id=record_id,
            )

        await self.refresh()
        return deleted

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_identity(self) -> Identity:
        identity = self._orchestrator.current_identity()
        if identity is None:
            raise NotAuthenticatedError("Log in before changing records")
        return identity

    def _writable(self, category: Category) -> WritableRecordProvider:
        provider = self._providers[category]
        if not isinstance(provider, WritableRecordProvider):
            raise TypeError(f"The {category.value} provider is read-only")
        return provider

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


def create_app_components(
    session_store: SessionStoreInterface,
    use_storage: bool = True,
) -> tuple[NetWorthEngine, httpx.AsyncClient, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        session_store: Where the authentication flow keeps the session.
        use_storage: Whether to initialize Google Sheets storage for goals
                    and the audit trail. Set to False to run without it.

    Returns:
        (engine, http_client, sheets_client)

    The caller owns http_client and must close it after engine.aclose().
    """
    settings = get_settings()
    http_client = create_http_client(settings.api)
    providers = create_http_providers(http_client)

    sheets_client = None
    goal_store = None
    audit_logger = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            goal_store = GoogleSheetsGoalStore(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            goal_store = None
            audit_logger = AuditLogger()  # Local-only logging
    else:
        audit_logger = AuditLogger()  # Local-only logging

    engine = NetWorthEngine(
        providers=providers,
        session_store=session_store,
        goal_store=goal_store,
        audit_logger=audit_logger,
        app_settings=settings.app,
        monitor_settings=settings.monitor,
    )

    return engine, http_client, sheets_client
