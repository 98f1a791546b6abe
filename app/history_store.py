"""Best-effort document store for weather query history.

Every normalized record the service returns can be appended to a single
``weather_data`` table as a JSON document tagged with a ``type`` discriminator
(``current`` or ``forecast``). Writes run on a background worker and never
raise into the request path; reads need a reachable database and report
unavailability to the caller instead of failing.

Any SQLAlchemy URL works (``sqlite://`` for tests, ``postgresql+psycopg://``
in deployment). The engine is created lazily on first use, once.
"""

from __future__ import annotations

import datetime as dt
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from app.errors import StoreError
from app.models import CurrentWeatherRecord, ForecastRecord
from app.normalizer import to_iso
from utils.logging_utils import get_tagged_logger, mask_db_url

logger = get_tagged_logger(__name__, tag="history_store")

RECORD_TYPE_CURRENT = "current"
RECORD_TYPE_FORECAST = "forecast"

metadata = MetaData()

weather_data = Table(
    "weather_data",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", String(16), nullable=False, index=True),
    Column("city", String(255), nullable=False, index=True),
    Column("query_time", DateTime(timezone=True), nullable=False, index=True),
    Column("document", JSON, nullable=False),
)


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the city is matched as a literal substring."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _engine_from_url(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite is shared across threads through one connection."""
    if database_url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, future=True, **kwargs)
    return create_engine(database_url, future=True, pool_pre_ping=True)


class HistoryStore:
    """Persistence adapter over the ``weather_data`` table."""

    def __init__(self, database_url: str | None = None, *, engine: Engine | None = None) -> None:
        """Bind to a URL or a ready engine; neither means persistence is disabled."""
        self.database_url = database_url
        self._engine: Engine | None = engine
        self._ready = False
        self._attempted = False
        self._connect_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="history-writer")
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    @property
    def configured(self) -> bool:
        """True when a database URL or engine was supplied."""
        return bool(self.database_url) or self._engine is not None

    @property
    def ready(self) -> bool:
        """Connect on first access and report whether the store is usable."""
        self._ensure_connected()
        return self._ready

    def _ensure_connected(self) -> None:
        """Create the engine and schema once; failures leave the store unavailable."""
        if self._attempted:
            return
        with self._connect_lock:
            if self._attempted:
                return
            self._attempted = True
            if not self.configured:
                logger.info("No database configured; running without persistence")
                return
            masked = mask_db_url(self.database_url) if self.database_url else None
            try:
                if self._engine is None:
                    self._engine = _engine_from_url(self.database_url)
                metadata.create_all(self._engine)
                self._ready = True
                logger.info("Connected to history store", extra={"db_url": masked})
            except Exception as exc:
                logger.warning(
                    "History store connection failed; data will not be persisted",
                    extra={"db_url": masked, "error": str(exc)},
                )

    def record_current(self, record: CurrentWeatherRecord) -> None:
        """Queue a current-weather record for storage."""
        self._submit(RECORD_TYPE_CURRENT, record.city, record.model_dump(mode="json"))

    def record_forecast(self, record: ForecastRecord) -> None:
        """Queue a forecast record for storage."""
        self._submit(RECORD_TYPE_FORECAST, record.city, record.model_dump(mode="json"))

    def _submit(self, record_type: str, city: str, document: Dict[str, Any]) -> None:
        """Hand the write to the background worker; never raises."""
        if self._attempted and not self._ready:
            return
        query_time = dt.datetime.now(dt.timezone.utc)
        try:
            future = self._executor.submit(self._insert, record_type, city, document, query_time)
        except RuntimeError as exc:
            logger.error("History write rejected", extra={"type": record_type, "city": city, "error": str(exc)})
            return
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._on_write_done)

    def _insert(self, record_type: str, city: str, document: Dict[str, Any], query_time: dt.datetime) -> None:
        """Insert one document; runs on the writer thread."""
        if not self.ready:
            return
        with self._engine.begin() as conn:
            conn.execute(
                insert(weather_data).values(
                    type=record_type,
                    city=city,
                    query_time=query_time,
                    document=document,
                )
            )

    def _on_write_done(self, future: Future) -> None:
        """Log a failed write; the triggering request has already been answered."""
        with self._pending_lock:
            self._pending.discard(future)
        exc = future.exception()
        if exc is not None:
            logger.error("Database insert error", extra={"error": str(exc)})

    def query_history(
        self,
        city: str,
        limit: int,
        *,
        record_type: str = RECORD_TYPE_CURRENT,
    ) -> List[Dict[str, Any]]:
        """Return stored documents whose city contains ``city`` (case-insensitive), newest first."""
        if not self.ready:
            raise StoreError("Database not available")
        query = (
            select(weather_data.c.type, weather_data.c.query_time, weather_data.c.document)
            .where(weather_data.c.type == record_type)
            .where(weather_data.c.city.ilike(f"%{_escape_like(city)}%", escape="\\"))
            .order_by(weather_data.c.query_time.desc(), weather_data.c.id.desc())
            .limit(limit)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            logger.error("History query failed", extra={"city": city, "error": str(exc)})
            raise StoreError(str(exc)) from exc

        history = []
        for row in rows:
            query_time = row["query_time"]
            if query_time.tzinfo is None:
                query_time = query_time.replace(tzinfo=dt.timezone.utc)
            history.append({**row["document"], "type": row["type"], "query_time": to_iso(query_time)})
        return history

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until queued writes have finished (tests and shutdown)."""
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        """Drain pending writes and release the engine."""
        self._executor.shutdown(wait=True)
        if self._engine is not None:
            self._engine.dispose()
