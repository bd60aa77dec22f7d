"""Persistence layer for saved mortgage calculations.

This module keeps the history of calculations users chose to save. Two
backends share one contract: a JSON file holding ``{"entries": [...]}``, the
default for local use, and any SQLAlchemy-compatible URL (SQLite,
PostgreSQL, MySQL) for shared deployments. Both keep at most
``max_entries`` records, evicting the oldest inserted ones first, and list
records newest first.

Each operation reads the durable state, mutates it and writes it back under
a per-store lock. Nothing is cached between calls, so after a failed write
the next call starts again from what is on disk.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 50

Base = declarative_base()


class HistoryStoreError(RuntimeError):
    """Raised when the history cannot be read from or written to storage."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class HistoryEntry:
    """A saved calculation.

    ``inputs`` and ``results`` are stored exactly as supplied; the store
    never looks inside them.
    """

    id: str
    created_at: str
    inputs: Any = None
    results: Any = None
    label: Optional[str] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=data["id"],
            created_at=data["created_at"],
            inputs=data.get("inputs"),
            results=data.get("results"),
            label=data.get("label"),
        )


def _newest_first(entries: List[HistoryEntry]) -> List[HistoryEntry]:
    # reversed() first so equal timestamps keep the later insertion in front
    return sorted(reversed(entries), key=lambda e: e.created_at, reverse=True)


class JsonHistoryStore:
    """History kept in a single JSON document on disk."""

    def __init__(
        self,
        path: Union[str, Path],
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._path = Path(path)
        self._max_entries = max_entries
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def list_entries(self) -> List[HistoryEntry]:
        with self._lock:
            return _newest_first(self._read())

    def add_entry(self, inputs: Any, results: Any, label: Optional[str] = None) -> HistoryEntry:
        with self._lock:
            entries = self._read()
            entry = HistoryEntry(
                id=self._id_factory(),
                created_at=self._clock().isoformat(),
                inputs=inputs,
                results=results,
                label=label,
            )
            entries.append(entry)
            if self._max_entries and len(entries) > self._max_entries:
                dropped = len(entries) - self._max_entries
                entries = entries[dropped:]
                logger.debug("Evicted %d history entries from %s", dropped, self._path)
            self._write(entries)
        logger.debug("Saved history entry %s", entry.id)
        return entry

    def remove_entry(self, entry_id: str) -> bool:
        with self._lock:
            entries = self._read()
            remaining = [e for e in entries if e.id != entry_id]
            if len(remaining) == len(entries):
                return False
            self._write(remaining)
        logger.debug("Removed history entry %s", entry_id)
        return True

    def _read(self) -> List[HistoryEntry]:
        if not self._path.exists():
            return []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return [HistoryEntry.from_dict(item) for item in data.get("entries", [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise HistoryStoreError(f"Could not read history from {self._path}") from exc

    def _write(self, entries: List[HistoryEntry]) -> None:
        payload = {"entries": [e.to_dict() for e in entries]}
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise HistoryStoreError(f"Could not write history to {self._path}") from exc


class HistoryEntryModel(Base):
    __tablename__ = "mortgage_history"

    # insertion order; eviction follows this, not created_at
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    label = Column(String(255), nullable=True)
    inputs_json = Column(Text, nullable=False)
    results_json = Column(Text, nullable=False)


class SqlHistoryStore:
    """Database-backed history store."""

    def __init__(
        self,
        url: str,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_entries = max_entries
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.Lock()

    def list_entries(self) -> List[HistoryEntry]:
        try:
            with self._session_factory() as session:
                rows = session.execute(
                    select(HistoryEntryModel).order_by(
                        HistoryEntryModel.created_at.desc(), HistoryEntryModel.seq.desc()
                    )
                ).scalars()
                return [self._to_entry(row) for row in rows]
        except SQLAlchemyError as exc:
            raise HistoryStoreError("Could not read history from the database") from exc

    def add_entry(self, inputs: Any, results: Any, label: Optional[str] = None) -> HistoryEntry:
        created_at = self._clock()
        try:
            row = HistoryEntryModel(
                id=self._id_factory(),
                created_at=created_at,
                label=label,
                inputs_json=json.dumps(inputs),
                results_json=json.dumps(results),
            )
        except (TypeError, ValueError) as exc:
            raise HistoryStoreError("History payload is not JSON serialisable") from exc
        try:
            with self._lock, self._session_factory() as session:
                session.add(row)
                session.flush()
                self._trim(session)
                session.commit()
        except SQLAlchemyError as exc:
            raise HistoryStoreError("Could not write history to the database") from exc
        logger.debug("Saved history entry %s", row.id)
        return HistoryEntry(
            id=row.id,
            created_at=created_at.isoformat(),
            inputs=inputs,
            results=results,
            label=label,
        )

    def remove_entry(self, entry_id: str) -> bool:
        try:
            with self._lock, self._session_factory() as session:
                result = session.execute(
                    delete(HistoryEntryModel)
                    .where(HistoryEntryModel.id == entry_id)
                    .execution_options(synchronize_session=False)
                )
                if not result.rowcount:
                    session.rollback()
                    return False
                session.commit()
        except SQLAlchemyError as exc:
            raise HistoryStoreError("Could not write history to the database") from exc
        logger.debug("Removed history entry %s", entry_id)
        return True

    def _trim(self, session) -> None:
        if not self._max_entries or self._max_entries < 0:
            return
        stale = session.execute(
            select(HistoryEntryModel.seq)
            .order_by(HistoryEntryModel.seq.desc())
            .offset(self._max_entries)
        ).scalars().all()
        if stale:
            session.execute(
                delete(HistoryEntryModel)
                .where(HistoryEntryModel.seq.in_(stale))
                .execution_options(synchronize_session=False)
            )
            logger.debug("Evicted %d history entries", len(stale))

    @staticmethod
    def _to_entry(row: HistoryEntryModel) -> HistoryEntry:
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return HistoryEntry(
            id=row.id,
            created_at=created_at.isoformat(),
            inputs=json.loads(row.inputs_json),
            results=json.loads(row.results_json),
            label=row.label,
        )


HistoryStore = Union[JsonHistoryStore, SqlHistoryStore]


def create_store_from_env(
    url: Optional[str] = None,
    path: Optional[str] = None,
    max_entries: int = DEFAULT_MAX_ENTRIES,
) -> HistoryStore:
    if url:
        return SqlHistoryStore(url, max_entries=max_entries)
    return JsonHistoryStore(path or "mortgage_history.json", max_entries=max_entries)
