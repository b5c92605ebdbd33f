# supplier_ledger/modules/ledger/sync.py
"""
Background persistence for the reconciliation store.

Purpose
-------
Run document-store calls off the owning thread and report completion back
to it through queued Qt signals.

Public interface
----------------
- RemoteWrite: ordered steps (put / delete / batch_update) plus the entity
  keys ("collection/id") they touch.
- BackgroundRunner.run(work) -> ticket; emits finished(ticket, result, error)
  on the runner's thread.
- WriteQueue.submit(write); emits failed(description, error) and drained().

Ordering
--------
A write starts only when none of its keys is in flight and no earlier
pending write shares one of its keys. Writes touching the same entity run
in submission order; unrelated writes run concurrently. There is no retry,
timeout or cancellation.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Qt, Signal, Slot

from ...database.document_store import DocumentStore


def entity_key(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


class RemoteWrite:
    """
    One persistence job: steps executed sequentially in a single worker.

        RemoteWrite("Deleting payment p1").delete("payments", "p1")
    """

    def __init__(self, description: str):
        self.description = description
        self.steps: List[Tuple[str, tuple]] = []
        self._keys: set = set()

    @property
    def keys(self) -> FrozenSet[str]:
        return frozenset(self._keys)

    def put(self, collection: str, doc_id: str, record: Dict[str, Any]) -> "RemoteWrite":
        self.steps.append(("put", (collection, doc_id, record)))
        self._keys.add(entity_key(collection, doc_id))
        return self

    def delete(self, collection: str, doc_id: str) -> "RemoteWrite":
        self.steps.append(("delete", (collection, doc_id)))
        self._keys.add(entity_key(collection, doc_id))
        return self

    def batch_update(self, collection: str, partials: Iterable[Dict[str, Any]]) -> "RemoteWrite":
        partials = list(partials)
        if partials:
            self.steps.append(("batch_update", (collection, partials)))
            self._keys.update(entity_key(collection, p["id"]) for p in partials)
        return self

    def __bool__(self) -> bool:
        return bool(self.steps)

    def run(self, remote: DocumentStore) -> None:
        for method, args in self.steps:
            getattr(remote, method)(*args)

    def __repr__(self) -> str:
        return f"RemoteWrite({self.description!r}, steps={[m for m, _ in self.steps]})"


# ----------------------------
# Background execution
# ----------------------------

class _JobRunnable(QRunnable):
    """Thin QRunnable wrapper that executes a callable."""

    def __init__(self, work: Callable[[], None]) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._work = work

    @Slot()
    def run(self) -> None:  # type: ignore[override]
        self._work()


class BackgroundRunner(QObject):
    """
    Runs callables on a thread pool. finished(ticket, result, error) is
    delivered on the thread that owns the runner; error is None on success.
    """

    finished = Signal(int, object, object)
    _done = Signal(int, object, object)

    def __init__(self, pool: Optional[QThreadPool] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._tickets = itertools.count(1)
        self._done.connect(self._deliver, Qt.QueuedConnection)

    def run(self, work: Callable[[], Any]) -> int:
        ticket = next(self._tickets)

        def job() -> None:
            try:
                result = work()
            except Exception as exc:  # reported to the owning thread
                self._done.emit(ticket, None, exc)
            else:
                self._done.emit(ticket, result, None)

        self._pool.start(_JobRunnable(job))
        return ticket

    @Slot(int, object, object)
    def _deliver(self, ticket: int, result: Any, error: Any) -> None:
        self.finished.emit(ticket, result, error)


class WriteQueue(QObject):
    """Per-entity ordered queue of RemoteWrite jobs."""

    failed = Signal(str, object)
    drained = Signal()

    def __init__(
        self,
        remote: DocumentStore,
        pool: Optional[QThreadPool] = None,
        logger: Optional[logging.Logger] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._remote = remote
        self._log = logger or logging.getLogger(__name__)
        self._runner = BackgroundRunner(pool, parent=self)
        self._runner.finished.connect(self._on_finished)
        self._pending: List[RemoteWrite] = []
        self._running: Dict[int, RemoteWrite] = {}

    @property
    def pending_count(self) -> int:
        """Writes queued or in flight."""
        return len(self._pending) + len(self._running)

    def in_flight_keys(self) -> FrozenSet[str]:
        keys: set = set()
        for write in self._running.values():
            keys |= write.keys
        return frozenset(keys)

    def submit(self, write: RemoteWrite) -> None:
        if not write:
            return
        self._pending.append(write)
        self._pump()

    def _pump(self) -> None:
        blocked = set(self.in_flight_keys())
        waiting: List[RemoteWrite] = []
        for write in self._pending:
            if write.keys & blocked:
                waiting.append(write)
            else:
                self._start(write)
            blocked |= write.keys
        self._pending = waiting

    def _start(self, write: RemoteWrite) -> None:
        self._log.debug("Persisting: %s", write.description)
        ticket = self._runner.run(lambda: write.run(self._remote))
        self._running[ticket] = write

    @Slot(int, object, object)
    def _on_finished(self, ticket: int, _result: Any, error: Any) -> None:
        write = self._running.pop(ticket, None)
        if write is None:
            return
        if error is not None:
            self._log.error("%s failed: %s", write.description, error)
            self.failed.emit(write.description, error)
        self._pump()
        if not self._pending and not self._running:
            self.drained.emit()
