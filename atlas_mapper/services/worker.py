from __future__ import annotations

import dataclasses
import logging
import queue
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..coords.normalizer import CoordinateCache
from ..models.drop_record import DropRecord
from ..models.materialize_result import MaterializeResult
from ..models.point import NormalizedPoint
from .filtering import SortSpec, filter_and_sort
from .materializer import DropSink, MaterializeOptions, materialize
from .progress import ProgressCallback

"""Background worker for materialization and filtering.

The worker runs in its own thread and talks to its client only through
messages on queues:
- requests: PROCESS_DATA, FILTER_DATA
- responses: PROGRESS (fraction after each chunk), COMPLETE, ERROR

Each request carries its own reply queue. The worker owns a CoordinateCache
that is never shared with the calling thread; it fills up independently.
A structural materialization failure is a COMPLETE carrying a failed
MaterializeResult. ERROR is reserved for unexpected exceptions.
"""

__all__ = [
    "DataWorker",
    "DataWorkerClient",
    "MessageType",
    "WorkerBusyError",
    "WorkerError",
    "WorkerMessage",
]

logger = logging.getLogger(__name__)


class WorkerError(Exception):
    """Raised on the client side when the worker answers with ERROR."""


class WorkerBusyError(WorkerError):
    """Raised when PROCESS_DATA is requested while another is in flight."""


class MessageType(str, Enum):
    PROCESS_DATA = "PROCESS_DATA"
    FILTER_DATA = "FILTER_DATA"
    PROGRESS = "PROGRESS"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class WorkerMessage:
    type: MessageType
    payload: dict[str, Any] = field(default_factory=dict)
    reply_to: queue.Queue[WorkerMessage] | None = None


class DataWorker:
    """Message loop executing requests one at a time on a daemon thread."""

    def __init__(self, options: MaterializeOptions | None = None) -> None:
        # tqdm belongs to the foreground; the worker only reports fractions
        self.options = dataclasses.replace(options or MaterializeOptions(), show_progress=False)
        self.cache = CoordinateCache()
        self.inbox: queue.Queue[WorkerMessage | None] = queue.Queue()
        self._thread = threading.Thread(target=self._run, name="atlas-data-worker", daemon=True)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()

    def post(self, message: WorkerMessage) -> None:
        self.inbox.put(message)

    def stop(self, timeout: float | None = 5.0) -> None:
        if self._thread.is_alive():
            self.inbox.put(None)
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            message = self.inbox.get()
            if message is None:
                break
            reply = message.reply_to
            if reply is None:
                logger.warning("worker: dropping %s without reply queue", message.type.value)
                continue
            try:
                reply.put(self._handle(message, reply))
            except Exception as e:
                logger.exception("worker: %s failed", message.type.value)
                reply.put(WorkerMessage(MessageType.ERROR, {"message": str(e) or type(e).__name__}))

    def _handle(self, message: WorkerMessage, reply: queue.Queue[WorkerMessage]) -> WorkerMessage:
        payload = message.payload
        if message.type is MessageType.PROCESS_DATA:
            def _report(fraction: float) -> None:
                reply.put(WorkerMessage(MessageType.PROGRESS, {"progress": fraction}))

            drops: list[DropRecord] | None = [] if payload.get("collect_drops") else None
            result = materialize(
                payload["rows"],
                options=self.options,
                cache=self.cache,
                on_progress=_report,
                drop_sink=drops.append if drops is not None else None,
            )
            return WorkerMessage(MessageType.COMPLETE, {"result": result, "drops": drops or []})

        if message.type is MessageType.FILTER_DATA:
            points = filter_and_sort(
                payload["points"],
                payload.get("category_filter"),
                payload.get("search_query"),
                payload.get("sort"),
            )
            return WorkerMessage(MessageType.COMPLETE, {"points": points})

        raise WorkerError(f"Unknown message type: {message.type.value}")


class DataWorkerClient:
    """Foreground handle on a DataWorker.

    Usage:
        with DataWorkerClient() as client:
            result = client.process_raw_data(rows, on_progress=print)
            visible = client.filter_data(result.points, "Town", "", None)
    """

    def __init__(self, options: MaterializeOptions | None = None, *, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._worker: DataWorker | None = DataWorker(options)
        self._worker.start()
        self._lock = threading.Lock()
        self._processing = False

    @property
    def is_processing(self) -> bool:
        return self._processing

    def _require_worker(self) -> DataWorker:
        if self._worker is None or not self._worker.alive:
            raise WorkerError("Worker not available")
        return self._worker

    def _await_complete(
        self,
        reply: queue.Queue[WorkerMessage],
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        while True:
            try:
                message = reply.get(timeout=self.timeout)
            except queue.Empty as e:
                raise WorkerError(f"worker did not answer within {self.timeout}s") from e
            if message.type is MessageType.PROGRESS:
                if on_progress is not None:
                    on_progress(message.payload["progress"])
                continue
            if message.type is MessageType.COMPLETE:
                return message.payload
            if message.type is MessageType.ERROR:
                raise WorkerError(message.payload.get("message", "Unknown error"))
            raise WorkerError(f"unexpected response: {message.type.value}")

    def process_raw_data(
        self,
        rows: Iterable[Mapping[str, Any]],
        on_progress: ProgressCallback | None = None,
        drop_sink: DropSink | None = None,
    ) -> MaterializeResult:
        """Materialize ``rows`` on the worker thread.

        Drop records are collected by the worker and replayed into
        ``drop_sink`` on the calling thread once the pass completes.

        Raises:
            WorkerBusyError: If another PROCESS_DATA request is in flight
            WorkerError: If the worker is gone or fails unexpectedly
        """
        worker = self._require_worker()
        with self._lock:
            if self._processing:
                raise WorkerBusyError("Worker is already processing data")
            self._processing = True
        try:
            reply: queue.Queue[WorkerMessage] = queue.Queue()
            # rows are copied so the worker never sees later caller mutations
            copied = [dict(r) if isinstance(r, Mapping) else r for r in rows]
            payload = {"rows": copied, "collect_drops": drop_sink is not None}
            worker.post(WorkerMessage(MessageType.PROCESS_DATA, payload, reply))
            response = self._await_complete(reply, on_progress)
            if drop_sink is not None:
                for record in response["drops"]:
                    drop_sink(record)
            return response["result"]
        finally:
            with self._lock:
                self._processing = False

    def filter_data(
        self,
        points: Sequence[NormalizedPoint],
        category_filter: str | None,
        search_query: str | None,
        sort: SortSpec | None = None,
    ) -> list[NormalizedPoint]:
        worker = self._require_worker()
        reply: queue.Queue[WorkerMessage] = queue.Queue()
        payload = {
            "points": list(points),
            "category_filter": category_filter,
            "search_query": search_query,
            "sort": sort,
        }
        worker.post(WorkerMessage(MessageType.FILTER_DATA, payload, reply))
        return self._await_complete(reply)["points"]

    def destroy(self) -> None:
        if self._worker is not None:
            self._worker.stop()
            self._worker = None
        self._processing = False

    def __enter__(self) -> DataWorkerClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.destroy()
