from __future__ import annotations

import queue
import threading

import pytest

from atlas_mapper.models.drop_record import DropRecord
from atlas_mapper.services.filtering import COMPUTED_LATITUDE, SortSpec
from atlas_mapper.services.materializer import MaterializeOptions
from atlas_mapper.services.worker import (
    DataWorker,
    DataWorkerClient,
    MessageType,
    WorkerBusyError,
    WorkerError,
    WorkerMessage,
)


def _rows(n: int) -> list[dict[str, str]]:
    return [
        {"Original name on the map": f"Place {i}", "Soortnaam/Category": "Town" if i % 2 else "Fort", "Coordinates": f"{i % 80}N/{i % 170}E"}
        for i in range(n)
    ]


@pytest.fixture()
def client():
    c = DataWorkerClient(MaterializeOptions(chunk_size=10), timeout=10)
    yield c
    c.destroy()


def test_process_raw_data_reports_progress(client: DataWorkerClient):
    fractions: list[float] = []
    result = client.process_raw_data(_rows(35), on_progress=fractions.append)
    assert result.ok
    assert len(result.points) == 35
    assert result.points[0].id == "point-0"
    assert fractions == pytest.approx([10 / 35, 20 / 35, 30 / 35, 1.0])
    assert client.is_processing is False


def test_process_structural_failure_is_a_result(client: DataWorkerClient):
    result = client.process_raw_data([{"Name": "x"}])
    assert not result.ok
    assert "Coordinates" in result.error


def test_drops_are_replayed_on_caller(client: DataWorkerClient):
    drops: list[DropRecord] = []
    rows = _rows(2) + [{"Name": "y", "Soortnaam/Category": "Town", "Coordinates": "??"}]
    client.process_raw_data(rows, drop_sink=drops.append)
    assert [d.reason for d in drops] == ["EMPTY_COORDINATES"]


def test_rows_are_copied(client: DataWorkerClient):
    rows = _rows(1)
    result = client.process_raw_data(rows)
    rows[0]["Original name on the map"] = "changed"
    assert result.points[0].row_data["Original name on the map"] == "Place 0"


def test_filter_data(client: DataWorkerClient):
    points = client.process_raw_data(_rows(6)).points
    visible = client.filter_data(points, "Town", "", SortSpec(COMPUTED_LATITUDE, "desc"))
    assert [p.original_name for p in visible] == ["Place 5", "Place 3", "Place 1"]


def test_busy_while_processing(client: DataWorkerClient):
    started = threading.Event()
    release = threading.Event()

    def _block(fraction: float) -> None:
        started.set()
        release.wait(5)

    errors: list[Exception] = []

    def _run() -> None:
        try:
            client.process_raw_data(_rows(5), on_progress=_block)
        except Exception as e:  # pragma: no cover
            errors.append(e)

    t = threading.Thread(target=_run)
    t.start()
    assert started.wait(5)
    with pytest.raises(WorkerBusyError):
        client.process_raw_data(_rows(1))
    release.set()
    t.join(5)
    assert errors == []
    assert client.process_raw_data(_rows(1)).ok


def test_unexpected_exception_becomes_worker_error(client: DataWorkerClient):
    with pytest.raises(WorkerError):
        client.filter_data([object()], "all", "x")  # type: ignore[list-item]


def test_destroyed_client_rejects_requests():
    c = DataWorkerClient()
    c.destroy()
    with pytest.raises(WorkerError, match="Worker not available"):
        c.process_raw_data(_rows(1))


def test_context_manager_stops_worker():
    with DataWorkerClient() as c:
        worker = c._worker
        assert worker is not None and worker.alive
    assert not worker.alive


def test_worker_answers_error_for_missing_payload():
    worker = DataWorker()
    worker.start()
    try:
        reply: queue.Queue[WorkerMessage] = queue.Queue()
        worker.post(WorkerMessage(MessageType.PROCESS_DATA, {}, reply))
        message = reply.get(timeout=5)
        assert message.type is MessageType.ERROR
    finally:
        worker.stop()


def test_worker_does_not_show_progress_bar():
    worker = DataWorker(MaterializeOptions(show_progress=True))
    assert worker.options.show_progress is False
