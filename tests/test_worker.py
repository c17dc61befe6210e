import numpy as np
import pytest

from paintmate.document import Document
from paintmate.services import io as Sio
from paintmate.services.worker import FileWorker, OPEN, SAVE


@pytest.fixture
def worker():
    w = FileWorker()
    yield w
    w.shutdown()


def test_drain_without_work_returns_immediately(worker):
    assert worker.drain() == []


def test_open_result_carries_document(tmp_path, worker):
    px = np.full((2, 3, 4), 77, dtype=np.uint8)
    path = str(tmp_path / "in.png")
    Sio.save_image(path, px)

    worker.submit_open(path)
    worker.wait_idle()
    results = worker.drain()

    assert len(results) == 1
    res = results[0]
    assert res.ok and res.op == OPEN and res.path == path
    assert (res.document.width, res.document.height) == (3, 2)
    np.testing.assert_array_equal(res.document.layers[0].pixels, px)


def test_failures_come_back_as_results(tmp_path, worker):
    worker.submit_open(str(tmp_path / "missing.png"))
    worker.wait_idle()
    (res,) = worker.drain()
    assert not res.ok
    assert res.document is None
    assert "missing.png" in res.error


def test_save_uses_a_snapshot(tmp_path, worker):
    doc = Document.new(2, 2)
    doc.draw_pixel(0, 0, (255, 0, 0, 255))
    path = str(tmp_path / "out.png")

    worker.submit_save(path, doc)
    # later edits must not leak into the queued save
    doc.draw_pixel(1, 1, (0, 255, 0, 255))
    worker.wait_idle()

    (res,) = worker.drain()
    assert res.ok and res.op == SAVE
    saved = Sio.open_image(path)
    assert tuple(saved[0, 0]) == (255, 0, 0, 255)
    assert tuple(saved[1, 1]) == (255, 255, 255, 0)


def test_results_arrive_in_completion_order(tmp_path, worker):
    paths = []
    for i in range(3):
        p = str(tmp_path / f"{i}.png")
        Sio.save_image(p, np.full((1, 1, 4), i, dtype=np.uint8))
        paths.append(p)
        worker.submit_open(p)
    worker.wait_idle()
    assert [r.path for r in worker.drain()] == paths
