# paintmate/services/worker.py
"""Background file I/O.

Requests go in through :meth:`FileWorker.submit_open` / :meth:`submit_save`
(any thread), results come back through :meth:`FileWorker.drain`, which the
UI thread calls once per frame. The worker never touches the live document:
a save request carries its own copy.
"""
from __future__ import annotations
import logging
import queue
import threading
from dataclasses import dataclass
from typing import List, Optional

from paintmate.document import Document
from paintmate.errors import ImageIOError
from paintmate.services import io as Sio

logger = logging.getLogger(__name__)

OPEN = "open"
SAVE = "save"


@dataclass
class FileResult:
    op: str                                  # OPEN | SAVE
    path: str
    document: Optional[Document] = None      # decoded document for OPEN
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _Request:
    op: str
    path: str
    document: Optional[Document] = None


_STOP = object()


class FileWorker:
    def __init__(self):
        self._requests: "queue.Queue[object]" = queue.Queue()
        self._results: "queue.Queue[FileResult]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="paintmate-file-io", daemon=True)
        self._thread.start()

    def submit_open(self, path: str) -> None:
        self.start()
        self._requests.put(_Request(OPEN, path))

    def submit_save(self, path: str, doc: Document) -> None:
        self.start()
        self._requests.put(_Request(SAVE, path, doc.copy()))

    def drain(self) -> List[FileResult]:
        """All results completed so far, in completion order. Never blocks."""
        out: List[FileResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except queue.Empty:
                return out

    def shutdown(self, timeout: Optional[float] = 2.0) -> None:
        if self._thread is None:
            return
        self._requests.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    def wait_idle(self) -> None:
        """Block until every submitted request is processed (tests, shutdown)."""
        self._requests.join()

    # ---- worker thread ----
    def _run(self) -> None:
        while True:
            req = self._requests.get()
            try:
                if req is _STOP:
                    return
                self._results.put(self._handle(req))
            finally:
                self._requests.task_done()

    def _handle(self, req: _Request) -> FileResult:
        try:
            if req.op == OPEN:
                doc = Document.from_pixels(Sio.open_image(req.path))
                return FileResult(OPEN, req.path, document=doc)
            Sio.save_image(req.path, req.document.flatten())
            return FileResult(SAVE, req.path)
        except ImageIOError as e:
            logger.error("%s %s failed: %s", req.op, req.path, e)
            return FileResult(req.op, req.path, error=str(e))
        except Exception as e:
            # keep the worker alive, report the failure like an I/O error
            logger.exception("unexpected error during %s %s", req.op, req.path)
            return FileResult(req.op, req.path, error=f"{type(e).__name__}: {e}")
