from __future__ import annotations
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional

log = logging.getLogger(__name__)

JOBS: Dict[str, Dict[str, Any]] = {}
_LOCK = threading.Lock()
MAX_FINISHED_JOBS = 256

Done = Callable[[Any, Optional[BaseException]], None]


def _evict_finished() -> None:
    finished = [jid for jid, j in JOBS.items() if j["status"] in ("done", "error")]
    for jid in finished[: max(0, len(finished) - MAX_FINISHED_JOBS)]:
        JOBS.pop(jid, None)


def start_job(job_fn: Callable[[], Any], on_done: Done) -> str:
    """Run ``job_fn`` on a daemon thread and hand its outcome to ``on_done``.

    ``on_done`` always receives ``(result, None)`` or ``(None, error)``; it
    runs on the worker thread, so whatever it touches must be locked.
    """
    job_id = uuid.uuid4().hex[:12]
    with _LOCK:
        JOBS[job_id] = {"status": "queued", "error": None, "started": time.time()}

    def _run():
        with _LOCK:
            JOBS[job_id]["status"] = "running"
        try:
            result = job_fn()
        except Exception as e:
            with _LOCK:
                JOBS[job_id]["status"] = "error"
                JOBS[job_id]["error"] = str(e)
                _evict_finished()
            on_done(None, e)
            return
        with _LOCK:
            JOBS[job_id]["status"] = "done"
            _evict_finished()
        on_done(result, None)

    th = threading.Thread(target=_run, name=f"job-{job_id}", daemon=True)
    th.start()
    return job_id


def get_job(job_id: str) -> Dict[str, Any] | None:
    with _LOCK:
        job = JOBS.get(job_id)
        return dict(job) if job else None
