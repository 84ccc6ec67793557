# marketplace/scheduler.py
"""Background worker pool for out-of-band cache refills.

Jobs are submitted as run-once APScheduler jobs; the request that submitted
one never waits on it. Failures reach the log through the EVENT_JOB_ERROR
listener.
"""
from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from .utils import get_logger

logger = get_logger("refill")


class RefillScheduler:
    def __init__(self, workers: int = 4, scheduler: BackgroundScheduler = None):
        self._scheduler = scheduler or BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(workers)},
            # a refill queued behind a busy pool still has to run
            job_defaults={"misfire_grace_time": None, "coalesce": False},
        )
        self._scheduler.add_listener(self._on_error, EVENT_JOB_ERROR)

    def start(self):
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Refill scheduler started")

    def shutdown(self, wait: bool = False):
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Refill scheduler stopped")

    def submit(self, func, *args, name: str = None):
        self._scheduler.add_job(func, args=list(args), name=name or func.__name__)

    @staticmethod
    def _on_error(event):
        logger.error("Background job %s failed: %s", event.job_id, event.exception)
