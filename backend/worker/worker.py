"""
Celery worker for out-of-band feedback processing
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict

from celery import Celery

from swingcoach.config.base import settings
from swingcoach.services.adjustment_calculator import recompute_adjustment_factors
from swingcoach.services.document_store import DocumentStoreError, document_store
from swingcoach.utils.logger import get_logger

logger = get_logger(__name__)

# Create Celery app
celery_app = Celery(
    "swingcoach-ai-worker",
    broker=settings.BROKER_URL,
    backend=settings.RESULT_BACKEND
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=600,
    task_soft_time_limit=570,
    worker_prefetch_multiplier=1,
)


@celery_app.task(bind=True)
def process_feedback_task(self, force: bool = False) -> Dict:
    """
    Recompute the global adjustment factors from recent analysis feedback

    Args:
        force: Run even if the last run is more recent than the configured interval

    Returns:
        Dict with success flag, skipped flag and the stored factors
    """
    logger.info(f"Starting feedback processing (force={force})")
    self.update_state(state="PROCESSING", meta={"status": "Recomputing adjustment factors"})

    try:
        result = asyncio.run(recompute_adjustment_factors(document_store, force=force))
    except DocumentStoreError as e:
        logger.error(f"Feedback processing failed: {e}")
        return {"success": False, "error": str(e)}

    if result.get("skipped"):
        logger.info("Feedback processing skipped, factors are recent")
    else:
        logger.info(f"Feedback processing complete: {result.get('adjustmentFactors')}")
    return result


@celery_app.task
def health_check_task() -> Dict:
    """Health check task for worker monitoring"""
    store_ok = asyncio.run(document_store.health_check())
    return {
        "status": "healthy" if store_ok else "degraded",
        "worker": "swingcoach-ai-worker",
        "document_store": "available" if store_ok else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Periodic feedback processing
celery_app.conf.beat_schedule = {
    "process-feedback": {
        "task": "worker.worker.process_feedback_task",
        "schedule": settings.FEEDBACK_PROCESS_INTERVAL_HOURS * 3600.0,
    },
}

# Task routing
celery_app.conf.task_routes = {
    "worker.worker.process_feedback_task": {"queue": "feedback"},
    "worker.worker.health_check_task": {"queue": "health"},
}

if __name__ == "__main__":
    celery_app.start()
