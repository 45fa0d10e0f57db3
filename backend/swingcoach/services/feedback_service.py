"""
Persistence of user feedback on analyses and individual metric scores
"""

from typing import Any, Dict

from swingcoach.config.base import settings
from swingcoach.models.analysis import FeedbackRecord, MetricFeedbackRecord
from swingcoach.services.adjustment_calculator import track_model_accuracy
from swingcoach.services.document_store import (
    ANALYSIS_FEEDBACK,
    METRIC_FEEDBACK,
    DocumentStore,
    DocumentStoreError,
    StoragePermissionError,
    document_store,
)
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_registry import metric_registry

logger = get_logger(__name__)


class FeedbackCollector:
    """Appends feedback documents; factor recomputation runs separately in the worker"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _append(self, collection: str, data: Dict[str, Any], analysis_id: str) -> bool:
        try:
            doc_id = await self.store.add_document(collection, data)
        except StoragePermissionError as e:
            logger.error(f"Permission denied storing {collection} for analysis {analysis_id}: {e}")
            return False
        except DocumentStoreError as e:
            logger.error(f"Failed to store {collection} for analysis {analysis_id}: {e}")
            return False
        logger.info(f"Stored {collection} {doc_id} for analysis {analysis_id}")
        return True

    async def submit_feedback(self, record: FeedbackRecord) -> bool:
        if record.model_version is None:
            record = record.model_copy(update={"model_version": settings.MODEL_VERSION_TAG})
        metric_feedback = {
            metric_registry.canonical(key): verdict
            for key, verdict in record.metric_feedback.items()
        }
        record = record.model_copy(update={"metric_feedback": metric_feedback})
        data = record.model_dump(mode="json", by_alias=True)
        return await self._append(ANALYSIS_FEEDBACK, data, record.analysis_id)

    async def submit_metric_feedback(self, record: MetricFeedbackRecord) -> bool:
        record = record.model_copy(update={"metric_key": metric_registry.canonical(record.metric_key)})
        data = record.model_dump(mode="json", by_alias=True)
        return await self._append(METRIC_FEEDBACK, data, record.analysis_id)

    async def model_accuracy(self) -> Dict[str, Any]:
        """Weekly accuracy of the scoring model from analysis feedback"""
        try:
            records = await self.store.list_documents(ANALYSIS_FEEDBACK)
        except DocumentStoreError as e:
            logger.error(f"Could not read feedback for accuracy tracking: {e}")
            return {"success": False, "error": str(e)}
        return {"success": True, **track_model_accuracy(records)}


feedback_collector = FeedbackCollector(document_store)
