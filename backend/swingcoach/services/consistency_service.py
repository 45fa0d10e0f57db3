"""
Run-to-run consistency for repeated analyses of the same video
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, Optional

from swingcoach.models.analysis import AnalysisHistoryEntry, ScoreCard
from swingcoach.services.history_store import HistoryStore, history_store
from swingcoach.services.score_shaper import blend, round_half_up
from swingcoach.utils.logger import get_logger

logger = get_logger(__name__)

OVERALL_BLEND_THRESHOLD = 8
METRIC_BLEND_THRESHOLD = 10


class ConsistencyBlender:
    """Blends a new analysis with the latest prior analysis of the same video"""

    def __init__(self, store: HistoryStore):
        self.store = store
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def _signature_lock(self, signature: str):
        """Serialize blends per signature; the lock is dropped once nobody holds or awaits it"""
        lock = self._locks.setdefault(signature, asyncio.Lock())
        self._waiters[signature] = self._waiters.get(signature, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[signature] -= 1
            if not self._waiters[signature]:
                del self._waiters[signature]
                del self._locks[signature]

    async def blend(self, card: ScoreCard, signature: str, timestamp: Optional[datetime] = None) -> ScoreCard:
        """
        Damp large swings against the most recent history entry and record the result

        Args:
            card: Shaped scores for the current submission
            signature: Video signature the history is keyed by
            timestamp: Entry timestamp, defaults to now

        Returns:
            The blended score card (unchanged when there is no history)
        """
        async with self._signature_lock(signature):
            entries = await self.store.get_list(signature)
            result = card

            if entries:
                prior = entries[-1]
                overall = card.overall_score
                if abs(overall - prior.overall_score) > OVERALL_BLEND_THRESHOLD:
                    overall = blend(overall, prior.overall_score)
                    logger.info(
                        f"Blended overall for {signature}: {card.overall_score} vs prior "
                        f"{prior.overall_score} -> {overall}"
                    )

                metrics = dict(card.metrics)
                for key, score in card.metrics.items():
                    if key in prior.metrics and abs(score - prior.metrics[key]) > METRIC_BLEND_THRESHOLD:
                        metrics[key] = blend(score, prior.metrics[key])

                result = card.model_copy(update={"overall_score": overall, "metrics": metrics}, deep=True)

            entry = AnalysisHistoryEntry(
                timestamp=timestamp or datetime.now(timezone.utc),
                overall_score=round_half_up(result.overall_score),
                metrics={k: round_half_up(v) for k, v in result.metrics.items()},
            )
            await self.store.append(signature, entry)
            return result


consistency_blender = ConsistencyBlender(history_store)
