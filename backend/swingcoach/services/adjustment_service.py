"""
Feedback-driven score adjustments with correlation-aware propagation
"""

from typing import Dict, List, Optional

from swingcoach.models.analysis import (
    AdjustmentFactors,
    AdjustmentPreference,
    AdjustmentPriority,
    ScoreCard,
    SkillLevel,
)
from swingcoach.models.upload import Ownership
from swingcoach.services.document_store import (
    ADJUSTMENT_FACTORS_DOC,
    ANALYSIS_FEEDBACK,
    SYSTEM,
    DocumentStore,
    DocumentStoreError,
    document_store,
)
from swingcoach.services.score_shaper import (
    calculate_weighted_overall_score,
    clamp_score,
    metric_stats,
    redistribute,
    round_half_up,
)
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_registry import CORRELATED_GROUPS, MetricRegistry, metric_registry

logger = get_logger(__name__)

PROPAGATION_RATIO = 0.4
CLUSTER_MIN_METRICS = 4
CLUSTER_MAX_STD = 8
UNREALISTIC_AVG_GAP = 15
UNREALISTIC_OUTSIDE_SHARE = 0.4
PRO_SCORE_THRESHOLD = 85

EXPECTED_RANGES: Dict[SkillLevel, Dict[str, int]] = {
    SkillLevel.PRO: {"min": 70, "max": 99, "avg": 85},
    SkillLevel.ADVANCED: {"min": 60, "max": 95, "avg": 75},
    SkillLevel.AMATEUR: {"min": 40, "max": 85, "avg": 65},
    SkillLevel.BEGINNER: {"min": 30, "max": 75, "avg": 55},
}


def apply_adjustments(
    card: ScoreCard,
    factors: AdjustmentFactors,
    groups: Dict[str, List[str]] = CORRELATED_GROUPS,
    registry: MetricRegistry = metric_registry,
) -> ScoreCard:
    """
    Apply learned deltas to a score card.

    Direct per-metric deltas spread to the untouched members of the same
    correlated group at 40% of the group's mean direct delta. Any metric
    change triggers a weighted re-aggregation of the overall score, and the
    result is always redistributed.
    """
    overall = clamp_score(card.overall_score + factors.overall)
    metrics = dict(card.metrics)

    direct: Dict[str, int] = {}
    for key in card.metrics:
        delta = factors.metrics.get(key, 0)
        if delta:
            metrics[key] = clamp_score(metrics[key] + delta)
            direct[key] = delta

    propagated = False
    for group_name, members in groups.items():
        group_deltas = [direct[m] for m in members if m in direct]
        if not group_deltas:
            continue
        spread = round_half_up(PROPAGATION_RATIO * (sum(group_deltas) / len(group_deltas)))
        if spread == 0:
            continue
        for member in members:
            if member in metrics and member not in direct:
                metrics[member] = clamp_score(metrics[member] + spread)
                propagated = True
        logger.debug(f"Propagated {spread:+d} across {group_name}")

    if direct or propagated:
        weighted = calculate_weighted_overall_score(metrics, registry)
        if weighted is not None:
            overall = weighted

    adjusted = card.model_copy(update={"overall_score": overall, "metrics": metrics}, deep=True)
    return redistribute(adjusted)


def is_likely_pro_golfer_swing(
    card: ScoreCard,
    ownership: Optional[Ownership] = None,
    pro_name: Optional[str] = None,
) -> bool:
    """Heuristic used to pick expected score ranges when no skill level is known"""
    if ownership == Ownership.PRO or pro_name:
        return True
    if not card.metrics:
        return False
    mean, _ = metric_stats(card.metrics)
    return mean >= PRO_SCORE_THRESHOLD and card.overall_score >= PRO_SCORE_THRESHOLD


def has_score_clustering(card: ScoreCard) -> bool:
    if len(card.metrics) < CLUSTER_MIN_METRICS:
        return False
    _, std = metric_stats(card.metrics)
    return std < CLUSTER_MAX_STD


def has_unrealistic_scores(card: ScoreCard, skill_level: SkillLevel) -> bool:
    if not card.metrics:
        return False
    expected = EXPECTED_RANGES[skill_level]
    mean, _ = metric_stats(card.metrics)
    if abs(mean - expected["avg"]) > UNREALISTIC_AVG_GAP:
        return True
    outside = sum(1 for s in card.metrics.values() if s < expected["min"] or s > expected["max"])
    return outside / len(card.metrics) > UNREALISTIC_OUTSIDE_SHARE


def should_adjust(card: ScoreCard, preference: AdjustmentPreference, likely_pro: bool = False) -> bool:
    """Decide whether learned factors apply to this analysis"""
    if preference.adjustment_priority == AdjustmentPriority.NEVER:
        return False
    if preference.adjustment_priority == AdjustmentPriority.ALWAYS:
        return True

    if has_score_clustering(card):
        return True
    skill_level = preference.skill_level or (SkillLevel.PRO if likely_pro else SkillLevel.AMATEUR)
    return has_unrealistic_scores(card, skill_level)


class AdjustmentEngine:
    """Loads factors and preferences from the document store and applies them"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def load_factors(self) -> AdjustmentFactors:
        try:
            doc = await self.store.get_document(SYSTEM, ADJUSTMENT_FACTORS_DOC)
        except DocumentStoreError as e:
            logger.warning(f"Could not load adjustment factors, using none: {e}")
            return AdjustmentFactors()
        if not doc:
            return AdjustmentFactors()
        try:
            return AdjustmentFactors.model_validate(doc.get("factors", doc))
        except ValueError as e:
            logger.warning(f"Ignoring malformed adjustment factors: {e}")
            return AdjustmentFactors()

    async def load_preference(
        self, user_id: Optional[str] = None, video_signature: Optional[str] = None
    ) -> AdjustmentPreference:
        """Preference from the caller's most recent feedback record"""
        if not user_id and not video_signature:
            return AdjustmentPreference()
        try:
            records = await self.store.list_documents(ANALYSIS_FEEDBACK)
        except DocumentStoreError as e:
            logger.warning(f"Could not load adjustment preference: {e}")
            return AdjustmentPreference()

        if user_id:
            matching = [r for r in records if r.get("userId") == user_id]
        else:
            matching = [r for r in records if r.get("videoSignature") == video_signature]
        if not matching:
            return AdjustmentPreference()

        latest = max(matching, key=lambda r: str(r.get("timestamp", "")))
        try:
            return AdjustmentPreference.model_validate({
                "adjustmentPriority": latest.get("adjustmentPriority") or AdjustmentPriority.AS_NEEDED.value,
                "skillLevel": latest.get("skillLevel"),
            })
        except ValueError as e:
            logger.warning(f"Ignoring malformed adjustment preference: {e}")
            return AdjustmentPreference()

    async def adjust(
        self,
        card: ScoreCard,
        factors: Optional[AdjustmentFactors] = None,
        preference: Optional[AdjustmentPreference] = None,
        likely_pro: bool = False,
    ) -> ScoreCard:
        """Apply factors when the preference allows it; always finish with redistribution"""
        factors = factors if factors is not None else await self.load_factors()
        preference = preference or AdjustmentPreference()

        if factors.is_empty or not should_adjust(card, preference, likely_pro):
            return redistribute(card)

        logger.info(
            f"Applying adjustment factors (overall {factors.overall:+d}, "
            f"{len(factors.metrics)} metric deltas)"
        )
        return apply_adjustments(card, factors)


adjustment_engine = AdjustmentEngine(document_store)
