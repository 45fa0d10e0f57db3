"""
Score shaping: weighted aggregation, variance stretching and redistribution

All functions are synchronous and side-effect free. They take plain metric
mappings or ScoreCards and return new values.
"""

import math
import random
import statistics
from typing import Dict, Optional

from swingcoach.models.analysis import MAX_SHAPED_OVERALL, MIN_SHAPED_OVERALL, ScoreCard
from swingcoach.utils.metric_registry import MetricRegistry, metric_registry

STRETCH_MIN_METRICS = 4
STRETCH_MAX_STD = 10
STRETCH_MAX_RANGE = 25
STRETCH_BOOST = 1.3
STRETCH_MAX_PASSES = 8

WEIGHTED_REPLACE_THRESHOLD = 5
REDISTRIBUTE_THRESHOLD = 15
BLEND_CURRENT = 0.7


def round_half_up(value: float) -> int:
    """Round .5 upwards, including for negative values (-2.5 -> -2)"""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    return int(clamp(round_half_up(value), low, high))


def blend(current: float, prior: float, weight: float = BLEND_CURRENT) -> int:
    return round_half_up(weight * current + (1 - weight) * prior)


def metric_stats(metrics: Dict[str, float]):
    """Mean and population standard deviation of the metric values"""
    values = list(metrics.values())
    if not values:
        return 0.0, 0.0
    return statistics.fmean(values), statistics.pstdev(values)


def calculate_weighted_overall_score(
    metrics: Dict[str, float], registry: MetricRegistry = metric_registry
) -> Optional[int]:
    """
    Weighted mean of the metric scores.

    Unknown keys count with the default weight. Returns None for an empty
    mapping.
    """
    if not metrics:
        return None

    total_weight = 0.0
    weighted_sum = 0.0
    for key, score in metrics.items():
        weight = registry.weight(key)
        weighted_sum += score * weight
        total_weight += weight

    if total_weight <= 0:
        return None
    return clamp_score(weighted_sum / total_weight)


def _needs_stretch(metrics: Dict[str, float]) -> bool:
    if len(metrics) < STRETCH_MIN_METRICS:
        return False
    values = list(metrics.values())
    _, std = metric_stats(metrics)
    return std < STRETCH_MAX_STD and (max(values) - min(values)) < STRETCH_MAX_RANGE


def _stretch_once(metrics: Dict[str, float]) -> Dict[str, int]:
    mean, std = metric_stats(metrics)
    target_std = 8 if mean >= 80 else 12
    factor = target_std / max(1.0, std) * STRETCH_BOOST
    return {key: clamp_score(mean + (score - mean) * factor) for key, score in metrics.items()}


def stretch_variance(metrics: Dict[str, float]) -> Dict[str, int]:
    """
    Spread clustered metric scores about their mean.

    A single stretch of a high-mean cluster can land just under the
    trigger again, so passes repeat until the cluster no longer qualifies
    or the scores stop changing.
    """
    result = {key: clamp_score(score) for key, score in metrics.items()}
    for _ in range(STRETCH_MAX_PASSES):
        if not _needs_stretch(result):
            break
        stretched = _stretch_once(result)
        if stretched == result:
            break
        result = stretched
    return result


def _redistribute_overall(overall: float, metrics: Dict[str, float]) -> int:
    overall = clamp(round_half_up(overall), MIN_SHAPED_OVERALL, MAX_SHAPED_OVERALL)
    if metrics:
        mean, _ = metric_stats(metrics)
        if abs(overall - mean) > REDISTRIBUTE_THRESHOLD:
            overall = clamp(blend(overall, mean), MIN_SHAPED_OVERALL, MAX_SHAPED_OVERALL)
    return int(overall)


def redistribute(card: ScoreCard) -> ScoreCard:
    """Clamp the overall score to [30, 95] and pull it toward the metric mean when they diverge"""
    overall = _redistribute_overall(card.overall_score, card.metrics)
    return card.model_copy(update={"overall_score": overall}, deep=True)


def _shape_overall(overall: int, weighted: Optional[int], metrics: Dict[str, float]) -> int:
    """
    Overall score after initial shaping.

    The reported overall is kept when it sits within 5 points of the weighted
    aggregate and redistribution leaves it there unchanged. Otherwise the
    result is anchored on the weighted aggregate, so shaping an already
    shaped card gives the same value back.
    """
    if weighted is None:
        return _redistribute_overall(overall, metrics)

    anchored = _redistribute_overall(weighted, metrics)
    if overall == anchored:
        return anchored

    if abs(overall - weighted) <= WEIGHTED_REPLACE_THRESHOLD:
        kept = _redistribute_overall(overall, metrics)
        if (abs(kept - weighted) <= WEIGHTED_REPLACE_THRESHOLD
                and _redistribute_overall(kept, metrics) == kept):
            return kept

    return anchored


def normalize_and_validate(card: ScoreCard, registry: MetricRegistry = metric_registry) -> ScoreCard:
    """
    Initial shaping of a freshly parsed score card.

    Order: clamp and round everything, stretch clustered metrics, replace the
    overall score with the weighted aggregate when they differ by more than
    5 points, then redistribute. Applying it to its own output is a no-op.
    """
    metrics = stretch_variance(card.metrics)
    weighted = calculate_weighted_overall_score(metrics, registry)

    return ScoreCard(
        overall_score=_shape_overall(clamp_score(card.overall_score), weighted, metrics),
        metrics=metrics,
        recommendations=list(card.recommendations),
    )


def apply_minimal_variation(card: ScoreCard, rng: Optional[random.Random] = None) -> ScoreCard:
    """Nudge every score by -1, 0 or +1 so re-uploads of one video are distinguishable"""
    rng = rng or random.Random()
    metrics = {key: clamp_score(score + rng.randint(-1, 1)) for key, score in card.metrics.items()}
    overall = clamp(round_half_up(card.overall_score) + rng.randint(-1, 1),
                    MIN_SHAPED_OVERALL, MAX_SHAPED_OVERALL)
    return card.model_copy(update={"overall_score": int(overall), "metrics": metrics}, deep=True)
