"""
Out-of-band recomputation of adjustment factors from collected feedback
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from swingcoach.config.base import settings
from swingcoach.models.analysis import AdjustmentFactors, FeedbackVerdict
from swingcoach.models.upload import as_utc
from swingcoach.services.document_store import (
    ADJUSTMENT_FACTORS_DOC,
    ANALYSIS_FEEDBACK,
    FEEDBACK_PROCESSING_DOC,
    SYSTEM,
    DocumentStore,
)
from swingcoach.services.score_shaper import round_half_up
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_registry import metric_registry

logger = get_logger(__name__)

OVERALL_MIN_FEEDBACK = 5
OVERALL_MAX_ADJUSTMENT = 3
METRIC_MIN_FEEDBACK = 3
METRIC_MAX_ADJUSTMENT = 4
BALANCED_GAP = 0.2
MAJORITY = 0.5
DOMINANCE = 1.5
TREND_THRESHOLD = 5


def _empty_counts() -> Dict[str, int]:
    return {"too_high": 0, "too_low": 0, "accurate": 0, "total": 0}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def aggregate_feedback(records: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Count verdicts overall and per canonical metric

    Returns:
        {"overall": counts, "by_metric": {metric: counts}}
    """
    overall = _empty_counts()
    by_metric: Dict[str, Dict[str, int]] = {}

    for record in records:
        verdict = record.get("feedbackType")
        if verdict:
            if verdict in overall:
                overall[verdict] += 1
            overall["total"] += 1

        for metric, opinion in (record.get("metricFeedback") or {}).items():
            if not opinion:
                continue
            counts = by_metric.setdefault(metric_registry.canonical(metric), _empty_counts())
            if opinion in counts:
                counts[opinion] += 1
            counts["total"] += 1

    return {"overall": overall, "by_metric": by_metric}


def calculate_adjustment_value(too_high: int, too_low: int, total: int, max_adjustment: int) -> int:
    """Signed delta from the balance of "too high" and "too low" verdicts"""
    if total <= 0:
        return 0
    high = too_high / total
    low = too_low / total

    if abs(high - low) < BALANCED_GAP:
        return 0
    if high > MAJORITY and high > low * DOMINANCE:
        return -round_half_up(max_adjustment * min(1.0, (high - MAJORITY) * 2))
    if low > MAJORITY and low > high * DOMINANCE:
        return round_half_up(max_adjustment * min(1.0, (low - MAJORITY) * 2))
    return 0


def calculate_adjustment_factors(aggregate: Dict[str, Any]) -> AdjustmentFactors:
    overall_counts = aggregate["overall"]
    overall = 0
    if overall_counts["total"] >= OVERALL_MIN_FEEDBACK:
        overall = calculate_adjustment_value(
            overall_counts["too_high"], overall_counts["too_low"],
            overall_counts["total"], OVERALL_MAX_ADJUSTMENT,
        )

    metrics = {}
    for metric, counts in aggregate["by_metric"].items():
        if counts["total"] >= METRIC_MIN_FEEDBACK:
            metrics[metric] = calculate_adjustment_value(
                counts["too_high"], counts["too_low"], counts["total"], METRIC_MAX_ADJUSTMENT,
            )

    return AdjustmentFactors(overall=overall, metrics=metrics, updated_at=datetime.now(timezone.utc))


def recent_feedback(records: List[Dict[str, Any]], days: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
    recent = []
    for record in records:
        ts = _parse_timestamp(record.get("timestamp"))
        if ts is not None and ts > cutoff:
            recent.append(record)
    return recent


async def recompute_adjustment_factors(
    store: DocumentStore, force: bool = False, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Recompute and persist global adjustment factors from recent feedback

    Args:
        store: Document store holding the feedback and system collections
        force: Ignore the minimum interval between runs
        now: Clock override for tests

    Returns:
        {"success": True, "skipped": bool, "adjustmentFactors": {...}}
    """
    now = now or datetime.now(timezone.utc)

    state = await store.get_document(SYSTEM, FEEDBACK_PROCESSING_DOC) or {}
    last_processed = _parse_timestamp(state.get("lastProcessed"))
    if last_processed and not force:
        hours_since = (now - last_processed).total_seconds() / 3600
        if hours_since < settings.FEEDBACK_PROCESS_INTERVAL_HOURS:
            logger.info(f"Skipping feedback processing (last run {hours_since:.1f} hours ago)")
            return {"success": True, "skipped": True}

    records = await store.list_documents(ANALYSIS_FEEDBACK)
    recent = recent_feedback(records, settings.FEEDBACK_WINDOW_DAYS, now)
    factors = calculate_adjustment_factors(aggregate_feedback(recent))
    factors_json = factors.model_dump(mode="json", by_alias=True)

    await store.set_document(SYSTEM, ADJUSTMENT_FACTORS_DOC, {
        "factors": factors_json,
        "updatedAt": now.isoformat(),
    })
    await store.set_document(SYSTEM, FEEDBACK_PROCESSING_DOC, {
        "lastProcessed": now.isoformat(),
        "feedbackCount": len(recent),
        "adjustmentFactors": factors_json,
    })

    logger.info(
        f"Recomputed adjustment factors from {len(recent)} feedback records: "
        f"overall {factors.overall:+d}, {len(factors.metrics)} metrics"
    )
    return {"success": True, "skipped": False, "adjustmentFactors": factors_json}


def track_model_accuracy(records: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Weekly share of "accurate" verdicts and the trend between first and last week"""
    weekly: Dict[str, Dict[str, int]] = {}
    for record in sorted(records, key=lambda r: str(r.get("timestamp", ""))):
        ts = _parse_timestamp(record.get("timestamp"))
        if ts is None:
            continue
        year, week, _ = ts.isocalendar()
        bucket = weekly.setdefault(f"{year}-{week:02d}", {"accurate": 0, "inaccurate": 0})
        if record.get("feedbackType") == FeedbackVerdict.ACCURATE.value:
            bucket["accurate"] += 1
        else:
            bucket["inaccurate"] += 1

    series = []
    for week_key in sorted(weekly):
        counts = weekly[week_key]
        total = counts["accurate"] + counts["inaccurate"]
        series.append({
            "week": week_key,
            "accuracyRate": counts["accurate"] / total * 100 if total else 0.0,
            "totalFeedback": total,
        })

    if len(series) < 2:
        trend = "neutral"
    else:
        change = series[-1]["accuracyRate"] - series[0]["accuracyRate"]
        if change > TREND_THRESHOLD:
            trend = "improving"
        elif change < -TREND_THRESHOLD:
            trend = "declining"
        else:
            trend = "stable"

    return {
        "timeSeriesData": series,
        "trend": trend,
        "currentAccuracy": series[-1]["accuracyRate"] if series else 0.0,
    }
