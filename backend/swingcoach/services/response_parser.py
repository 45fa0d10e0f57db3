"""
Multi-strategy JSON extraction and validation of LLM responses

Every function here returns None on failure instead of raising.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional

from swingcoach.models.analysis import MAX_RECOMMENDATIONS, ScoreCard, is_finite_number
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_content import DEFAULT_RECOMMENDATIONS
from swingcoach.utils.metric_registry import MetricRegistry, metric_registry

logger = get_logger(__name__)

FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)

INSIGHT_REQUIRED = ("goodAspects", "improvementAreas", "technicalBreakdown", "recommendations")
INSIGHT_OPTIONAL = ("feelTips",)


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def from_whole_text(text: str) -> Optional[Dict[str, Any]]:
    return _loads_object(text.strip())


def from_fenced_block(text: str) -> Optional[Dict[str, Any]]:
    match = FENCED_BLOCK.search(text)
    if not match:
        return None
    return _loads_object(match.group(1).strip())


def from_brace_span(text: str) -> Optional[Dict[str, Any]]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _loads_object(text[start:end + 1])


EXTRACTION_STRATEGIES: List[Callable[[str], Optional[Dict[str, Any]]]] = [
    from_whole_text,
    from_fenced_block,
    from_brace_span,
]


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """First JSON object found by whole-text, fenced-block, then brace-span extraction"""
    if not text or not isinstance(text, str):
        return None
    for strategy in EXTRACTION_STRATEGIES:
        result = strategy(text)
        if result is not None:
            return result
    return None


def normalize_recommendations(value: Any) -> List[str]:
    """Keep 1..3 non-empty strings, substituting the defaults when nothing usable remains"""
    if not isinstance(value, list):
        return list(DEFAULT_RECOMMENDATIONS)
    cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    if not cleaned:
        return list(DEFAULT_RECOMMENDATIONS)
    return cleaned[:MAX_RECOMMENDATIONS]


def canonicalize_metrics(raw: Dict[str, Any], registry: MetricRegistry = metric_registry) -> Dict[str, float]:
    """Map aliases to canonical keys, averaging collisions and dropping unknown or non-numeric entries"""
    collected: Dict[str, List[float]] = {}
    for key, value in raw.items():
        if not is_finite_number(value):
            logger.warning(f"Dropping non-numeric metric {key}={value!r}")
            continue
        canonical = registry.canonical(key)
        if not registry.is_known(canonical):
            logger.warning(f"Dropping unknown metric key {key}")
            continue
        collected.setdefault(canonical, []).append(float(value))
    return {key: sum(values) / len(values) for key, values in collected.items()}


def parse_scoring_response(text: Optional[str], registry: MetricRegistry = metric_registry) -> Optional[ScoreCard]:
    """Validated score card from raw LLM text, or None when the response is unusable"""
    data = extract_json_object(text)
    if data is None:
        logger.error("No JSON object found in scoring response")
        return None

    overall = data.get("overallScore")
    if not is_finite_number(overall):
        logger.error(f"Scoring response has invalid overallScore: {overall!r}")
        return None

    raw_metrics = data.get("metrics")
    if not isinstance(raw_metrics, dict):
        logger.error("Scoring response is missing the metrics object")
        return None

    metrics = canonicalize_metrics(raw_metrics, registry)
    if not metrics:
        logger.error("Scoring response has no usable metrics")
        return None

    return ScoreCard(
        overall_score=float(overall),
        metrics=metrics,
        recommendations=normalize_recommendations(data.get("recommendations")),
    )


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def parse_insight_response(text: Optional[str]) -> Optional[Dict[str, List[str]]]:
    """Insight sections keyed by their JSON names; None when a mandatory array is missing"""
    data = extract_json_object(text)
    if data is None:
        return None

    sections: Dict[str, List[str]] = {}
    for key in INSIGHT_REQUIRED:
        items = _string_list(data.get(key))
        if items is None:
            logger.warning(f"Insight response is missing {key}")
            return None
        sections[key] = items

    for key in INSIGHT_OPTIONAL:
        sections[key] = _string_list(data.get(key)) or []

    return sections
