"""
Tests for the adjustment engine and the feedback-driven factor calculator
"""

from datetime import datetime, timedelta, timezone

import pytest

from swingcoach.models.analysis import (
    AdjustmentFactors,
    AdjustmentPreference,
    AdjustmentPriority,
    ScoreCard,
    SkillLevel,
)
from swingcoach.models.upload import Ownership
from swingcoach.services.adjustment_calculator import (
    aggregate_feedback,
    calculate_adjustment_factors,
    calculate_adjustment_value,
    recompute_adjustment_factors,
    track_model_accuracy,
)
from swingcoach.services.adjustment_service import (
    AdjustmentEngine,
    apply_adjustments,
    is_likely_pro_golfer_swing,
    should_adjust,
)
from swingcoach.services.document_store import (
    ADJUSTMENT_FACTORS_DOC,
    ANALYSIS_FEEDBACK,
    FEEDBACK_PROCESSING_DOC,
    SYSTEM,
)
from swingcoach.utils.metric_registry import CORRELATED_GROUPS

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

SPREAD_METRICS = {"stance": 50, "grip": 70, "backswing": 80, "focus": 60}


class TestApplyAdjustments:
    def test_s3_correlated_propagation(self):
        card = ScoreCard(
            overall_score=60,
            metrics={"backswing": 60, "swingBack": 60, "clubTrajectoryBackswing": 60, "stance": 60},
        )
        factors = AdjustmentFactors(overall=0, metrics={"backswing": 10})

        result = apply_adjustments(card, factors)

        assert result.metrics["backswing"] == 70
        assert result.metrics["swingBack"] == 64
        assert result.metrics["clubTrajectoryBackswing"] == 64
        assert result.metrics["stance"] == 60
        assert result.overall_score == 65

    def test_propagation_follows_direct_sign(self):
        card = ScoreCard(overall_score=70, metrics={"hipRotation": 70, "followThrough": 70,
                                                    "shoulderPosition": 70, "armPosition": 70})
        factors = AdjustmentFactors(metrics={"hipRotation": -6, "armPosition": -2})

        result = apply_adjustments(card, factors)

        for member in CORRELATED_GROUPS["bodyGroup"]:
            assert result.metrics[member] <= 70
        assert result.metrics["followThrough"] == 68

    def test_zero_factors_leave_scores_unchanged(self):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        result = apply_adjustments(card, AdjustmentFactors(overall=0, metrics={"grip": 0}))
        assert result.metrics == SPREAD_METRICS
        assert result.overall_score == 66

    def test_overall_only_factor(self):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        result = apply_adjustments(card, AdjustmentFactors(overall=-3))
        assert result.overall_score == 63
        assert result.metrics == SPREAD_METRICS

    def test_scores_stay_in_range(self):
        card = ScoreCard(overall_score=94, metrics={"grip": 98, "stance": 97, "ballPosition": 99})
        result = apply_adjustments(card, AdjustmentFactors(overall=4, metrics={"grip": 4}))
        assert all(0 <= v <= 100 for v in result.metrics.values())
        assert 30 <= result.overall_score <= 95


class TestAdjustmentPolicy:
    def test_never_and_always(self):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        assert not should_adjust(card, AdjustmentPreference(adjustment_priority=AdjustmentPriority.NEVER))
        assert should_adjust(card, AdjustmentPreference(adjustment_priority=AdjustmentPriority.ALWAYS))

    def test_clustered_scores_adjusted(self):
        card = ScoreCard(overall_score=70, metrics={"stance": 70, "grip": 71, "backswing": 70, "focus": 72})
        assert should_adjust(card, AdjustmentPreference())

    def test_realistic_amateur_not_adjusted(self):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        assert not should_adjust(card, AdjustmentPreference())
        assert not should_adjust(card, AdjustmentPreference(skill_level=SkillLevel.AMATEUR))

    def test_likely_pro_uses_pro_ranges(self):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        assert should_adjust(card, AdjustmentPreference(), likely_pro=True)

    def test_is_likely_pro(self):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        assert is_likely_pro_golfer_swing(card, Ownership.PRO)
        assert is_likely_pro_golfer_swing(card, pro_name="Rory McIlroy")
        assert not is_likely_pro_golfer_swing(card, Ownership.SELF)
        high = ScoreCard(overall_score=90, metrics={"grip": 88, "stance": 91})
        assert is_likely_pro_golfer_swing(high)


class TestAdjustmentEngine:
    @pytest.mark.asyncio
    async def test_load_factors(self, document_store):
        await document_store.set_document(SYSTEM, ADJUSTMENT_FACTORS_DOC, {
            "factors": {"overall": 2, "metrics": {"grip": 3}},
            "updatedAt": NOW.isoformat(),
        })
        factors = await AdjustmentEngine(document_store).load_factors()
        assert factors.overall == 2
        assert factors.metrics == {"grip": 3}

    @pytest.mark.asyncio
    async def test_missing_factors_are_empty(self, document_store):
        factors = await AdjustmentEngine(document_store).load_factors()
        assert factors.is_empty

    @pytest.mark.asyncio
    async def test_preference_from_latest_user_feedback(self, document_store):
        await document_store.add_document(ANALYSIS_FEEDBACK, {
            "userId": "user-123", "feedbackType": "too_high",
            "adjustmentPriority": "never", "timestamp": "2024-05-01T10:00:00+00:00",
        })
        await document_store.add_document(ANALYSIS_FEEDBACK, {
            "userId": "user-123", "feedbackType": "accurate", "skillLevel": "beginner",
            "adjustmentPriority": "always", "timestamp": "2024-05-03T10:00:00+00:00",
        })
        await document_store.add_document(ANALYSIS_FEEDBACK, {
            "userId": "someone-else", "feedbackType": "accurate",
            "adjustmentPriority": "never", "timestamp": "2024-05-09T10:00:00+00:00",
        })

        preference = await AdjustmentEngine(document_store).load_preference("user-123")

        assert preference.adjustment_priority == AdjustmentPriority.ALWAYS
        assert preference.skill_level == SkillLevel.BEGINNER

    @pytest.mark.asyncio
    async def test_preference_by_video_signature(self, document_store):
        await document_store.add_document(ANALYSIS_FEEDBACK, {
            "videoSignature": "swing.mp4-10-1", "feedbackType": "too_low",
            "adjustmentPriority": "never", "timestamp": "2024-05-01T10:00:00+00:00",
        })
        preference = await AdjustmentEngine(document_store).load_preference(None, "swing.mp4-10-1")
        assert preference.adjustment_priority == AdjustmentPriority.NEVER

    @pytest.mark.asyncio
    async def test_empty_factors_only_redistribute(self, document_store):
        card = ScoreCard(overall_score=99, metrics={"grip": 99, "stance": 97})
        result = await AdjustmentEngine(document_store).adjust(
            card, AdjustmentFactors(), AdjustmentPreference(adjustment_priority=AdjustmentPriority.ALWAYS)
        )
        assert result.overall_score == 95
        assert result.metrics == {"grip": 99, "stance": 97}

    @pytest.mark.asyncio
    async def test_never_preference_skips_factors(self, document_store):
        card = ScoreCard(overall_score=66, metrics=dict(SPREAD_METRICS))
        result = await AdjustmentEngine(document_store).adjust(
            card,
            AdjustmentFactors(metrics={"grip": 4}),
            AdjustmentPreference(adjustment_priority=AdjustmentPriority.NEVER),
        )
        assert result.metrics["grip"] == 70


class TestAdjustmentCalculator:
    def test_adjustment_value(self):
        assert calculate_adjustment_value(8, 1, 10, 3) == -2
        assert calculate_adjustment_value(0, 7, 10, 4) == 2
        assert calculate_adjustment_value(3, 3, 10, 3) == 0
        assert calculate_adjustment_value(10, 0, 10, 3) == -3
        assert calculate_adjustment_value(0, 0, 0, 3) == 0

    def test_aggregate_canonicalizes_metric_keys(self):
        aggregate = aggregate_feedback([
            {"feedbackType": "too_high", "metricFeedback": {"swingBack": "too_low"}},
            {"feedbackType": "accurate", "metricFeedback": {"backswing": "too_low", "grip": ""}},
        ])
        assert aggregate["overall"] == {"too_high": 1, "too_low": 0, "accurate": 1, "total": 2}
        assert aggregate["by_metric"]["backswing"]["too_low"] == 2
        assert "grip" not in aggregate["by_metric"]

    def test_minimum_feedback_counts(self):
        aggregate = aggregate_feedback(
            [{"feedbackType": "too_high", "metricFeedback": {"grip": "too_high"}}] * 4
        )
        factors = calculate_adjustment_factors(aggregate)
        assert factors.overall == 0
        assert factors.metrics == {"grip": -4}

    @pytest.mark.asyncio
    async def test_recompute_stores_factors(self, document_store):
        for days_ago in (1, 2, 3, 4, 5):
            await document_store.add_document(ANALYSIS_FEEDBACK, {
                "feedbackType": "too_high",
                "metricFeedback": {"swingBack": "too_low"},
                "timestamp": (NOW - timedelta(days=days_ago)).isoformat(),
            })
        await document_store.add_document(ANALYSIS_FEEDBACK, {
            "feedbackType": "too_low",
            "timestamp": (NOW - timedelta(days=30)).isoformat(),
        })

        result = await recompute_adjustment_factors(document_store, now=NOW)

        assert result["success"] and not result["skipped"]
        stored = await document_store.get_document(SYSTEM, ADJUSTMENT_FACTORS_DOC)
        assert stored["factors"]["overall"] == -3
        assert stored["factors"]["metrics"] == {"backswing": 4}
        state = await document_store.get_document(SYSTEM, FEEDBACK_PROCESSING_DOC)
        assert state["feedbackCount"] == 5

        factors = await AdjustmentEngine(document_store).load_factors()
        assert factors.overall == -3

    @pytest.mark.asyncio
    async def test_recompute_respects_interval(self, document_store):
        await recompute_adjustment_factors(document_store, now=NOW)

        skipped = await recompute_adjustment_factors(document_store, now=NOW + timedelta(hours=1))
        assert skipped["skipped"]

        forced = await recompute_adjustment_factors(document_store, force=True, now=NOW + timedelta(hours=1))
        assert not forced["skipped"]

    def test_track_model_accuracy(self):
        records = [
            {"feedbackType": "accurate", "timestamp": "2024-05-06T10:00:00+00:00"},
            {"feedbackType": "too_high", "timestamp": "2024-05-07T10:00:00+00:00"},
            {"feedbackType": "accurate", "timestamp": "2024-05-20T10:00:00+00:00"},
            {"feedbackType": "accurate", "timestamp": "2024-05-21T10:00:00+00:00"},
        ]
        accuracy = track_model_accuracy(records)
        assert [week["accuracyRate"] for week in accuracy["timeSeriesData"]] == [50.0, 100.0]
        assert accuracy["trend"] == "improving"
        assert accuracy["currentAccuracy"] == 100.0

    def test_track_model_accuracy_single_week(self):
        accuracy = track_model_accuracy([{"feedbackType": "accurate", "timestamp": "2024-05-06T10:00:00Z"}])
        assert accuracy["trend"] == "neutral"
