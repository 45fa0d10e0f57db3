"""
Tests for metric insights, feedback collection and reference guidelines
"""

import json
from datetime import datetime, timezone

import pytest

from swingcoach.config.base import settings
from swingcoach.models.analysis import (
    Analysis,
    FeedbackRecord,
    FeedbackVerdict,
    MetricFeedbackRecord,
    VideoReference,
    VideoSourceType,
)
from swingcoach.models.upload import Ownership
from swingcoach.services.document_store import (
    ANALYSIS_FEEDBACK,
    METRIC_FEEDBACK,
    REFERENCE_MODELS,
    MemoryDocumentStore,
    StoragePermissionError,
)
from swingcoach.services.feedback_service import FeedbackCollector
from swingcoach.services.insight_service import MetricInsightGenerator
from swingcoach.services.llm_client import LLMServerError
from swingcoach.services.reference_service import (
    ReferenceAnalysisFailed,
    ReferenceGuidelineService,
    extract_technical_patterns,
)
from swingcoach.utils.metric_content import DEFAULT_INSIGHTS

NOW = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)

INSIGHT_TEXT = json.dumps({
    "goodAspects": ["Neutral lead hand"],
    "improvementAreas": ["Trail hand too far under the grip"],
    "technicalBreakdown": ["Trail palm faces the sky at address"],
    "recommendations": ["Rotate the trail hand toward the target"],
    "feelTips": ["Feel both palms facing each other"],
})

REFERENCE_TEXT = json.dumps({
    "technicalGuidelines": ["Lead hand shows two to three knuckles", "Light grip pressure"],
    "idealForm": ["Vs of both hands point at the trail shoulder"],
    "commonMistakes": ["Strangling the club"],
    "coachingCues": ["Hold it like a tube of toothpaste"],
    "scoringRubric": {"90+": "Neutral", "70-89": "Slightly strong", "50-69": "Weak", "<50": "Palm grip"},
})


def make_analysis(ownership=None, video=None):
    return Analysis(
        id="1715331600000",
        date=NOW,
        recorded_date=NOW,
        overall_score=68,
        metrics={"grip": 64, "backswing": 58},
        recommendations=["Check your grip"],
        ownership=ownership,
        video=video or VideoReference(),
    )


class DeniedDocumentStore(MemoryDocumentStore):
    async def set_document(self, collection, doc_id, data, merge=False):
        raise StoragePermissionError("missing or insufficient permissions")


class TestMetricInsightGenerator:
    @pytest.mark.asyncio
    async def test_llm_insights(self, fake_llm):
        fake_llm.responses.append(INSIGHT_TEXT)

        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip")

        assert insights.source == "llm"
        assert insights.metric_key == "grip"
        assert insights.improvement_areas == ["Trail hand too far under the grip"]
        assert insights.feel_tips == ["Feel both palms facing each other"]
        call = fake_llm.calls[0]
        assert call["timeout"] == settings.INSIGHT_TIMEOUT
        assert call["temperature"] == settings.INSIGHT_TEMPERATURE
        assert call["video"] is None
        assert "64/100" in call["prompt"]

    @pytest.mark.asyncio
    async def test_llm_failure_returns_defaults(self, fake_llm):
        fake_llm.responses.append(LLMServerError("unavailable"))

        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip")

        assert insights.source == "default"
        assert insights.good_aspects == DEFAULT_INSIGHTS["grip"]["goodAspects"]
        assert insights.recommendations == DEFAULT_INSIGHTS["grip"]["recommendations"]

    @pytest.mark.asyncio
    async def test_unparseable_returns_defaults(self, fake_llm):
        fake_llm.responses.append('{"goodAspects": ["only one section"]}')
        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip")
        assert insights.source == "default"

    @pytest.mark.asyncio
    async def test_alias_resolved(self, fake_llm):
        fake_llm.responses.append(INSIGHT_TEXT)
        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "swingBack")
        assert insights.metric_key == "backswing"
        assert "58/100" in fake_llm.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_video_unclear_preserved(self, fake_llm):
        data = json.loads(INSIGHT_TEXT)
        data["technicalBreakdown"] = ["Video unclear: the camera angle hides the hands"]
        fake_llm.responses.append(json.dumps(data))

        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip")

        assert insights.technical_breakdown == ["Video unclear: the camera angle hides the hands"]

    @pytest.mark.asyncio
    async def test_video_unclear_outside_breakdown_added(self, fake_llm):
        data = json.loads(INSIGHT_TEXT)
        data["goodAspects"] = ["Video unclear, but the setup looks athletic"]
        fake_llm.responses.append(json.dumps(data))

        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip")

        assert insights.technical_breakdown[0] == "Video unclear"

    @pytest.mark.asyncio
    async def test_empty_sections_filled_from_defaults(self, fake_llm):
        data = json.loads(INSIGHT_TEXT)
        data["goodAspects"] = []
        del data["feelTips"]
        fake_llm.responses.append(json.dumps(data))

        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip")

        assert insights.source == "llm"
        assert insights.good_aspects == DEFAULT_INSIGHTS["grip"]["goodAspects"]
        assert insights.feel_tips == DEFAULT_INSIGHTS["grip"]["feelTips"]

    @pytest.mark.asyncio
    async def test_signup_notice_for_unauthenticated_viewers(self, fake_llm):
        fake_llm.responses.extend([INSIGHT_TEXT, INSIGHT_TEXT])
        generator = MetricInsightGenerator(fake_llm)
        analysis = make_analysis(ownership=Ownership.OTHER)

        anonymous = await generator.generate(analysis, "grip", is_authenticated=False)
        signed_in = await generator.generate(analysis, "grip", is_authenticated=True)

        assert anonymous.technical_breakdown[0] == settings.INSIGHT_SIGNUP_NOTICE
        assert anonymous.recommendations[0] == settings.INSIGHT_SIGNUP_RECOMMENDATION
        assert settings.INSIGHT_SIGNUP_NOTICE not in signed_in.technical_breakdown

    @pytest.mark.asyncio
    async def test_own_swing_has_no_notice(self, fake_llm):
        fake_llm.responses.append(LLMServerError("unavailable"))
        insights = await MetricInsightGenerator(fake_llm).generate(make_analysis(Ownership.SELF), "grip")
        assert settings.INSIGHT_SIGNUP_NOTICE not in insights.technical_breakdown

    @pytest.mark.asyncio
    async def test_hosted_video_attached(self, fake_llm):
        fake_llm.responses.append(INSIGHT_TEXT)
        video = VideoReference(source=VideoSourceType.HOSTED, hosted_video_id="dQw4w9WgXcQ")

        await MetricInsightGenerator(fake_llm).generate(make_analysis(video=video), "grip")

        assert fake_llm.calls[0]["video"].url == "https://youtu.be/dQw4w9WgXcQ"

    @pytest.mark.asyncio
    async def test_inline_upload_attached(self, fake_llm, sample_upload):
        fake_llm.responses.append(INSIGHT_TEXT)
        await MetricInsightGenerator(fake_llm).generate(make_analysis(), "grip", upload=sample_upload)
        assert fake_llm.calls[0]["video"].mode == "inline"


class TestFeedbackCollector:
    @pytest.mark.asyncio
    async def test_submit_feedback(self, document_store):
        record = FeedbackRecord(
            analysis_id="1715331600000",
            user_id="user-123",
            feedback_type=FeedbackVerdict.TOO_HIGH,
            metric_feedback={"swingBack": FeedbackVerdict.TOO_LOW},
            confidence=4,
        )

        assert await FeedbackCollector(document_store).submit_feedback(record)

        stored = await document_store.list_documents(ANALYSIS_FEEDBACK)
        assert len(stored) == 1
        assert stored[0]["feedbackType"] == "too_high"
        assert stored[0]["metricFeedback"] == {"backswing": "too_low"}
        assert stored[0]["modelVersion"] == settings.MODEL_VERSION_TAG
        assert stored[0]["adjustmentPriority"] == "as-needed"

    @pytest.mark.asyncio
    async def test_submit_metric_feedback(self, document_store):
        record = MetricFeedbackRecord(
            analysis_id="1715331600000",
            metric_key="clubTrajectoryForswing",
            metric_value=66,
            feedback_type=FeedbackVerdict.ACCURATE,
        )

        assert await FeedbackCollector(document_store).submit_metric_feedback(record)

        stored = await document_store.list_documents(METRIC_FEEDBACK)
        assert stored[0]["metricKey"] == "swingForward"
        assert stored[0]["metricValue"] == 66

    @pytest.mark.asyncio
    async def test_permission_denied_reported(self):
        collector = FeedbackCollector(DeniedDocumentStore())
        record = FeedbackRecord(analysis_id="1", feedback_type=FeedbackVerdict.ACCURATE)
        assert await collector.submit_feedback(record) is False

    @pytest.mark.asyncio
    async def test_model_accuracy(self, document_store):
        collector = FeedbackCollector(document_store)
        await collector.submit_feedback(FeedbackRecord(
            analysis_id="1", feedback_type=FeedbackVerdict.ACCURATE, timestamp=NOW,
        ))
        accuracy = await collector.model_accuracy()
        assert accuracy["success"]
        assert accuracy["currentAccuracy"] == 100.0


class TestReferenceGuidelines:
    @pytest.mark.asyncio
    async def test_invalid_documents_skipped(self, document_store, fake_llm):
        await document_store.set_document(REFERENCE_MODELS, "grip", {
            "metricKey": "grip",
            "referenceAnalysis": {"technicalGuidelines": ["Light pressure"]},
        })
        await document_store.set_document(REFERENCE_MODELS, "swingBack", {
            "referenceAnalysis": {"commonMistakes": ["Over-rotation"]},
        })
        await document_store.set_document(REFERENCE_MODELS, "elbowTuck", {
            "referenceAnalysis": {"technicalGuidelines": ["Unknown metric"]},
        })
        await document_store.set_document(REFERENCE_MODELS, "stance", {"metricKey": "stance"})

        references = await ReferenceGuidelineService(document_store, fake_llm).load_reference_guidelines()

        assert set(references) == {"grip", "backswing"}
        assert references["grip"].reference_analysis.technical_guidelines == ["Light pressure"]

    @pytest.mark.asyncio
    async def test_analyze_reference_video(self, document_store, fake_llm):
        fake_llm.responses.append(REFERENCE_TEXT)
        service = ReferenceGuidelineService(document_store, fake_llm)

        reference = await service.analyze_reference_video("grip", "https://youtu.be/dQw4w9WgXcQ")

        assert reference.youtube_video_id == "dQw4w9WgXcQ"
        assert fake_llm.calls[0]["video"].mode == "hosted"
        stored = await document_store.get_document(REFERENCE_MODELS, "grip")
        assert stored["referenceAnalysis"]["coachingCues"] == ["Hold it like a tube of toothpaste"]
        assert "analyzedAt" in stored

    @pytest.mark.asyncio
    async def test_analyze_reference_video_failures(self, document_store, fake_llm):
        service = ReferenceGuidelineService(document_store, fake_llm)

        with pytest.raises(ReferenceAnalysisFailed):
            await service.analyze_reference_video("grip", "https://vimeo.com/123")

        fake_llm.responses.append('{"technicalGuidelines": ["incomplete"]}')
        with pytest.raises(ReferenceAnalysisFailed):
            await service.analyze_reference_video("grip", "https://youtu.be/dQw4w9WgXcQ")

        fake_llm.responses.append(LLMServerError("unavailable"))
        with pytest.raises(ReferenceAnalysisFailed):
            await service.analyze_reference_video("grip", "https://youtu.be/dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_extract_technical_patterns(self, document_store, fake_llm):
        for key in ("grip", "stance"):
            await document_store.set_document(REFERENCE_MODELS, key, {
                "metricKey": key,
                "referenceAnalysis": {
                    "technicalGuidelines": [f"{key} guideline", "Stay balanced"],
                    "commonMistakes": ["Rushing"],
                    "coachingCues": [],
                },
            })
        references = await ReferenceGuidelineService(document_store, fake_llm).load_reference_guidelines()

        patterns = extract_technical_patterns(references)

        assert patterns["technicalPatterns"] == ["grip guideline", "Stay balanced", "stance guideline"]
        assert patterns["commonMistakes"] == ["Rushing"]
        assert patterns["coachingApproaches"] == []
