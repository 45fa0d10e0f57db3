"""
Deep-dive coaching insights for a single metric of an analysis
"""

from typing import Dict, List, Optional

from swingcoach.config.base import settings
from swingcoach.models.analysis import Analysis, MetricInsights
from swingcoach.models.upload import HostedVideo, Ownership, VideoUpload
from swingcoach.services.llm_client import LLMClient, LLMError, VideoPart, llm_client
from swingcoach.services.prompt_builder import VIDEO_UNCLEAR, PromptBuilder, prompt_builder
from swingcoach.services.response_parser import parse_insight_response
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_content import DEFAULT_INSIGHTS, GENERIC_INSIGHTS
from swingcoach.utils.metric_registry import MetricRegistry, metric_registry

logger = get_logger(__name__)

INSIGHT_SECTIONS = ("goodAspects", "improvementAreas", "technicalBreakdown", "recommendations", "feelTips")


def default_sections(metric_key: str) -> Dict[str, List[str]]:
    """Shipped insight set for a canonical metric, generic text for anything else"""
    shipped = DEFAULT_INSIGHTS.get(metric_key, {})
    return {key: list(shipped.get(key) or GENERIC_INSIGHTS[key]) for key in INSIGHT_SECTIONS}


class MetricInsightGenerator:
    def __init__(
        self,
        client: LLMClient,
        registry: MetricRegistry = metric_registry,
        prompts: PromptBuilder = prompt_builder,
    ):
        self.client = client
        self.registry = registry
        self.prompts = prompts

    def _video_part(self, analysis: Analysis, upload: Optional[VideoUpload]) -> Optional[VideoPart]:
        if analysis.video.hosted_video_id:
            return VideoPart.from_hosted(HostedVideo(video_id=analysis.video.hosted_video_id))
        if upload is not None:
            try:
                return VideoPart.from_upload(upload)
            except LLMError as e:
                logger.warning(f"Insights for analysis {analysis.id} continue without video: {e}")
        return None

    async def _llm_sections(
        self, analysis: Analysis, metric_key: str, upload: Optional[VideoUpload]
    ) -> Optional[Dict[str, List[str]]]:
        video = self._video_part(analysis, upload)
        prompt = self.prompts.build_insight_prompt(
            metric_key, analysis.metrics.get(metric_key), has_video=video is not None
        )
        try:
            text = await self.client.generate(
                prompt,
                video,
                temperature=settings.INSIGHT_TEMPERATURE,
                max_tokens=settings.INSIGHT_MAX_TOKENS,
                timeout=settings.INSIGHT_TIMEOUT,
            )
        except LLMError as e:
            logger.warning(f"Insight call for {metric_key} on analysis {analysis.id} failed ({e.kind}): {e}")
            return None

        sections = parse_insight_response(text)
        if sections is None:
            logger.warning(f"Unparseable insight response for {metric_key} on analysis {analysis.id}")
            return None

        if VIDEO_UNCLEAR.lower() in text.lower() and not any(
            VIDEO_UNCLEAR in item for item in sections["technicalBreakdown"]
        ):
            sections["technicalBreakdown"].insert(0, VIDEO_UNCLEAR)
        return sections

    async def generate(
        self,
        analysis: Analysis,
        metric_key: str,
        is_authenticated: bool = False,
        upload: Optional[VideoUpload] = None,
    ) -> MetricInsights:
        """
        Coaching breakdown for one metric; falls back to the shipped insights on any failure

        Args:
            analysis: The analysis the metric belongs to
            metric_key: Metric key, aliases accepted
            is_authenticated: Whether the caller is signed in
            upload: Inline video bytes when the analysis was made from an upload

        Returns:
            MetricInsights, never raises
        """
        canonical = self.registry.canonical(metric_key)
        sections = await self._llm_sections(analysis, canonical, upload)
        source = "llm" if sections is not None else "default"

        defaults = default_sections(canonical)
        if sections is None:
            sections = defaults
        else:
            for key in INSIGHT_SECTIONS:
                if not sections.get(key):
                    sections[key] = defaults[key]

        if analysis.ownership in (Ownership.OTHER, Ownership.PRO) and not is_authenticated:
            sections["technicalBreakdown"].insert(0, settings.INSIGHT_SIGNUP_NOTICE)
            sections["recommendations"].insert(0, settings.INSIGHT_SIGNUP_RECOMMENDATION)

        return MetricInsights(
            metric_key=canonical,
            good_aspects=sections["goodAspects"],
            improvement_areas=sections["improvementAreas"],
            technical_breakdown=sections["technicalBreakdown"],
            recommendations=sections["recommendations"],
            feel_tips=sections["feelTips"],
            source=source,
        )


insight_generator = MetricInsightGenerator(llm_client)
