"""
Swing analysis orchestrator

Runs one submission through prompt building, the LLM call, parsing, score
shaping, run-to-run consistency and feedback-driven adjustment. Every external
failure ends in Mock Analyzer output, so callers always get an Analysis.
"""

import random
from typing import Dict, Optional

from swingcoach.analyzers.base_analyzer import BaseAnalyzer, ensure_recommendations
from swingcoach.analyzers.mock_analyzer import MockAnalyzer, mock_analyzer
from swingcoach.config.base import settings
from swingcoach.models.analysis import (
    Analysis,
    AnalysisInvariantError,
    AnalysisSource,
    ReferenceModel,
    ScoreCard,
    VideoReference,
    VideoSourceType,
    check_invariants,
    new_analysis_id,
)
from swingcoach.models.upload import SwingMetadata, VideoUpload
from swingcoach.services.adjustment_service import AdjustmentEngine, adjustment_engine, is_likely_pro_golfer_swing
from swingcoach.services.consistency_service import ConsistencyBlender, consistency_blender
from swingcoach.services.llm_client import LLMClient, LLMError, VideoPart, llm_client
from swingcoach.services.prompt_builder import PromptBuilder, prompt_builder
from swingcoach.services.reference_service import ReferenceGuidelineService, reference_service
from swingcoach.services.response_parser import parse_scoring_response
from swingcoach.services.score_shaper import apply_minimal_variation, normalize_and_validate
from swingcoach.services.video_url_service import VideoUrlManager, video_url_manager
from swingcoach.utils.logger import PerformanceLogger, get_logger
from swingcoach.utils.metric_registry import MetricRegistry, metric_registry
from swingcoach.utils.video_utils import youtube_embed_url

logger = get_logger(__name__)


class SwingAnalysisFailed(Exception):
    """An external step failed; the orchestrator answers with mock output instead"""


class SwingAnalyzer(BaseAnalyzer):
    def __init__(
        self,
        client: LLMClient,
        blender: ConsistencyBlender,
        adjustments: AdjustmentEngine,
        references: ReferenceGuidelineService,
        fallback: MockAnalyzer,
        url_manager: Optional[VideoUrlManager] = None,
        prompts: PromptBuilder = prompt_builder,
        registry: MetricRegistry = metric_registry,
        rng: Optional[random.Random] = None,
    ):
        super().__init__("swing")
        self.client = client
        self.blender = blender
        self.adjustments = adjustments
        self.references = references
        self.fallback = fallback
        self.url_manager = url_manager
        self.prompts = prompts
        self.registry = registry
        self.rng = rng or random.Random()

    async def _video_reference(
        self, upload: Optional[VideoUpload], metadata: SwingMetadata, analysis_id: str
    ) -> VideoReference:
        if upload is not None:
            display_url = None
            if self.url_manager is not None:
                display_url = await self.url_manager.create_temporary_url(upload, analysis_id)
            return VideoReference(
                source=VideoSourceType.INLINE,
                signature=upload.signature,
                display_url=display_url,
                url_id=analysis_id if display_url else None,
            )

        hosted = metadata.hosted_video
        if hosted is not None:
            return VideoReference(
                source=VideoSourceType.HOSTED,
                signature=hosted.signature,
                display_url=hosted.uri,
                hosted_video_id=hosted.video_id,
                embed_url=youtube_embed_url(hosted.video_id),
            )

        return VideoReference()

    async def _score(
        self, upload: Optional[VideoUpload], metadata: SwingMetadata, video: VideoReference
    ) -> ScoreCard:
        """Prompt, call and parse; raises SwingAnalysisFailed on any external failure"""
        references: Dict[str, ReferenceModel] = await self.references.load_reference_guidelines()
        prompt = self.prompts.build_scoring_prompt(metadata, references)

        try:
            if video.source == VideoSourceType.INLINE:
                part = VideoPart.from_upload(upload)
            else:
                part = VideoPart.from_hosted(metadata.hosted_video)
            text = await self.client.generate(
                prompt,
                part,
                temperature=settings.SCORING_TEMPERATURE,
                max_tokens=settings.SCORING_MAX_TOKENS,
                timeout=settings.SCORING_TIMEOUT,
            )
        except LLMError as e:
            raise SwingAnalysisFailed(f"LLM call failed ({e.kind}): {e}") from e

        card = parse_scoring_response(text, self.registry)
        if card is None:
            raise SwingAnalysisFailed("Unparseable scoring response")
        return card

    async def _shape(self, card: ScoreCard, metadata: SwingMetadata, video: VideoReference) -> ScoreCard:
        card = normalize_and_validate(card, self.registry)

        if video.source == VideoSourceType.INLINE:
            card = await self.blender.blend(card, video.signature)

        factors = await self.adjustments.load_factors()
        preference = await self.adjustments.load_preference(metadata.user_id, video.signature)
        likely_pro = is_likely_pro_golfer_swing(card, metadata.ownership, metadata.pro_name)
        card = await self.adjustments.adjust(card, factors, preference, likely_pro)

        if settings.ENABLE_MINIMAL_VARIATION:
            card = apply_minimal_variation(card, self.rng)

        return card.model_copy(update={"recommendations": ensure_recommendations(card.recommendations)})

    async def _mock(
        self, metadata: SwingMetadata, video: VideoReference, analysis_id: str
    ) -> Analysis:
        analysis = await self.fallback.analyze(metadata=metadata, video=video, analysis_id=analysis_id)
        try:
            self._verify(analysis)
        except AnalysisInvariantError as e:
            if settings.STRICT_INVARIANTS:
                raise
            logger.error(f"Mock analysis {analysis_id} violated an output invariant: {e}")
        return analysis

    def _verify(self, analysis: Analysis) -> None:
        check_invariants(analysis, set(self.registry.canonical_keys()))

    async def analyze(
        self,
        upload: Optional[VideoUpload] = None,
        metadata: Optional[SwingMetadata] = None,
    ) -> Analysis:
        """
        Score one swing from inline bytes or a hosted video reference

        Args:
            upload: Uploaded video, takes precedence over a hosted reference
            metadata: Club, outcome, ownership and hosted video details

        Returns:
            A shaped Analysis; mock-origin when the LLM path could not be used
        """
        metadata = metadata or SwingMetadata()
        analysis_id = new_analysis_id()
        perf = PerformanceLogger("swing_analysis")
        perf.start(f"analysis {analysis_id}")

        video = await self._video_reference(upload, metadata, analysis_id)

        if settings.USE_MOCK_ANALYSIS:
            logger.info(f"Mock analysis configured, skipping LLM for {analysis_id}")
            analysis = await self._mock(metadata, video, analysis_id)
            perf.end("mock (configured)")
            return analysis

        if video.source == VideoSourceType.NONE:
            logger.warning(f"No video supplied for analysis {analysis_id}, using mock analysis")
            analysis = await self._mock(metadata, video, analysis_id)
            perf.end("mock (no video)")
            return analysis

        try:
            card = await self._score(upload, metadata, video)
            card = await self._shape(card, metadata, video)
            analysis = self.build_analysis(card, metadata, video, AnalysisSource.LLM, analysis_id=analysis_id)
            self._verify(analysis)
        except SwingAnalysisFailed as e:
            logger.error(f"Analysis {analysis_id} ({video.signature}) falling back to mock: {e}")
            analysis = await self._mock(metadata, video, analysis_id)
        except AnalysisInvariantError as e:
            if settings.STRICT_INVARIANTS:
                raise
            logger.error(f"Analysis {analysis_id} violated an output invariant, using mock: {e}")
            analysis = await self._mock(metadata, video, analysis_id)
        except Exception as e:
            logger.error(f"Unexpected error in analysis {analysis_id}: {e}", exc_info=True)
            analysis = await self._mock(metadata, video, analysis_id)

        perf.end(f"{analysis.source.value}, overall {analysis.overall_score}")
        return analysis


swing_analyzer = SwingAnalyzer(
    llm_client,
    consistency_blender,
    adjustment_engine,
    reference_service,
    mock_analyzer,
    url_manager=video_url_manager,
)
