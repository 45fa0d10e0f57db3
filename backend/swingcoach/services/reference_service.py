"""
Reference "swing recipe" knowledge base built from instructional videos
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from swingcoach.config.base import settings
from swingcoach.models.analysis import ReferenceAnalysis, ReferenceModel
from swingcoach.models.upload import HostedVideo
from swingcoach.services.document_store import REFERENCE_MODELS, DocumentStore, DocumentStoreError, document_store
from swingcoach.services.llm_client import LLMClient, LLMError, VideoPart, llm_client
from swingcoach.services.response_parser import extract_json_object
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_registry import metric_registry
from swingcoach.utils.video_utils import extract_youtube_video_id

logger = get_logger(__name__)

REFERENCE_REQUIRED = ("technicalGuidelines", "idealForm", "commonMistakes", "coachingCues", "scoringRubric")


class ReferenceAnalysisFailed(Exception):
    """A reference video could not be turned into a reference model"""


def build_reference_prompt(metric_key: str) -> str:
    title = metric_registry.title(metric_key).lower()
    return (
        "You are a PGA Master Professional with 30 years of experience in golf swing analysis.\n"
        f"Watch this instructional video about {title} in the golf swing and build a reference "
        f"model that will be used to score other golfers' {title}.\n\n"
        "Analyse the video for:\n"
        f"1. Technical Guidelines: the precise technical elements that define proper {title}\n"
        "2. Ideal Form: what perfect execution looks like\n"
        "3. Common Mistakes: the most frequent errors golfers make\n"
        "4. Coaching Cues: verbal cues that help a golfer improve\n"
        "5. Scoring Rubric: criteria for the ranges 90+, 70-89, 50-69 and <50\n\n"
        "Respond with a single valid JSON object:\n"
        "{\n"
        '  "technicalGuidelines": ["..."],\n'
        '  "idealForm": ["..."],\n'
        '  "commonMistakes": ["..."],\n'
        '  "coachingCues": ["..."],\n'
        '  "scoringRubric": {"90+": "...", "70-89": "...", "50-69": "...", "<50": "..."}\n'
        "}"
    )


def extract_technical_patterns(references: Dict[str, ReferenceModel]) -> Dict[str, List[str]]:
    """De-duplicated guidelines, mistakes and coaching cues across all reference models"""
    patterns: Dict[str, List[str]] = {
        "technicalPatterns": [],
        "commonMistakes": [],
        "coachingApproaches": [],
    }
    for reference in references.values():
        ra = reference.reference_analysis
        for target, items in (
            ("technicalPatterns", ra.technical_guidelines),
            ("commonMistakes", ra.common_mistakes),
            ("coachingApproaches", ra.coaching_cues),
        ):
            for item in items:
                if item not in patterns[target]:
                    patterns[target].append(item)
    return patterns


class ReferenceGuidelineService:
    def __init__(self, store: DocumentStore, client: LLMClient):
        self.store = store
        self.client = client

    async def load_reference_guidelines(self) -> Dict[str, ReferenceModel]:
        """Valid reference models keyed by canonical metric; empty when the store is unavailable"""
        try:
            documents = await self.store.list_documents(REFERENCE_MODELS)
        except DocumentStoreError as e:
            logger.warning(f"Reference guidelines unavailable: {e}")
            return {}

        references: Dict[str, ReferenceModel] = {}
        for doc in documents:
            key = metric_registry.canonical(doc.get("metricKey") or doc.get("id", ""))
            if not metric_registry.is_known(key):
                logger.warning(f"Skipping reference model for unknown metric {key}")
                continue
            try:
                references[key] = ReferenceModel.model_validate({**doc, "metricKey": key})
            except ValueError as e:
                logger.warning(f"Skipping invalid reference model {key}: {e}")
        return references

    async def save_reference_model(self, reference: ReferenceModel) -> None:
        data = reference.model_dump(mode="json", by_alias=True)
        data["analyzedAt"] = datetime.now(timezone.utc).isoformat()
        await self.store.set_document(REFERENCE_MODELS, reference.metric_key, data, merge=True)

    async def analyze_reference_video(self, metric_key: str, youtube_url: str) -> ReferenceModel:
        """
        Build and store a reference model for one metric from an instructional video

        Raises:
            ReferenceAnalysisFailed: the URL, the LLM call or its response was unusable
        """
        canonical = metric_registry.canonical(metric_key)
        if not metric_registry.is_known(canonical):
            raise ReferenceAnalysisFailed(f"Unknown metric {metric_key}")

        video_id = extract_youtube_video_id(youtube_url)
        if not video_id:
            raise ReferenceAnalysisFailed("Invalid YouTube URL")

        try:
            text = await self.client.generate(
                build_reference_prompt(canonical),
                VideoPart.from_hosted(HostedVideo(video_id=video_id)),
                temperature=settings.INSIGHT_TEMPERATURE,
                max_tokens=settings.SCORING_MAX_TOKENS,
                timeout=settings.SCORING_TIMEOUT,
            )
        except LLMError as e:
            raise ReferenceAnalysisFailed(f"Reference analysis failed ({e.kind}): {e}") from e

        data = extract_json_object(text)
        if not data or any(key not in data for key in REFERENCE_REQUIRED):
            raise ReferenceAnalysisFailed("Reference analysis response is missing required sections")

        try:
            reference = ReferenceModel(
                metric_key=canonical,
                youtube_url=youtube_url,
                youtube_video_id=video_id,
                reference_analysis=ReferenceAnalysis.model_validate(data),
            )
        except ValueError as e:
            raise ReferenceAnalysisFailed(f"Invalid reference analysis structure: {e}") from e

        await self.save_reference_model(reference)
        logger.info(f"Reference model for {canonical} stored from video {video_id}")
        return reference


reference_service = ReferenceGuidelineService(document_store, llm_client)
