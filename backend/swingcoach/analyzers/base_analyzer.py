"""
Base analyzer abstract class
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from swingcoach.config.base import settings
from swingcoach.models.analysis import (
    MAX_RECOMMENDATIONS,
    Analysis,
    AnalysisSource,
    ClubContext,
    ScoreCard,
    VideoReference,
    new_analysis_id,
)
from swingcoach.models.upload import SwingMetadata, VideoUpload
from swingcoach.services.score_shaper import clamp_score
from swingcoach.utils.metric_content import DEFAULT_RECOMMENDATIONS


def ensure_recommendations(recommendations: List[str]) -> List[str]:
    """Between one and three non-empty recommendations, padded from the defaults when empty"""
    cleaned = [r.strip() for r in recommendations if isinstance(r, str) and r.strip()]
    if not cleaned:
        cleaned = list(DEFAULT_RECOMMENDATIONS)
    return cleaned[:MAX_RECOMMENDATIONS]


class BaseAnalyzer(ABC):
    """Abstract base class for swing analyzers"""

    def __init__(self, analyzer_type: str):
        self.analyzer_type = analyzer_type

    @abstractmethod
    async def analyze(
        self,
        upload: Optional[VideoUpload] = None,
        metadata: Optional[SwingMetadata] = None,
    ) -> Analysis:
        """
        Score one swing

        Args:
            upload: Inline video bytes, if the swing was uploaded
            metadata: Club, outcome, ownership and hosted video details

        Returns:
            A fully shaped Analysis
        """
        pass

    async def validate_input(self, upload: Optional[VideoUpload], metadata: Optional[SwingMetadata]) -> bool:
        if upload is not None:
            return upload.size > 0 and bool(upload.content)
        return bool(metadata and metadata.hosted_video)

    def get_analyzer_info(self) -> Dict:
        return {
            "type": self.analyzer_type,
            "name": self.__class__.__name__,
            "version": settings.VERSION,
        }

    def build_analysis(
        self,
        card: ScoreCard,
        metadata: Optional[SwingMetadata],
        video: VideoReference,
        source: AnalysisSource,
        analysis_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Analysis:
        """Attach id, timestamps, club context and video reference to shaped scores"""
        metadata = metadata or SwingMetadata()
        now = now or datetime.now(timezone.utc)
        recorded = metadata.recorded_date or now
        if recorded > now:
            recorded = now

        club = None
        if metadata.has_club or metadata.outcome:
            club = ClubContext(
                name=metadata.club_name,
                id=metadata.club_id,
                type=metadata.club_type,
                outcome=metadata.outcome,
            )

        return Analysis(
            id=analysis_id or new_analysis_id(),
            date=now,
            recorded_date=recorded,
            overall_score=clamp_score(card.overall_score),
            metrics={key: clamp_score(score) for key, score in card.metrics.items()},
            recommendations=ensure_recommendations(card.recommendations),
            club=club,
            ownership=metadata.ownership,
            pro_name=metadata.pro_name,
            video=video,
            source=source,
            model_version=settings.MODEL_VERSION_TAG if source == AnalysisSource.LLM else None,
        )
