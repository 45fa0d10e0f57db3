"""
Analysis data models
"""

import math
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from swingcoach.models.upload import ClubType, Ownership, ShotOutcome, as_utc

MIN_SHAPED_OVERALL = 30
MAX_SHAPED_OVERALL = 95
MAX_RECOMMENDATIONS = 3


class VideoSourceType(str, Enum):
    INLINE = "inline"
    HOSTED = "hosted"
    NONE = "none"


class AnalysisSource(str, Enum):
    LLM = "llm"
    MOCK = "mock"


class SkillLevel(str, Enum):
    PRO = "pro"
    ADVANCED = "advanced"
    AMATEUR = "amateur"
    BEGINNER = "beginner"


class AdjustmentPriority(str, Enum):
    NEVER = "never"
    AS_NEEDED = "as-needed"
    ALWAYS = "always"


class FeedbackVerdict(str, Enum):
    ACCURATE = "accurate"
    TOO_HIGH = "too_high"
    TOO_LOW = "too_low"
    FORM_ISSUE = "form_issue"
    PACING_ISSUE = "pacing_issue"
    NOT_HELPFUL = "not_helpful"


class AnalysisInvariantError(AssertionError):
    """Raised when an assembled analysis breaks one of its output guarantees"""


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClubContext(CamelModel):
    name: Optional[str] = None
    id: Optional[str] = None
    type: Optional[ClubType] = None
    outcome: Optional[ShotOutcome] = None


class VideoReference(CamelModel):
    """Where the swing video came from; video bytes are never part of it"""
    source: VideoSourceType = VideoSourceType.NONE
    signature: Optional[str] = None
    display_url: Optional[str] = None
    url_id: Optional[str] = None
    hosted_video_id: Optional[str] = None
    embed_url: Optional[str] = None


class ScoreCard(CamelModel):
    """Mutable working scores passed through the shaping and adjustment steps"""
    overall_score: float
    metrics: Dict[str, float] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)


class Analysis(CamelModel):
    """Immutable result of scoring one swing"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    date: datetime
    recorded_date: datetime
    overall_score: int = Field(ge=0, le=100)
    metrics: Dict[str, int]
    recommendations: List[str]
    club: Optional[ClubContext] = None
    ownership: Optional[Ownership] = None
    pro_name: Optional[str] = None
    video: VideoReference = Field(default_factory=VideoReference)
    source: AnalysisSource = AnalysisSource.LLM
    model_version: Optional[str] = None

    @computed_field(alias="_isMockData")
    @property
    def is_mock_data(self) -> bool:
        return self.source == AnalysisSource.MOCK

    @field_validator("date", "recorded_date")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("metrics")
    @classmethod
    def _metric_range(cls, value: Dict[str, int]) -> Dict[str, int]:
        for key, score in value.items():
            if not 0 <= score <= 100:
                raise ValueError(f"metric {key} out of range: {score}")
        return value

    @field_validator("recommendations")
    @classmethod
    def _recommendation_count(cls, value: List[str]) -> List[str]:
        if not 1 <= len(value) <= MAX_RECOMMENDATIONS:
            raise ValueError(f"expected 1..{MAX_RECOMMENDATIONS} recommendations, got {len(value)}")
        if any(not isinstance(r, str) or not r.strip() for r in value):
            raise ValueError("recommendations must be non-empty strings")
        return value

    @model_validator(mode="after")
    def _consistency(self):
        if self.recorded_date > self.date:
            raise ValueError("recorded date is after the analysis date")
        if self.video.source == VideoSourceType.HOSTED and not self.video.hosted_video_id:
            raise ValueError("hosted analysis is missing its hosted video id")
        return self


class AnalysisHistoryEntry(CamelModel):
    timestamp: datetime
    overall_score: int
    metrics: Dict[str, int] = Field(default_factory=dict)


class AdjustmentFactors(CamelModel):
    """Globally learned additive deltas"""
    overall: int = Field(default=0, ge=-100, le=100)
    metrics: Dict[str, int] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.overall == 0 and not any(self.metrics.values())


class AdjustmentPreference(CamelModel):
    adjustment_priority: AdjustmentPriority = AdjustmentPriority.AS_NEEDED
    skill_level: Optional[SkillLevel] = None


class FeedbackRecord(CamelModel):
    """A user's judgment about one analysis"""
    analysis_id: str
    user_id: Optional[str] = None
    feedback_type: FeedbackVerdict
    metric_feedback: Dict[str, FeedbackVerdict] = Field(default_factory=dict)
    skill_level: Optional[SkillLevel] = None
    confidence: int = Field(default=3, ge=1, le=5)
    adjustment_priority: AdjustmentPriority = AdjustmentPriority.AS_NEEDED
    note: Optional[str] = None
    model_version: Optional[str] = None
    video_signature: Optional[str] = None
    overall_score: Optional[int] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class MetricFeedbackRecord(CamelModel):
    """A user's judgment about a single metric score"""
    analysis_id: str
    user_id: Optional[str] = None
    metric_key: str
    metric_value: int = Field(ge=0, le=100)
    feedback_type: FeedbackVerdict
    confidence: int = Field(default=3, ge=1, le=5)
    note: Optional[str] = None
    overall_score: Optional[int] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MetricInsights(CamelModel):
    metric_key: str
    good_aspects: List[str]
    improvement_areas: List[str]
    technical_breakdown: List[str]
    recommendations: List[str]
    feel_tips: List[str]
    source: Literal["llm", "default"] = "default"


class ReferenceAnalysis(CamelModel):
    technical_guidelines: List[str] = Field(default_factory=list)
    ideal_form: List[str] = Field(default_factory=list)
    common_mistakes: List[str] = Field(default_factory=list)
    coaching_cues: List[str] = Field(default_factory=list)
    scoring_rubric: Dict[str, str] = Field(default_factory=dict)


class ReferenceModel(CamelModel):
    """Per-metric reference knowledge extracted from an instructional video"""
    metric_key: str
    youtube_url: Optional[str] = None
    youtube_video_id: Optional[str] = None
    reference_analysis: ReferenceAnalysis


_id_lock = threading.Lock()
_last_id = 0


def new_analysis_id() -> str:
    """Millisecond-based id that strictly increases within the process"""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        _last_id = max(candidate, _last_id + 1)
        return str(_last_id)


def check_invariants(analysis: Analysis, canonical_keys) -> None:
    """Verify the guarantees every returned analysis must hold"""
    for key, score in analysis.metrics.items():
        if not isinstance(score, int) or isinstance(score, bool) or not 0 <= score <= 100:
            raise AnalysisInvariantError(f"metric {key}={score!r} is not an integer in 0..100")
        if key not in canonical_keys:
            raise AnalysisInvariantError(f"metric key {key} is not canonical")

    if not MIN_SHAPED_OVERALL <= analysis.overall_score <= MAX_SHAPED_OVERALL:
        raise AnalysisInvariantError(f"overall score {analysis.overall_score} outside shaped range")

    if not 1 <= len(analysis.recommendations) <= MAX_RECOMMENDATIONS:
        raise AnalysisInvariantError("recommendation count out of range")
    if any(not r.strip() for r in analysis.recommendations):
        raise AnalysisInvariantError("empty recommendation")

    if analysis.video.source == VideoSourceType.HOSTED and not analysis.video.hosted_video_id:
        raise AnalysisInvariantError("hosted analysis without hosted video id")
    if analysis.recorded_date > analysis.date:
        raise AnalysisInvariantError("recorded date after analysis date")


def is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
