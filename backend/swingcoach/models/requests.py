"""
Request bodies accepted by the HTTP API
"""

from typing import Optional

from pydantic import Field, model_validator

from swingcoach.models.analysis import Analysis, CamelModel
from swingcoach.models.upload import SwingMetadata
from swingcoach.utils.video_utils import extract_youtube_video_id


class HostedAnalysisRequest(CamelModel):
    """Score a swing hosted on YouTube, identified by URL or video id"""
    url: Optional[str] = None
    video_id: Optional[str] = None
    metadata: SwingMetadata = Field(default_factory=SwingMetadata)

    @model_validator(mode="after")
    def _resolve_video_id(self):
        if not self.video_id:
            self.video_id = extract_youtube_video_id(self.url)
        if not self.video_id:
            raise ValueError("a valid YouTube url or videoId is required")
        return self


class InsightRequest(CamelModel):
    analysis: Analysis
    metric_key: str = Field(min_length=1)
    is_authenticated: bool = False


class ReferenceModelRequest(CamelModel):
    metric_key: str = Field(min_length=1)
    youtube_url: str = Field(min_length=1)
