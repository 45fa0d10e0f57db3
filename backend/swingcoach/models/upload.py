"""
Swing submission models: uploaded video blobs, hosted video references and
the metadata captured before the shot
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_HOSTED_URI_TEMPLATE = "https://youtu.be/{video_id}"


class ClubType(str, Enum):
    WOOD = "Wood"
    IRON = "Iron"
    WEDGE = "Wedge"
    PUTTER = "Putter"
    HYBRID = "Hybrid"
    OTHER = "Other"


class ShotOutcome(str, Enum):
    STRAIGHT = "straight"
    FADE = "fade"
    DRAW = "draw"
    PUSH = "push"
    PULL = "pull"
    THIN = "thin"
    FAT = "fat"
    SHANK = "shank"


class Ownership(str, Enum):
    SELF = "self"
    OTHER = "other"
    PRO = "pro"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with analysis timestamps"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class VideoUpload(BaseModel):
    """An uploaded swing video held in memory for one scoring request"""
    content: bytes = Field(repr=False)
    mime_type: str = "video/mp4"
    size: int
    filename: str
    last_modified: int = 0  # epoch milliseconds

    @property
    def signature(self) -> str:
        """Stable per-video key derived from name, byte length and modification time"""
        return f"{self.filename}-{self.size}-{self.last_modified}"

    @property
    def size_mb(self) -> float:
        return self.size / (1024 * 1024)


class HostedVideo(BaseModel):
    """A swing video that lives on a third-party platform"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    video_id: str = Field(min_length=1)
    uri_template: str = DEFAULT_HOSTED_URI_TEMPLATE
    mime_type: str = "video/*"

    @property
    def uri(self) -> str:
        return self.uri_template.format(video_id=self.video_id)

    @property
    def signature(self) -> str:
        return self.video_id


class SwingMetadata(BaseModel):
    """Pre-shot details supplied alongside the swing video"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    club_name: Optional[str] = None
    club_id: Optional[str] = None
    club_type: Optional[ClubType] = None
    outcome: Optional[ShotOutcome] = None
    recorded_date: Optional[datetime] = None
    ownership: Optional[Ownership] = None
    pro_name: Optional[str] = None
    user_id: Optional[str] = None
    hosted_video: Optional[HostedVideo] = None

    @field_validator("recorded_date")
    @classmethod
    def _recorded_date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def has_club(self) -> bool:
        return bool(self.club_name or self.club_id or self.club_type)
