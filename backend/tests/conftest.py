"""
Pytest configuration and fixtures for testing
"""

import os

# Local, offline configuration; must be set before any swingcoach import
os.environ["USE_LOCAL_STORAGE"] = "true"
os.environ["HISTORY_FILE"] = ""
os.environ["LOG_FILE"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["AWS_SECRET_ACCESS_KEY"] = ""
os.environ["S3_BUCKET"] = ""
os.environ["USE_MOCK_ANALYSIS"] = "false"
os.environ["ENABLE_MINIMAL_VARIATION"] = "false"
os.environ["STRICT_INVARIANTS"] = "false"

import json
import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from swingcoach.analyzers.mock_analyzer import MockAnalyzer
from swingcoach.analyzers.swing_analyzer import SwingAnalyzer
from swingcoach.main import app
from swingcoach.models.upload import ClubType, SwingMetadata, VideoUpload
from swingcoach.services.adjustment_service import AdjustmentEngine
from swingcoach.services.consistency_service import ConsistencyBlender
from swingcoach.services.document_store import MemoryDocumentStore
from swingcoach.services.history_store import MemoryHistoryStore
from swingcoach.services.reference_service import ReferenceGuidelineService
from swingcoach.services.video_url_service import VideoUrlManager


class FakeLLMClient:
    """Scripted stand-in for LLMClient; returns queued texts or raises queued errors"""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    async def generate(self, prompt, video=None, temperature=0.5, max_tokens=2048, timeout=120.0):
        self.calls.append({
            "prompt": prompt,
            "video": video,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": timeout,
        })
        if not self.responses:
            raise AssertionError("FakeLLMClient has no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


SCORING_METRICS = {
    "stance": 78, "grip": 64, "ballPosition": 71, "backswing": 58,
    "swingForward": 66, "swingSpeed": 74, "shallowing": 52, "impactPosition": 69,
    "stiffness": 61, "hipRotation": 55, "pacing": 80, "followThrough": 72,
    "headPosition": 67, "shoulderPosition": 63, "armPosition": 70,
    "confidence": 82, "focus": 76,
}


@pytest.fixture
def scoring_response():
    """Well-formed scoring text covering every canonical metric"""
    return json.dumps({
        "overallScore": 66,
        "metrics": SCORING_METRICS,
        "recommendations": [
            "Rotate your hips earlier in the downswing",
            "Keep your lead arm straight at the top",
            "Shallow the club in transition",
        ],
    })


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def document_store():
    return MemoryDocumentStore()


@pytest.fixture
def history_store():
    return MemoryHistoryStore(max_entries=3)


@pytest.fixture
def url_manager():
    return VideoUrlManager(ttl_seconds=3600, max_cached=5)


@pytest.fixture
def sample_upload():
    content = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256
    return VideoUpload(
        content=content,
        mime_type="video/mp4",
        size=len(content),
        filename="driver-range.mp4",
        last_modified=1700000000000,
    )


@pytest.fixture
def sample_metadata():
    return SwingMetadata(
        club_name="Driver",
        club_id="club-1",
        club_type=ClubType.WOOD,
        recorded_date=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        user_id="user-123",
    )


@pytest.fixture
def swing_analyzer(fake_llm, document_store, history_store, url_manager):
    """Orchestrator wired to in-memory stores and the scripted LLM"""
    return SwingAnalyzer(
        fake_llm,
        ConsistencyBlender(history_store),
        AdjustmentEngine(document_store),
        ReferenceGuidelineService(document_store, fake_llm),
        MockAnalyzer(random.Random(7)),
        url_manager=url_manager,
    )


@pytest.fixture
def client():
    """Create a test client for FastAPI app"""
    return TestClient(app)
