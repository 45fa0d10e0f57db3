"""
Tests for the metric registry and the YouTube helpers
"""

import pytest

from swingcoach.utils.metric_registry import (
    DEFAULT_WEIGHT,
    GENERIC_DESCRIPTION,
    MetricCategory,
    MetricRegistry,
    metric_registry,
)
from swingcoach.utils.video_utils import (
    extract_youtube_video_id,
    is_valid_youtube_url,
    youtube_embed_url,
    youtube_thumbnail_url,
)


class TestMetricRegistry:
    def test_catalog(self):
        keys = metric_registry.canonical_keys()
        assert len(keys) == 17
        assert "swingBack" not in keys
        assert metric_registry.get("grip").category == MetricCategory.SETUP

    def test_weights(self):
        assert metric_registry.weight("swingForward") == 0.15
        assert metric_registry.weight("swingBack") == 0.10
        assert metric_registry.weight("clubTrajectoryBackswing") == 0.10
        assert metric_registry.weight("swingSpeed") == DEFAULT_WEIGHT
        assert metric_registry.weight("elbowTuck") == DEFAULT_WEIGHT

    def test_aliases(self):
        assert metric_registry.canonical("swingBack") == "backswing"
        assert metric_registry.canonical("clubTrajectoryForswing") == "swingForward"
        assert metric_registry.canonical("elbowTuck") == "elbowTuck"
        assert metric_registry.get("downswing").key == "swingForward"

    def test_unknown_metric_text(self):
        assert metric_registry.description("elbowTuck") == GENERIC_DESCRIPTION
        assert metric_registry.title("elbowTuck") == "Elbow Tuck"
        assert not metric_registry.is_known("elbowTuck")

    def test_invalid_weight_rejected(self):
        with pytest.raises(ValueError):
            MetricRegistry(weights={"stance": 1.5})
        with pytest.raises(ValueError):
            MetricRegistry(weights={"stance": "heavy"})

    def test_invalid_alias_rejected(self):
        with pytest.raises(ValueError):
            MetricRegistry(aliases={"legacyKey": "doesNotExist"})

    def test_to_dict(self):
        data = metric_registry.get("focus").to_dict()
        assert data["key"] == "focus"
        assert data["weight"] == 0.05


class TestYoutubeHelpers:
    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/v/dQw4w9WgXcQ",
        "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtube.com/shorts/dQw4w9WgXcQ",
        "https://www.youtube.com/live/dQw4w9WgXcQ?si=abc",
    ])
    def test_extract_video_id(self, url):
        assert extract_youtube_video_id(url) == "dQw4w9WgXcQ"

    def test_invalid_urls(self):
        assert extract_youtube_video_id("https://vimeo.com/12345") is None
        assert extract_youtube_video_id(None) is None
        assert not is_valid_youtube_url("")

    def test_urls(self):
        assert youtube_embed_url("abc") == "https://www.youtube.com/embed/abc"
        assert youtube_thumbnail_url("abc") == "https://img.youtube.com/vi/abc/hqdefault.jpg"
