"""
Fallback analyzer that fabricates a plausible, fully shaped analysis
without calling the LLM
"""

import math
import random
from typing import Dict, List, Optional

from swingcoach.analyzers.base_analyzer import BaseAnalyzer
from swingcoach.models.analysis import Analysis, AnalysisSource, ScoreCard, VideoReference
from swingcoach.models.upload import ClubType, SwingMetadata, VideoUpload
from swingcoach.services.score_shaper import calculate_weighted_overall_score, clamp, redistribute, stretch_variance
from swingcoach.utils.logger import get_logger
from swingcoach.utils.metric_content import DEFAULT_RECOMMENDATIONS, RECOMMENDATION_POOLS

logger = get_logger(__name__)

BASE_SKILL = 65
SKILL_JITTER = 4
GROUP_JITTER = 5
MOCK_MIN = 30
MOCK_MAX = 95

# Correlated groups; metrics in a group share a sampled group mean
MOCK_GROUPS: Dict[str, List[str]] = {
    "setup": ["stance", "grip", "ballPosition"],
    "swing": ["backswing", "swingForward", "swingSpeed", "shallowing", "impactPosition"],
    "body": ["stiffness", "hipRotation", "pacing", "followThrough",
             "headPosition", "shoulderPosition", "armPosition"],
    "mental": ["confidence", "focus"],
}

# Standard deviation per group; mental scores vary more than physical ones
GROUP_SPREAD: Dict[str, float] = {"setup": 6.0, "swing": 7.0, "body": 7.0, "mental": 11.0}

CLUB_SKILL_OFFSET: Dict[ClubType, int] = {
    ClubType.WOOD: -3,
    ClubType.IRON: 0,
    ClubType.WEDGE: 2,
    ClubType.PUTTER: 4,
    ClubType.HYBRID: -1,
    ClubType.OTHER: 0,
}

CLUB_NUDGES: Dict[ClubType, Dict[str, int]] = {
    ClubType.WOOD: {"swingSpeed": 6, "shallowing": -5},
    ClubType.IRON: {"swingForward": 5},
    ClubType.WEDGE: {"grip": 5},
    ClubType.PUTTER: {"pacing": 8, "focus": 6},
}


def box_muller(rng: random.Random, mean: float = 0.0, std: float = 1.0) -> float:
    """One normally distributed sample from two uniform draws"""
    u1 = 1.0 - rng.random()  # (0, 1], keeps log() finite
    u2 = rng.random()
    z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return mean + z * std


class MockAnalyzer(BaseAnalyzer):
    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__("mock")
        self.rng = rng or random.Random()

    def generate_metrics(self, club_type: Optional[ClubType] = None) -> Dict[str, int]:
        base = BASE_SKILL + CLUB_SKILL_OFFSET.get(club_type, 0) + box_muller(self.rng, 0, SKILL_JITTER)

        metrics: Dict[str, int] = {}
        for group, members in MOCK_GROUPS.items():
            group_mean = box_muller(self.rng, base, GROUP_JITTER)
            for key in members:
                sample = box_muller(self.rng, group_mean, GROUP_SPREAD[group])
                metrics[key] = int(clamp(round(sample), MOCK_MIN, MOCK_MAX))

        for key, nudge in CLUB_NUDGES.get(club_type, {}).items():
            metrics[key] = int(clamp(metrics[key] + nudge, MOCK_MIN, MOCK_MAX))

        return metrics

    def pick_recommendations(self, metrics: Dict[str, int]) -> List[str]:
        """One template for each of the three weakest metrics"""
        weakest = sorted(metrics, key=lambda k: (metrics[k], k))[:3]
        picks = []
        for key in weakest:
            pool = [r for r in RECOMMENDATION_POOLS.get(key, []) if r not in picks]
            if pool:
                picks.append(self.rng.choice(pool))
        for fallback in DEFAULT_RECOMMENDATIONS:
            if len(picks) >= 3:
                break
            if fallback not in picks:
                picks.append(fallback)
        return picks

    def generate_card(self, metadata: Optional[SwingMetadata] = None) -> ScoreCard:
        club_type = metadata.club_type if metadata else None
        # Stretching can push clustered samples past the mock bounds
        metrics = {
            key: int(clamp(score, MOCK_MIN, MOCK_MAX))
            for key, score in stretch_variance(self.generate_metrics(club_type)).items()
        }
        card = ScoreCard(
            overall_score=calculate_weighted_overall_score(metrics),
            metrics=metrics,
            recommendations=self.pick_recommendations(metrics),
        )
        return redistribute(card)

    async def analyze(
        self,
        upload: Optional[VideoUpload] = None,
        metadata: Optional[SwingMetadata] = None,
        video: Optional[VideoReference] = None,
        analysis_id: Optional[str] = None,
    ) -> Analysis:
        logger.info("Generating mock analysis")
        card = self.generate_card(metadata)
        return self.build_analysis(
            card,
            metadata,
            video or VideoReference(),
            AnalysisSource.MOCK,
            analysis_id=analysis_id,
        )


mock_analyzer = MockAnalyzer()
