"""
Golf swing metric catalog: titles, categories, weights, difficulty and aliases
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


DEFAULT_WEIGHT = 0.05
GENERIC_DESCRIPTION = "An important aspect of your golf swing"


class MetricCategory(str, Enum):
    SETUP = "Setup"
    SWING = "Swing"
    CLUB = "Club"
    BODY = "Body"
    MENTAL = "Mental"


# Scoring weights keyed by the raw metric key the scorer may return.
# swingBack is a legacy key for backswing but keeps its own weight entry.
METRIC_WEIGHTS: Dict[str, float] = {
    "stance": 0.07,
    "grip": 0.07,
    "ballPosition": 0.06,
    "backswing": 0.10,
    "swingBack": 0.10,
    "swingForward": 0.15,
    "shallowing": 0.15,
    "impactPosition": 0.15,
    "hipRotation": 0.08,
    "pacing": 0.04,
    "stiffness": 0.04,
    "headPosition": 0.04,
    "shoulderPosition": 0.04,
    "armPosition": 0.04,
    "followThrough": 0.04,
    "confidence": 0.05,
    "focus": 0.05,
}

METRIC_ALIASES: Dict[str, str] = {
    "swingBack": "backswing",
    "clubTrajectoryBackswing": "backswing",
    "clubTrajectoryForswing": "swingForward",
    "downswing": "swingForward",
}

# Metrics that tend to move together; partial adjustments spread within a group
CORRELATED_GROUPS: Dict[str, List[str]] = {
    "backswingGroup": ["backswing", "swingBack", "clubTrajectoryBackswing"],
    "downswingGroup": ["swingForward", "clubTrajectoryForswing", "shallowing"],
    "bodyGroup": ["hipRotation", "followThrough", "shoulderPosition", "armPosition"],
    "setupGroup": ["stance", "grip", "ballPosition"],
    "mentalGroup": ["confidence", "focus"],
}


@dataclass(frozen=True)
class Metric:
    """One scoring axis of a golf swing"""
    key: str
    title: str
    category: MetricCategory
    weight: float
    difficulty: int
    description: str
    example_url: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "title": self.title,
            "category": self.category.value,
            "weight": self.weight,
            "difficulty": self.difficulty,
            "description": self.description,
            "exampleUrl": self.example_url,
        }


# key, title, category, difficulty, description, instructional video
_CATALOG: List[Tuple[str, str, MetricCategory, int, str, Optional[str]]] = [
    ("confidence", "Confidence", MetricCategory.MENTAL, 7,
     "Your mental composure and commitment to the swing",
     "https://www.youtube.com/watch?v=y95_Us_qCpQ"),
    ("focus", "Focus", MetricCategory.MENTAL, 4,
     "Your concentration and attention during setup and swing",
     "https://www.youtube.com/watch?v=SLbeLgQls_4"),
    ("stance", "Stance", MetricCategory.SETUP, 2,
     "Your foot position, width, alignment, and posture",
     "https://www.youtube.com/watch?v=P4d5TjzEgtk"),
    ("grip", "Grip", MetricCategory.SETUP, 3,
     "How you hold the club and hand positioning",
     "https://www.youtube.com/watch?v=nd6y-5nInHQ"),
    ("ballPosition", "Ball Position", MetricCategory.SETUP, 1,
     "The position of the ball relative to your stance and club type",
     "https://www.youtube.com/watch?v=UdZfTKBfGho"),
    ("backswing", "Backswing", MetricCategory.CLUB, 8,
     "Your takeaway and club position during the backswing phase",
     "https://www.youtube.com/watch?v=oszzApkv54s"),
    ("swingForward", "Forward Swing", MetricCategory.CLUB, 8,
     "The path your club takes on the way down to impact",
     "https://www.youtube.com/watch?v=xia6slsDGd4"),
    ("swingSpeed", "Swing Speed", MetricCategory.CLUB, 7,
     "The velocity and acceleration through your swing",
     "https://www.youtube.com/watch?v=FSDH0DXWP7M"),
    ("shallowing", "Shallowing", MetricCategory.CLUB, 9,
     "How well your club drops into the proper path during downswing",
     "https://www.youtube.com/watch?v=OaeUTaBo6hw"),
    ("impactPosition", "Impact Position", MetricCategory.CLUB, 10,
     "The position and angle of the club at the moment of impact",
     "https://www.youtube.com/watch?v=Wu7jMcPK2yM"),
    ("stiffness", "Stiffness", MetricCategory.BODY, 5,
     "Your ability to remove tension from your body during your swing",
     "https://www.youtube.com/watch?v=trOLRAPi07M"),
    ("hipRotation", "Hip Rotation", MetricCategory.BODY, 6,
     "How your hips rotate throughout the swing",
     "https://www.youtube.com/watch?v=p_HZJ2u0TIo&t=2s"),
    ("pacing", "Tempo & Rhythm", MetricCategory.BODY, 6,
     "The timing and rhythm throughout your swing",
     "https://www.youtube.com/watch?v=t8npyrOQ9Os"),
    ("followThrough", "Follow Through", MetricCategory.BODY, 4,
     "Your swing completion after ball contact",
     "https://www.youtube.com/watch?v=kf0v-iCntNo"),
    ("headPosition", "Head Position", MetricCategory.BODY, 4,
     "The stability and position of your head during the swing",
     "https://www.youtube.com/watch?v=CsDhFI0A8-Y"),
    ("shoulderPosition", "Shoulder Position", MetricCategory.BODY, 6,
     "How your shoulders move and position throughout the swing",
     "https://www.youtube.com/watch?v=OCuK7nWvHt0"),
    ("armPosition", "Arm Position", MetricCategory.BODY, 6,
     "The positioning of your arms throughout the swing",
     "https://youtu.be/ToDcjnxouQU"),
]


class MetricRegistry:
    """Read-only catalog of recognised swing metrics"""

    def __init__(
        self,
        catalog: List[Tuple[str, str, MetricCategory, int, str, Optional[str]]] = None,
        weights: Dict[str, float] = None,
        aliases: Dict[str, str] = None,
    ):
        catalog = _CATALOG if catalog is None else catalog
        self._weights = dict(METRIC_WEIGHTS if weights is None else weights)
        self._aliases = dict(METRIC_ALIASES if aliases is None else aliases)

        self._metrics: Dict[str, Metric] = {}
        for key, title, category, difficulty, description, url in catalog:
            self._metrics[key] = Metric(
                key=key,
                title=title,
                category=category,
                weight=self._weights.get(key, DEFAULT_WEIGHT),
                difficulty=difficulty,
                description=description,
                example_url=url,
            )

        self._validate()

    def _validate(self):
        """Reject a malformed catalog; a bad weight table is a programmer error"""
        if not self._metrics:
            raise ValueError("Metric registry is empty")

        for key, weight in self._weights.items():
            if not isinstance(weight, (int, float)) or isinstance(weight, bool):
                raise ValueError(f"Weight for '{key}' is not a number: {weight!r}")
            if not 0 < weight <= 1:
                raise ValueError(f"Weight for '{key}' must be in (0, 1], got {weight}")
            if key not in self._metrics and self._aliases.get(key) not in self._metrics:
                raise ValueError(f"Weight table references unknown metric '{key}'")

        for alias, target in self._aliases.items():
            if target not in self._metrics:
                raise ValueError(f"Alias '{alias}' points at unknown metric '{target}'")
            if alias in self._metrics:
                raise ValueError(f"Alias '{alias}' shadows a canonical metric")

        for metric in self._metrics.values():
            if not 1 <= metric.difficulty <= 10:
                raise ValueError(f"Difficulty for '{metric.key}' must be in 1..10")

    def get(self, key: str) -> Optional[Metric]:
        """Look up a metric by canonical key or alias"""
        if not key:
            return None
        return self._metrics.get(self.canonical(key))

    def canonical(self, key: str) -> str:
        """Map an alias onto its canonical key; unknown keys pass through"""
        return self._aliases.get(key, key)

    def is_known(self, key: str) -> bool:
        return self.get(key) is not None

    def all(self) -> List[Metric]:
        return list(self._metrics.values())

    def canonical_keys(self) -> List[str]:
        return list(self._metrics.keys())

    def weight(self, key: str) -> float:
        """Scoring weight for a raw key, falling back to the canonical metric, then the default"""
        if key in self._weights:
            return self._weights[key]
        canonical = self.canonical(key)
        if canonical in self._weights:
            return self._weights[canonical]
        return DEFAULT_WEIGHT

    def description(self, key: str) -> str:
        metric = self.get(key)
        return metric.description if metric else GENERIC_DESCRIPTION

    def title(self, key: str) -> str:
        metric = self.get(key)
        if metric:
            return metric.title
        # camelCase -> "Camel Case"
        spaced = "".join(f" {c}" if c.isupper() else c for c in key).strip()
        return spaced[:1].upper() + spaced[1:]


# Global registry instance, built once at import
metric_registry = MetricRegistry()
