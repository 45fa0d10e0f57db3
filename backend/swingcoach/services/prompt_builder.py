"""
Prompt construction for swing scoring and per-metric insights
"""

import json
from typing import Dict, List, Optional

from swingcoach.models.analysis import ReferenceModel
from swingcoach.models.upload import SwingMetadata
from swingcoach.utils.metric_content import METRIC_RUBRICS, RUBRIC_BANDS
from swingcoach.utils.metric_registry import MetricRegistry, metric_registry

VIDEO_UNCLEAR = "Video unclear"
REFERENCE_ITEMS_PER_SECTION = 3

ROLE_PREAMBLE = (
    "You are a tour-level golf swing analyst who has coached professionals on "
    "every major tour. Watch the attached golf swing video closely and score it "
    "honestly. Use the full 0-100 range: do not cluster every score in the 70s, "
    "and score each metric on what you can actually see."
)

OVERALL_RUBRIC = [
    ("95-100", "Elite, tour-winning swing with no visible weaknesses"),
    ("88-94", "Exceptional, tour-level mechanics with minor refinements possible"),
    ("80-87", "Very good, low single-digit handicap with small inconsistencies"),
    ("70-79", "Competent, sound fundamentals with a few clear faults"),
    ("60-69", "Developing, fundamentals present but several faults affect the strike"),
    ("50-59", "Inconsistent, multiple faults that limit repeatability"),
    ("0-49", "Beginner, fundamental mechanics still need to be built"),
]

RESPONSE_EXAMPLE = {
    "overallScore": 72,
    "metrics": {"backswing": 68, "stance": 81, "grip": 75},
    "recommendations": [
        "Keep your lead arm straighter at the top of the backswing",
        "Start the downswing with your hips rather than your shoulders",
        "Hold your finish until the ball lands",
    ],
}


def _bullet(items: List[str], limit: Optional[int] = None) -> str:
    items = items[:limit] if limit else items
    return "\n".join(f"    - {item}" for item in items)


class PromptBuilder:
    """Builds the text half of the multimodal requests"""

    def __init__(self, registry: MetricRegistry = metric_registry):
        self.registry = registry

    def overall_rubric_section(self) -> str:
        lines = [f"- {band}: {text}" for band, text in OVERALL_RUBRIC]
        return "OVERALL SCORE RUBRIC:\n" + "\n".join(lines)

    def metric_rubric_section(self) -> str:
        blocks = []
        for metric in self.registry.all():
            bands = METRIC_RUBRICS.get(metric.key)
            header = f"- {metric.key} ({metric.title}, {metric.category.value}): {metric.description}"
            if bands:
                detail = "\n".join(f"    {band}: {text}" for band, text in zip(RUBRIC_BANDS, bands))
                header = f"{header}\n{detail}"
            blocks.append(header)
        return "SCORE EACH OF THESE METRICS FROM 0-100:\n" + "\n".join(blocks)

    def club_section(self, metadata: Optional[SwingMetadata]) -> str:
        if not metadata or not metadata.has_club:
            return ""
        club = metadata.club_name or (metadata.club_type.value if metadata.club_type else "club")
        sentence = f"This swing was performed with a {club}"
        if metadata.club_type and metadata.club_name:
            sentence += f" ({metadata.club_type.value})"
        sentence += ". Take the club into account when judging ball position, stance width and swing plane."
        if metadata.outcome:
            sentence += f" The golfer reported a {metadata.outcome.value} shot."
        return sentence

    def reference_section(self, references: Optional[Dict[str, ReferenceModel]]) -> str:
        if not references:
            return ""
        blocks = []
        for key, reference in references.items():
            ra = reference.reference_analysis
            parts = [f"{self.registry.title(key)} ({key}):"]
            if ra.technical_guidelines:
                parts.append("  Technical guidelines:\n" + _bullet(ra.technical_guidelines, REFERENCE_ITEMS_PER_SECTION))
            if ra.ideal_form:
                parts.append("  Ideal form:\n" + _bullet(ra.ideal_form, REFERENCE_ITEMS_PER_SECTION))
            if ra.common_mistakes:
                parts.append("  Common mistakes:\n" + _bullet(ra.common_mistakes, REFERENCE_ITEMS_PER_SECTION))
            if ra.scoring_rubric:
                criteria = [f"{band}: {text}" for band, text in ra.scoring_rubric.items()]
                parts.append("  Scoring criteria:\n" + _bullet(criteria))
            blocks.append("\n".join(parts))
        return (
            "REFERENCE GUIDELINES FROM PROFESSIONAL INSTRUCTION:\n"
            "Use these when scoring the matching metrics.\n\n" + "\n\n".join(blocks)
        )

    def build_scoring_prompt(
        self,
        metadata: Optional[SwingMetadata] = None,
        references: Optional[Dict[str, ReferenceModel]] = None,
    ) -> str:
        """Full scoring prompt: rubric template, optional club sentence, optional reference guidelines"""
        sections = [
            ROLE_PREAMBLE,
            self.overall_rubric_section(),
            self.metric_rubric_section(),
            (
                "RECOMMENDATIONS:\nProvide exactly three specific, actionable recommendations "
                "that target the lowest scoring parts of this swing."
            ),
            (
                "RESPONSE FORMAT:\nYour response MUST be a single valid JSON object and nothing else, "
                "with the keys \"overallScore\" (integer 0-100), \"metrics\" (object mapping each metric "
                "key above to an integer 0-100) and \"recommendations\" (array of three strings). "
                "Do not add commentary before or after the JSON. Example:\n"
                + json.dumps(RESPONSE_EXAMPLE, indent=2)
            ),
        ]

        club = self.club_section(metadata)
        if club:
            sections.append(club)
        reference = self.reference_section(references)
        if reference:
            sections.append(reference)

        return "\n\n".join(sections)

    def build_insight_prompt(self, metric_key: str, score: Optional[int], has_video: bool) -> str:
        """Prompt for a structured coaching breakdown of one metric"""
        metric = self.registry.get(metric_key)
        title = self.registry.title(metric_key)
        description = self.registry.description(metric_key)
        category = metric.category.value if metric else "General"
        difficulty = metric.difficulty if metric else 5
        weight = self.registry.weight(metric_key)
        score_text = f"{score}/100" if score is not None else "not scored"

        video_line = (
            "Watch the attached swing video and base every point on what you can see."
            if has_video else
            "No video is available; base your advice on the score alone."
        )

        return (
            "You are a tour-level golf coach giving a focused lesson on one part of the swing.\n\n"
            f"METRIC: {title} ({metric_key})\n"
            f"Description: {description}\n"
            f"Category: {category}\n"
            f"Difficulty to master: {difficulty}/10\n"
            f"Weight in the overall score: {weight * 100:.0f}%\n"
            f"Observed score: {score_text}\n\n"
            f"{video_line} If the video is too unclear to judge this metric, include the exact "
            f"phrase \"{VIDEO_UNCLEAR}\" in technicalBreakdown instead of guessing.\n\n"
            "Respond with a single valid JSON object and nothing else:\n"
            "{\n"
            '  "goodAspects": ["what the golfer does well"],\n'
            '  "improvementAreas": ["what needs work"],\n'
            '  "technicalBreakdown": ["technical explanation of the positions"],\n'
            '  "recommendations": ["specific drills or changes"],\n'
            '  "feelTips": ["feel cues the golfer can use"]\n'
            "}\n"
            "Give two or three short items per list."
        )


prompt_builder = PromptBuilder()
