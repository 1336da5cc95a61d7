"""Stage 5: Confidence Aggregator.

Five sub-scores, each clamped to [0, 1], combined with fixed weights:

    linguistic 25%  sentence structure, vocabulary diversity, dialect markers
    semantic   20%  how many gig fields were actually extracted
    cultural   20%  Caribbean local terms, cultural references, island names
    technical  20%  transcription length, audio metadata, ASR artifacts
    contextual 15%  urgency/experience signals, formality, clarity

The weighted sum is capped at 0.98; a voice note is never "certain".
"""

import logging
import re
from typing import Any

from models.schemas.confidence_breakdown import AudioMetadata, ConfidenceBreakdown, ConfidenceLevel
from models.schemas.dialect_profile import DialectProfile
from models.schemas.job_extraction import JobExtraction
from models.schemas.speech_context import SpeechContext
from services import lexicon
from services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

WEIGHTS = {
    "linguistic": 0.25,
    "semantic": 0.20,
    "cultural": 0.20,
    "technical": 0.20,
    "contextual": 0.15,
}
OVERALL_CAP = 0.98

_SPECIFIC_DIALECTS = {"jamaican", "trinidadian", "barbadian", "guyanese"}

_LEVELS: list[tuple[float, ConfidenceLevel, str]] = [
    (0.85, "Very High", "Excellent Caribbean speech recognition with high confidence"),
    (0.7, "High", "Good Caribbean speech recognition with clear patterns"),
    (0.5, "Medium", "Moderate recognition, some Caribbean patterns detected"),
    (0.3, "Low", "Basic recognition, limited Caribbean context understanding"),
    (0.0, "Very Low", "Poor recognition, unclear content or technical issues"),
]


def _clamp(value: float) -> float:
    return max(0.0, min(value, 1.0))


def _terms_in(text: str, terms: list[str]) -> list[str]:
    return [t for t in terms if lexicon.term_pattern(t).search(text)]


def analyze_speech_context(text: str) -> SpeechContext:
    """Pace, clarity and formality of the speech plus its Caribbean context."""
    culture = lexicon.load_table("culture")
    words = text.split()

    if len(words) < 30:
        pace = "slow"
    elif len(words) > 100:
        pace = "fast"
    else:
        pace = "normal"

    complete = bool(re.search(r"[.!?]", text))
    structured = len(words) > 10
    detailed = bool(_terms_in(text, culture["detail_words"]))
    if complete and structured and detailed:
        clarity = "excellent"
    elif complete and structured:
        clarity = "good"
    elif structured:
        clarity = "fair"
    else:
        clarity = "poor"

    formal = bool(_terms_in(text, culture["formal_words"]))
    casual = bool(_terms_in(text, culture["casual_words"]))
    if formal and not casual:
        formality = "formal"
    elif formal:
        formality = "semi-formal"
    else:
        formality = "casual"

    return SpeechContext(
        pace=pace,
        clarity=clarity,
        formality=formality,
        local_terms=_terms_in(text, culture["local_terms"]),
        cultural_references=_terms_in(text, culture["cultural_references"]),
        island_specific=bool(_terms_in(text, culture["island_names"])),
    )


def describe_confidence(overall: float) -> tuple[ConfidenceLevel, str]:
    for threshold, level, description in _LEVELS:
        if overall >= threshold:
            return level, description
    return _LEVELS[-1][1], _LEVELS[-1][2]


def linguistic_score(text: str, dialect: DialectProfile) -> float:
    score = 0.3
    if any(s.strip() for s in re.split(r"[.!?]", text)):
        score += 0.2
    words = text.lower().split()
    score += 0.3 * len(set(words)) / max(len(words), 1)
    if dialect.detected_terms:
        score += 0.15
    if dialect.primary_dialect in _SPECIFIC_DIALECTS:
        score += 0.05
    return _clamp(score)


def semantic_score(extraction: JobExtraction) -> float:
    score = 0.2
    if extraction.job_type != "unclear":
        score += 0.25
    score += min(0.1 * len(extraction.skills), 0.3)
    if extraction.budget.amount:
        score += 0.15
    if extraction.location:
        score += 0.1
    return _clamp(score)


def cultural_score(speech: SpeechContext) -> float:
    score = 0.1
    score += min(0.15 * len(speech.local_terms), 0.4)
    score += min(0.1 * len(speech.cultural_references), 0.3)
    if speech.island_specific:
        score += 0.2
    return _clamp(score)


def technical_score(text: str, audio_meta: AudioMetadata | None = None) -> float:
    score = 0.3
    if len(text) > 20:
        score += 0.15
    if len(text) > 100:
        score += 0.15
    if audio_meta is not None:
        if audio_meta.sample_rate >= 16000:
            score += 0.1
        if audio_meta.sample_rate >= 44100:
            score += 0.1
        if audio_meta.duration >= 3:
            score += 0.1
        if audio_meta.duration >= 10:
            score += 0.05
        if audio_meta.signal_to_noise is not None and audio_meta.signal_to_noise > 10:
            score += min(audio_meta.signal_to_noise / 50, 0.15)
    lowered = text.lower()
    if not any(a in lowered for a in lexicon.load_table("culture")["transcription_artifacts"]):
        score += 0.1
    return _clamp(score)


def contextual_score(extraction: JobExtraction, speech: SpeechContext) -> float:
    score = 0.2
    if extraction.urgency != "medium":
        score += 0.15
    if extraction.experience != "unclear":
        score += 0.15
    if speech.formality in ("semi-formal", "formal"):
        score += 0.2
    if speech.clarity == "excellent":
        score += 0.2
    elif speech.clarity == "good":
        score += 0.1
    return _clamp(score)


class ConfidenceAggregator(BaseStage):
    stage_name = "s5_confidence"
    tables = ("culture",)

    def aggregate(
        self,
        transcription: str,
        dialect: DialectProfile,
        extraction: JobExtraction,
        audio_meta: AudioMetadata | None = None,
        speech: SpeechContext | None = None,
    ) -> ConfidenceBreakdown:
        speech = speech or analyze_speech_context(transcription)
        scores = {
            "linguistic": linguistic_score(transcription, dialect),
            "semantic": semantic_score(extraction),
            "cultural": cultural_score(speech),
            "technical": technical_score(transcription, audio_meta),
            "contextual": contextual_score(extraction, speech),
        }
        overall = min(sum(scores[k] * w for k, w in WEIGHTS.items()), OVERALL_CAP)
        level, description = describe_confidence(overall)
        logger.debug("Confidence %.3f (%s): %s", overall, level, scores)
        return ConfidenceBreakdown(
            overall=round(overall, 4),
            **{k: round(v, 4) for k, v in scores.items()},
            level=level,
            description=description,
        )

    def predict(self, **kwargs: Any) -> ConfidenceBreakdown:
        return self.aggregate(
            kwargs.get("transcription", ""),
            kwargs.get("dialect") or DialectProfile(),
            kwargs.get("extraction") or JobExtraction(),
            kwargs.get("audio_meta"),
            kwargs.get("speech"),
        )
