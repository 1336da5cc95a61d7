"""Stage 2: Dialect/Accent Classifier.

Strategies run in a fixed order and the first one that returns a profile
wins:

    1. LLM  - structured prompt, schema-validated (skipped when no provider)
    2. Patterns - deterministic regex/keyword scoring, always answers

A transport error, timeout, malformed JSON or schema mismatch from the LLM
all look the same to the classifier: the strategy returns None and the next
one runs.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from pydantic import ValidationError

from models.schemas.dialect_profile import ISLANDS, DialectProfile, PatoisLevel
from models.schemas.llm_responses import DialectLLMResponse
from services import lexicon
from services.pipeline.base import BaseStage
from services.prompt_builder import build_dialect_prompt

logger = logging.getLogger(__name__)

LLMProvider = Callable[[str], Awaitable[dict | None]]

_DISPLAY_NAMES = {
    "jamaican": "Jamaican",
    "trinidadian": "Trinidadian",
    "barbadian": "Barbadian (Bajan)",
    "guyanese": "Guyanese",
}

_PATOIS_DESCRIPTIONS = {
    "heavy": "Heavy Patois usage - Rich Caribbean dialect",
    "moderate": "Moderate Patois usage - Mixed Caribbean expressions",
    "light": "Light Caribbean influence detected",
    "none": "Standard English with no discernible Caribbean dialect markers",
}


class DialectStrategy(Protocol):
    name: str

    async def __call__(self, text: str) -> DialectProfile | None: ...


def _patois_level(total: int, word_count: int) -> PatoisLevel:
    ratio = total / max(word_count, 1)
    if ratio == 0:
        return "none"
    if ratio < 0.1:
        return "light"
    if ratio < 0.3:
        return "moderate"
    return "heavy"


def _dedupe(items: list[str]) -> list[str]:
    seen: list[str] = []
    for item in items:
        item = item.strip().lower()
        if item and item not in seen:
            seen.append(item)
    return seen


def classify_patterns(text: str) -> DialectProfile:
    """Deterministic scoring: +2 per pattern match, +1 per distinct indicator word."""
    word_count = len(text.split())
    scores: dict[str, int] = {}
    islands: dict[str, str] = {}
    found: list[str] = []

    for dialect, entry in lexicon.load_table("dialects").items():
        score = 0
        for pattern in lexicon.compile_patterns("dialects", dialect, "patterns"):
            matches = [m.group(0) for m in pattern.finditer(text)]
            score += 2 * len(matches)
            found.extend(matches)
        for word in entry["indicators"]:
            if lexicon.term_pattern(word).search(text):
                score += 1
                found.append(word)
        scores[dialect] = score
        islands[dialect] = entry["island"]

    total = sum(scores.values())
    top_dialect, top_score = "standard_english", 0
    for dialect, score in scores.items():
        if score > top_score:  # strict: earlier dialects win ties
            top_dialect, top_score = dialect, score

    confidence = 0.0
    primary = top_dialect
    if top_score > 0:
        confidence = min(top_score / max(word_count * 0.1, 1), 1.0)
        if total > 1 and top_score / total < 0.6:
            primary = "general_caribbean"
            confidence = min(total / max(word_count * 0.15, 1), 1.0)

    island_probability = {island: 0.0 for island in ISLANDS}
    for dialect, score in scores.items():
        island_probability[islands[dialect]] = score / (total + 1)
    island_probability["other"] = 1 / (total + 1)

    detected = _dedupe(found)
    return DialectProfile(
        primary_dialect=primary,
        confidence=round(confidence, 4),
        patois_level=_patois_level(total, word_count),
        island_probability=island_probability,
        detected_terms=detected,
        linguistic_features=["Pattern-based detection"] if detected else [],
        recommendation=(
            "Strong Caribbean dialect detected" if confidence > 0.6
            else "Minimal Caribbean features found"
        ),
        source="patterns",
    )


def _normalize_probabilities(raw: dict[str, float]) -> dict[str, float]:
    total = sum(raw.values())
    if total <= 0:
        return {island: 0.0 for island in ISLANDS[:-1]} | {"other": 1.0}
    return {island: raw.get(island, 0.0) / total for island in ISLANDS}


class PatternStrategy:
    name = "patterns"

    async def __call__(self, text: str) -> DialectProfile | None:
        return classify_patterns(text)


class LLMStrategy:
    name = "llm"

    def __init__(self, llm: LLMProvider) -> None:
        self.llm = llm

    async def __call__(self, text: str) -> DialectProfile | None:
        try:
            payload = await self.llm(build_dialect_prompt(text))
        except Exception as e:
            logger.warning("Dialect LLM call failed: %s", e)
            return None
        if payload is None:
            return None

        try:
            parsed = DialectLLMResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning("Dialect LLM response failed validation: %s", e.error_count())
            return None

        return DialectProfile(
            primary_dialect=parsed.accent,
            confidence=parsed.confidence,
            patois_level=parsed.patois_level,
            island_probability=_normalize_probabilities(parsed.island_probability.model_dump()),
            detected_terms=_dedupe(parsed.indicators),
            linguistic_features=parsed.linguistic_features,
            cultural_references=parsed.cultural_references,
            speech_patterns=parsed.speech_patterns,
            dialect_variant=parsed.dialect_variant,
            recommendation=parsed.recommendation,
            source="llm",
        )


class DialectClassifier(BaseStage):
    stage_name = "s2_dialect_classifier"
    tables = ("dialects",)

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self.strategies: list[DialectStrategy] = []
        if llm is not None:
            self.strategies.append(LLMStrategy(llm))
        self.strategies.append(PatternStrategy())

    async def classify(self, text: str) -> DialectProfile:
        if not text or not text.strip():
            return DialectProfile()
        for strategy in self.strategies:
            profile = await strategy(text)
            if profile is not None:
                logger.info(
                    "Dialect %s (%.2f, patois=%s) via %s",
                    profile.primary_dialect, profile.confidence, profile.patois_level, strategy.name,
                )
                return profile
        return DialectProfile()

    def predict(self, **kwargs: Any) -> DialectProfile:
        text = kwargs.get("text", "")
        if not text or not text.strip():
            return DialectProfile()
        return classify_patterns(text)

    async def apredict(self, **kwargs: Any) -> DialectProfile:
        return await self.classify(kwargs.get("text", ""))


def describe(profile: DialectProfile) -> str:
    """User-facing accent and patois summary."""
    pct = f"{profile.confidence * 100:.0f}%"
    if profile.primary_dialect == "general_caribbean":
        accent = f"Caribbean accent detected ({pct})"
    elif profile.primary_dialect == "standard_english":
        accent = f"Standard English accent ({pct})"
    else:
        strength = (
            "Strong" if profile.confidence > 0.8
            else "Moderate" if profile.confidence > 0.5
            else "Weak"
        )
        accent = f"{strength} {_DISPLAY_NAMES[profile.primary_dialect]} accent detected ({pct})"
    return f"{accent}. {_PATOIS_DESCRIPTIONS[profile.patois_level]}"
