"""Stage 1: ASR-Correction Normalizer.

Speech recognizers trained on Standard English mishear Patois ("wah gwaan"
comes back as "what's going on" or "wagon"). When the transcription already
looks dialectal, an ordered list of regex corrections maps those errors back
to Patois spelling so the later stages see consistent vocabulary. Plain
English input passes through untouched.
"""

import logging
import re
from functools import lru_cache
from typing import Any

from models.schemas.cleaning_result import PatoisCleaningResult
from services import lexicon
from services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[a-z']+")


@lru_cache(maxsize=1)
def _corrections() -> tuple[tuple[re.Pattern, str], ...]:
    return tuple(
        (re.compile(pattern, re.IGNORECASE), replacement)
        for pattern, replacement in lexicon.load_table("patois")["asr_corrections"]
    )


@lru_cache(maxsize=1)
def _translations() -> tuple[tuple[re.Pattern, str], ...]:
    table = lexicon.load_table("patois")["translations"]
    ordered = sorted(table.items(), key=lambda kv: len(kv[0]), reverse=True)
    # First gloss only ("dem" -> "them/they" becomes "them")
    return tuple((lexicon.term_pattern(term), gloss.split("/")[0]) for term, gloss in ordered)


def detect_patois_terms(text: str) -> list[str]:
    """Patois markers in order of first appearance, de-duplicated."""
    markers = set(lexicon.load_table("patois")["markers"])
    found: list[str] = []
    for word in _WORD_RE.findall(text.lower()):
        if word in markers and word not in found:
            found.append(word)
    return found


def has_strong_indicators(text: str) -> bool:
    return any(p.search(text) for p in lexicon.compile_patterns("patois", "strong_indicators"))


def is_dialectal(text: str) -> bool:
    """Two or more distinct markers, or any strong indicator."""
    return len(detect_patois_terms(text)) >= 2 or has_strong_indicators(text)


def _cleaning_confidence(original: str, cleaned: str, term_count: int, is_patois: bool) -> float:
    if not is_patois:
        return 1.0
    confidence = 0.5
    confidence += min(term_count * 0.05, 0.25)
    if original != cleaned:
        confidence += 0.1
    word_count = len(original.split())
    if word_count > 10:
        confidence += 0.1
    if word_count > 20:
        confidence += 0.05
    return round(min(confidence, 0.95), 4)


class AsrNormalizer(BaseStage):
    stage_name = "s1_asr_normalizer"
    tables = ("patois",)

    def normalize(self, text: str) -> str:
        """Apply Patois ASR corrections in order. Identity on non-dialect input."""
        if not text or not text.strip() or not is_dialectal(text):
            return text
        normalized = text
        for pattern, replacement in _corrections():
            normalized = pattern.sub(replacement, normalized)
        if normalized != text:
            logger.debug("ASR corrections applied: %r -> %r", text, normalized)
        return normalized

    def translate_to_english(self, text: str) -> str:
        """Word-level English gloss, longest phrases first."""
        english = text
        for pattern, gloss in _translations():
            english = pattern.sub(gloss, english)
        english = re.sub(r"\s+", " ", english).strip()
        return english[:1].upper() + english[1:]

    def clean_with_confidence(self, text: str) -> PatoisCleaningResult:
        is_patois = bool(text and text.strip()) and is_dialectal(text)
        cleaned = self.normalize(text) if is_patois else text
        detected = detect_patois_terms(cleaned)
        return PatoisCleaningResult(
            original=text,
            cleaned=cleaned,
            english=self.translate_to_english(cleaned) if is_patois else text,
            confidence=_cleaning_confidence(text, cleaned, len(detected), is_patois),
            is_patois=is_patois,
            detected_terms=detected,
        )

    def predict(self, **kwargs: Any) -> PatoisCleaningResult:
        return self.clean_with_confidence(kwargs.get("text", ""))
