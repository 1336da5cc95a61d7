"""Stage 3: Job-Type & Field Extractor.

Turns a normalized transcription into a JobExtraction:

    job_type    seeking-work vs hiring phrase patterns (+ context, structure cues)
    skills      Caribbean idiom -> canonical skill tag table
    location    per-island locality table, longest names first
    urgency     high / low keyword bands, else medium
    experience  expert / intermediate / beginner keyword bands
    timing      weekday, clock time, relative day or date phrase
    budget      spelled-out numbers -> digits, then amount + currency + type

The heuristic result is always computed. When an LLM provider is configured
its schema-validated answer overrides the fields it actually fills in.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from models.schemas.dialect_profile import DialectProfile
from models.schemas.job_extraction import Budget, BudgetType, Experience, JobExtraction, JobType, Urgency
from models.schemas.llm_responses import ExtractionLLMResponse
from services import lexicon
from services.pipeline.base import BaseStage
from services.prompt_builder import build_extraction_prompt

logger = logging.getLogger(__name__)

LLMProvider = Callable[[str], Awaitable[dict | None]]

# Spelled-out numbers
_UNITS = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
    "thirteen": 13, "fourteen": 14, "fifteen": 15, "sixteen": 16,
    "seventeen": 17, "eighteen": 18, "nineteen": 19,
}
_TENS = {
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}
_SCALES = {"thousand": 1_000, "million": 1_000_000}
_NUMBER_WORD = "|".join([*_UNITS, *_TENS, "hundred", *_SCALES])
_SMALL_WORD = "|".join([*_UNITS, *_TENS, "hundred"])
_UNIT_OR_TEN = "|".join([*_UNITS, *_TENS])
# "and" only continues a number after hundred/thousand/million ("one hundred and fifty")
_NUMBER_RUN_RE = re.compile(
    rf"\b(?:{_NUMBER_WORD})"
    rf"(?:(?:(?<=hundred)|(?<=thousand)|(?<=million))\s+and\s+(?:{_NUMBER_WORD})|[\s-]+(?:{_NUMBER_WORD}))*\b",
    re.IGNORECASE,
)
# "five and six thousand": the scale applies to both ends of a spoken range
_SHARED_SCALE_RE = re.compile(
    rf"\b((?:(?:{_SMALL_WORD})[\s-]+)*(?:{_UNIT_OR_TEN}))(\s+(?:and|to|or)\s+)"
    rf"((?:(?:{_SMALL_WORD})[\s-]+)*(?:{_SMALL_WORD})\s+(thousand|million))\b",
    re.IGNORECASE,
)
_A_SCALE_RE = re.compile(r"\ba\s+(hundred|thousand|million)\b", re.IGNORECASE)

_AMOUNT_RE = re.compile(
    r"(?P<num>\d[\d,]*(?:\.\d+)?)\s*(?P<mult>k\b|grand\b|thousand\b|million\b)?",
    re.IGNORECASE,
)
_MULTIPLIERS = {"k": 1_000, "grand": 1_000, "thousand": 1_000, "million": 1_000_000}
_DOLLAR_PREFIX_RE = re.compile(r"\$\s*$")

_RANGE_LEAD_RE = re.compile(r"\b(?:between|from)\s*\$?\s*$", re.IGNORECASE)


def _words_value(words: list[str]) -> int:
    total, current = 0, 0
    for word in words:
        if word in _UNITS:
            current += _UNITS[word]
        elif word in _TENS:
            current += _TENS[word]
        elif word == "hundred":
            current = max(current, 1) * 100
        elif word in _SCALES:
            total += max(current, 1) * _SCALES[word]
            current = 0
    return total + current


def _number_words(phrase: str) -> list[str]:
    return [w for w in re.split(r"[\s-]+", phrase.lower()) if w and w != "and"]


def words_to_digits(text: str) -> str:
    """Replace spelled-out numbers with digits ("five thousand" -> "5000")."""
    text = _A_SCALE_RE.sub(r"one \1", text)

    def _shared_scale(match: re.Match) -> str:
        scale = _SCALES[match.group(4).lower()]
        low = _words_value(_number_words(match.group(1))) * scale
        high = _words_value(_number_words(match.group(3)))
        return f"{low}{match.group(2)}{high}"

    def _replace(match: re.Match) -> str:
        return str(_words_value(_number_words(match.group(0))))

    text = _SHARED_SCALE_RE.sub(_shared_scale, text)
    return _NUMBER_RUN_RE.sub(_replace, text)


@lru_cache(maxsize=1)
def _localities() -> tuple[tuple[re.Pattern, str, str], ...]:
    table = dict(lexicon.load_table("localities"))
    # Names that are also ordinary words ("diamond") only count when capitalised
    proper_only = set(table.pop("require_capitals", []))
    entries = [(name, country) for country, names in table.items() for name in names]
    entries.sort(key=lambda e: len(e[0]), reverse=True)
    return tuple(
        (
            re.compile(rf"(?<![A-Za-z0-9]){re.escape(name)}(?![A-Za-z0-9])")
            if name in proper_only
            else lexicon.term_pattern(name),
            name,
            country,
        )
        for name, country in entries
    )


@lru_cache(maxsize=1)
def _currency_patterns() -> tuple[tuple[re.Pattern, str], ...]:
    table = lexicon.load_table("countries")["currency_keywords"]
    return tuple(
        (re.compile(rf"(?<![a-z])(?:{'|'.join(keywords)})(?![a-z])", re.IGNORECASE), code)
        for code, keywords in table.items()
    )


@lru_cache(maxsize=1)
def _range_separator() -> re.Pattern:
    return re.compile(lexicon.load_table("job_signals")["budget"]["range_separator"], re.IGNORECASE)


def _signal(*keys: str) -> tuple[re.Pattern, ...]:
    return lexicon.compile_patterns("job_signals", *keys)


def _count_matching(patterns: tuple[re.Pattern, ...], text: str) -> int:
    return sum(1 for p in patterns if p.search(text))


def detect_job_type(text: str) -> tuple[JobType, list[str]]:
    """Score seeking vs hiring. Returns the label and the evidence used."""
    seeking_hits = [p for p in _signal("seeking_patterns") if p.search(text)]
    hiring_hits = [p for p in _signal("hiring_patterns") if p.search(text)]
    if not seeking_hits and not hiring_hits:
        return "unclear", []

    indicators = [f"seeking: {p.search(text).group(0)}" for p in seeking_hits]
    indicators += [f"hiring: {p.search(text).group(0)}" for p in hiring_hits]

    seeking = 2.0 * len(seeking_hits)
    hiring = 2.0 * len(hiring_hits)

    signals = lexicon.load_table("job_signals")
    for word in signals["worker_context"]:
        if lexicon.term_pattern(word).search(text):
            seeking += 0.5
    for word in signals["employer_context"]:
        if lexicon.term_pattern(word).search(text):
            hiring += 0.5

    seeking += _count_matching(_signal("structure", "seeking_strong"), text)
    seeking += 0.5 * _count_matching(_signal("structure", "seeking_weak"), text)
    hiring += _count_matching(_signal("structure", "hiring_strong"), text)
    hiring += 0.5 * _count_matching(_signal("structure", "hiring_weak"), text)

    logger.debug("Job type scores: seeking=%.1f hiring=%.1f", seeking, hiring)
    if seeking > hiring:
        return "work_request", indicators
    if hiring > seeking:
        return "job_posting", indicators
    return "unclear", indicators


def extract_skills(text: str) -> list[str]:
    skills: list[str] = []
    for tag in lexicon.load_table("skills"):
        if any(p.search(text) for p in lexicon.compile_patterns("skills", tag)):
            skills.append(tag)
    return skills


def canonical_skill(name: str) -> str | None:
    """Map a free-form skill name onto a skill-table tag."""
    slug = re.sub(r"[\s-]+", "_", name.strip().lower())
    if not slug:
        return None
    table = lexicon.load_table("skills")
    if slug in table:
        return slug
    for tag in table:
        if any(p.search(name) for p in lexicon.compile_patterns("skills", tag)):
            return tag
    return slug


def find_location(text: str) -> tuple[str, str] | None:
    """First locality mentioned, as (display name, country)."""
    for pattern, name, country in _localities():
        if pattern.search(text):
            return name, country
    return None


def detect_urgency(text: str) -> Urgency:
    if any(p.search(text) for p in _signal("urgency", "high")):
        return "high"
    if any(p.search(text) for p in _signal("urgency", "low")):
        return "low"
    return "medium"


def detect_experience(text: str) -> Experience:
    for level in ("expert", "intermediate", "beginner"):
        if any(p.search(text) for p in _signal("experience", level)):
            return level
    return "unclear"


def detect_timing(text: str) -> str | None:
    for pattern in _signal("timing"):
        match = pattern.search(text)
        if match:
            return re.sub(r"\s+", " ", match.group(1).lower())
    return None


def detect_currency(text: str, country: str | None = None, default: str = "JMD") -> str:
    """Explicit currency keyword, then a named country, then the locality's island."""
    for pattern, code in _currency_patterns():
        if pattern.search(text):
            return code
    for info in lexicon.caribbean_countries():
        if any(lexicon.term_pattern(alias).search(text) for alias in info["aliases"]):
            return info["currency"]
    info = lexicon.country_info(country)
    if info is not None:
        return info["currency"]
    return default


def _amount_value(match: re.Match) -> float:
    value = float(match.group("num").replace(",", ""))
    mult = match.group("mult")
    if mult:
        value *= _MULTIPLIERS[mult.lower()]
    return value


_MARKED, _CONTEXT, _NONE = 2, 1, 0


def _money_evidence(text: str, match: re.Match) -> int:
    """How strongly a number reads as money: a `$` or currency word beside it, or only payment wording."""
    before, after = text[: match.start()], text[match.end():]
    if _DOLLAR_PREFIX_RE.search(before):
        return _MARKED
    if any(p.search(after) for p in _signal("budget", "currency_suffix")):
        return _MARKED
    # "pay for 2 days" counts days, not dollars
    if any(p.search(after) for p in _signal("budget", "count_unit")):
        return _NONE
    if any(p.search(before) for p in _signal("budget", "payment_context")):
        return _CONTEXT
    return _NONE


def _range_evidence(text: str, low: re.Match, high: re.Match) -> int:
    evidence = max(_money_evidence(text, low), _money_evidence(text, high))
    if evidence == _NONE and _RANGE_LEAD_RE.search(text[: low.start()]):
        if not any(p.search(text[high.end():]) for p in _signal("budget", "count_unit")):
            return _CONTEXT
    return evidence


def _range_budget(low: re.Match, high: re.Match, currency: str) -> Budget:
    low_value, high_value = _amount_value(low), _amount_value(high)
    if high.group("mult") and not low.group("mult"):
        low_value *= _MULTIPLIERS[high.group("mult").lower()]  # "5 to 8k"
    return Budget(amount=(low_value + high_value) / 2, currency=currency, type="negotiable")


def extract_budget(text: str, country: str | None = None, default_currency: str = "JMD") -> Budget:
    """Amount + currency + type. Ranges collapse to their midpoint (negotiable).

    Amounts marked as money ("$500", "500 dollars") win over amounts that only
    follow payment wording ("pay 500").
    """
    text = words_to_digits(text)
    currency = detect_currency(text, country, default_currency)
    matches = list(_AMOUNT_RE.finditer(text))
    range_sep = _range_separator()

    for required in (_MARKED, _CONTEXT):
        for i, match in enumerate(matches):
            following = matches[i + 1] if i + 1 < len(matches) else None
            if following is not None and range_sep.search(text[match.end(): following.start()]):
                if _range_evidence(text, match, following) >= required:
                    return _range_budget(match, following, currency)
            if _money_evidence(text, match) >= required:
                return Budget(amount=_amount_value(match), currency=currency, type=_budget_type(text))

    return Budget(amount=None, currency=currency, type="negotiable")


def _budget_type(text: str) -> BudgetType:
    if any(p.search(text) for p in _signal("budget", "hourly")):
        return "hourly"
    if any(p.search(text) for p in _signal("budget", "negotiable")):
        return "negotiable"
    return "fixed"


class JobExtractor(BaseStage):
    stage_name = "s3_job_extractor"
    tables = ("job_signals", "skills", "localities", "countries")

    def __init__(self, llm: LLMProvider | None = None, default_currency: str = "JMD") -> None:
        self.llm = llm
        self.default_currency = default_currency

    def extract(self, text: str, dialect: DialectProfile | None = None) -> JobExtraction:
        """Heuristic extraction. Never raises; unknown fields stay at their defaults."""
        if not text or not text.strip():
            return JobExtraction(budget=Budget(currency=self.default_currency))

        job_type, indicators = detect_job_type(text)
        place = find_location(text)
        location, country = place if place else (None, None)
        return JobExtraction(
            job_type=job_type,
            skills=extract_skills(text),
            location=location,
            country=country,
            budget=extract_budget(text, country, self.default_currency),
            urgency=detect_urgency(text),
            experience=detect_experience(text),
            timing=detect_timing(text),
            indicators=indicators,
            source="heuristic",
        )

    async def aextract(self, text: str, dialect: DialectProfile | None = None) -> JobExtraction:
        heuristic = self.extract(text, dialect)
        if self.llm is None or not text or not text.strip():
            return heuristic

        try:
            payload = await self.llm(build_extraction_prompt(text, dialect))
        except Exception as e:
            logger.warning("Extraction LLM call failed: %s", e)
            return heuristic
        if payload is None:
            return heuristic

        try:
            parsed = ExtractionLLMResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning("Extraction LLM response failed validation: %s", e.error_count())
            return heuristic

        return self._merge(heuristic, parsed)

    def _merge(self, heuristic: JobExtraction, parsed: ExtractionLLMResponse) -> JobExtraction:
        skills = heuristic.skills
        if parsed.skills:
            skills = []
            for name in parsed.skills:
                tag = canonical_skill(name)
                if tag and tag not in skills:
                    skills.append(tag)

        location, country = heuristic.location, heuristic.country
        if parsed.location and parsed.location.strip():
            place = find_location(parsed.location)
            if place:
                location, country = place
            else:
                location = parsed.location.strip()
                country = heuristic.country if heuristic.location == location else None

        budget = heuristic.budget
        if parsed.budget.amount is not None or parsed.budget.currency or parsed.budget.type:
            amount = parsed.budget.amount if parsed.budget.amount is not None else budget.amount
            if parsed.budget.type:
                budget_type = parsed.budget.type
            elif amount is None:
                budget_type = "negotiable"
            else:
                budget_type = budget.type if budget.amount is not None else "fixed"
            budget = Budget(
                amount=amount,
                currency=(parsed.budget.currency or budget.currency).upper(),
                type=budget_type,
            )

        return JobExtraction(
            job_type=parsed.job_type,
            skills=skills,
            location=location,
            country=country,
            budget=budget,
            urgency=parsed.urgency or heuristic.urgency,
            experience=parsed.experience or heuristic.experience,
            timing=parsed.timing or heuristic.timing,
            indicators=heuristic.indicators,
            source="llm",
        )

    def predict(self, **kwargs: Any) -> JobExtraction:
        return self.extract(kwargs.get("text", ""), kwargs.get("dialect"))

    async def apredict(self, **kwargs: Any) -> JobExtraction:
        return await self.aextract(kwargs.get("text", ""), kwargs.get("dialect"))
