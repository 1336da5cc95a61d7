"""Pipeline orchestrator: wires the five stages together.

Flow:
    transcription (+ location_hint, audio_meta)
      ├─ moderate_content(transcription)          → ModerationResult
      ├─ S1.apredict(text=transcription)          → PatoisCleaningResult
      │       ↓ cleaned text
      ├─ S2.apredict(text=cleaned)                → DialectProfile
      │       ↓
      ├─ S3.apredict(text=cleaned, dialect)       → JobExtraction
      │       ↓ location / regex candidate
      ├─ S4.apredict(candidate=..., hint)         → GeocodeResult | None
      │       ↓ confident match rewrites extraction.location
      └─ S5.apredict(transcription=..., ...)      → ConfidenceBreakdown
                       ↓
                 VoiceGigAnalysis

Stages run sequentially; none of them raises. The location cache and rate
limiter are the only state shared across requests and are passed in.
"""

import logging

from config import Settings
from models.schemas.analysis import VoiceGigAnalysis
from models.schemas.confidence_breakdown import AudioMetadata
from models.schemas.geocode_result import GeocodeResult
from models.schemas.job_extraction import JobExtraction
from services.gemini_client import GeminiProvider
from services.geocoding import NominatimGeocoder
from services.location_cache import LocationCache
from services.moderation import RateLimiter, moderate_content
from services.pipeline.s1_asr_normalizer import AsrNormalizer
from services.pipeline.s2_dialect_classifier import DialectClassifier, LLMProvider
from services.pipeline.s3_job_extractor import JobExtractor
from services.pipeline.s4_location_corrector import Geocoder, LocationCorrector
from services.pipeline.s5_confidence import ConfidenceAggregator, analyze_speech_context

logger = logging.getLogger(__name__)

CLARIFY_BELOW = 0.5


class GigExtractionPipeline:
    def __init__(
        self,
        settings: Settings,
        llm: LLMProvider | None = None,
        geocoder: Geocoder | None = None,
        location_cache: LocationCache | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.settings = settings
        self.llm = llm
        self.geocoder = geocoder
        self.location_cache = location_cache
        self.rate_limiter = rate_limiter

        self.normalizer = AsrNormalizer()
        self.classifier = DialectClassifier(llm=llm)
        self.extractor = JobExtractor(llm=llm, default_currency=settings.default_currency)
        self.corrector = LocationCorrector(geocoder=geocoder, cache=location_cache)
        self.aggregator = ConfidenceAggregator()
        for stage in self.stages:
            stage.ensure_loaded()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GigExtractionPipeline":
        """Production wiring: Gemini (if keyed), Nominatim, fresh cache and limiter."""
        cache = LocationCache(
            max_entries=settings.location_cache_max_entries,
            ttl_seconds=settings.location_cache_ttl_seconds,
        )
        if settings.location_cache_preload:
            cache.preload_common()
        return cls(
            settings,
            llm=GeminiProvider.from_settings(settings),
            geocoder=NominatimGeocoder.from_settings(settings),
            location_cache=cache,
            rate_limiter=RateLimiter(
                max_requests=settings.rate_limit_max_requests,
                window_minutes=settings.rate_limit_window_minutes,
            ),
        )

    @property
    def stages(self) -> tuple:
        return (self.normalizer, self.classifier, self.extractor, self.corrector, self.aggregator)

    async def _correct_location(
        self, transcription: str, extraction: JobExtraction, location_hint: str | None
    ) -> tuple[JobExtraction, GeocodeResult | None]:
        if self.geocoder is None and self.location_cache is None:
            return extraction, None

        candidate = extraction.location or self.corrector.find_candidate(transcription)
        if not candidate:
            return extraction, None

        match = await self.corrector.apredict(
            candidate=candidate, country_hint=location_hint or extraction.country
        )
        if match is None or match.confidence <= self.settings.location_match_threshold:
            return extraction, match

        update = {"location": match.place_name}
        if match.country:
            update["country"] = match.country
        if match.place_name != extraction.location:
            logger.info(
                "Location corrected: %r -> %r (%.0f%%)",
                candidate, match.place_name, match.confidence * 100,
            )
        return extraction.model_copy(update=update), match

    async def analyze(
        self,
        transcription: str,
        location_hint: str | None = None,
        audio_meta: AudioMetadata | None = None,
    ) -> VoiceGigAnalysis:
        transcription = transcription or ""
        moderation = moderate_content(transcription)
        if not moderation.safe:
            logger.warning("Transcription flagged by moderation: %s", moderation.reason)

        cleaning = await self.normalizer.apredict(text=transcription)
        text = cleaning.cleaned

        dialect = await self.classifier.apredict(text=text)
        extraction = await self.extractor.apredict(text=text, dialect=dialect)
        extraction, location_match = await self._correct_location(
            transcription, extraction, location_hint
        )

        speech = analyze_speech_context(transcription)
        confidence = await self.aggregator.apredict(
            transcription=transcription,
            dialect=dialect,
            extraction=extraction,
            audio_meta=audio_meta,
            speech=speech,
        )

        needs_clarification = extraction.job_type == "unclear" or confidence.overall < CLARIFY_BELOW
        logger.info(
            "Analyzed voice note: type=%s skills=%s location=%s confidence=%.2f",
            extraction.job_type, extraction.skills, extraction.location, confidence.overall,
        )
        return VoiceGigAnalysis(
            transcription=transcription,
            cleaning=cleaning,
            dialect=dialect,
            extraction=extraction,
            location_match=location_match,
            speech=speech,
            confidence=confidence,
            moderation=moderation,
            needs_clarification=needs_clarification,
        )
