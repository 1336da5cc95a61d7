"""Content moderation and per-caller rate limiting for inbound voice notes."""

import logging
import re
import threading
import time
from collections.abc import Callable

from models.schemas.moderation import ModerationResult
from services import lexicon

logger = logging.getLogger(__name__)

_REPEATED_CHARS_RE = re.compile(r"(.)\1{10,}")
_MIN_LENGTH = 3


def moderate_content(transcription: str) -> ModerationResult:
    """Flag blocked vocabulary, scam phrasing, and spam-like input."""
    for word in lexicon.load_table("moderation")["blocked_words"]:
        if lexicon.term_pattern(word).search(transcription):
            return ModerationResult(safe=False, reason=f"Contains inappropriate content: {word}")

    for pattern in lexicon.compile_patterns("moderation", "scam_patterns"):
        if pattern.search(transcription):
            return ModerationResult(
                safe=False, reason="Contains suspicious pattern that may indicate a scam"
            )

    if len(transcription.strip()) < _MIN_LENGTH:
        return ModerationResult(safe=False, reason="Content too short to be meaningful")

    if _REPEATED_CHARS_RE.search(transcription):
        return ModerationResult(safe=False, reason="Contains repetitive spam content")

    return ModerationResult(safe=True)


class RateLimiter:
    """Fixed-window request counter keyed by caller (phone number, WhatsApp id).

    A window starts on a caller's first request and resets once it expires.
    Expired records are swept at most once per window.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_minutes: float = 15,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_minutes * 60
        self._clock = clock
        self._records: dict[str, tuple[int, float]] = {}  # id -> (count, reset_at)
        self._next_sweep = clock() + self.window_seconds
        self._lock = threading.Lock()

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._records.items() if now > reset_at]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug("Dropped %d expired rate limit records", len(expired))
        self._next_sweep = now + self.window_seconds

    def check(self, identifier: str) -> bool:
        """Count a request; False when the caller is over the limit."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            record = self._records.get(identifier)
            if record is None or now > record[1]:
                self._records[identifier] = (1, now + self.window_seconds)
                return True
            count, reset_at = record
            if count >= self.max_requests:
                logger.info("Rate limit exceeded for caller %s", identifier)
                return False
            self._records[identifier] = (count + 1, reset_at)
            return True

    def remaining(self, identifier: str) -> int:
        with self._lock:
            record = self._records.get(identifier)
            if record is None or self._clock() > record[1]:
                return self.max_requests
            return max(0, self.max_requests - record[0])

    def reset(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
