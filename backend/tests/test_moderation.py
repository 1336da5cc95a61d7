from concurrent.futures import ThreadPoolExecutor

from services.moderation import RateLimiter, moderate_content


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestModerateContent:
    def test_ordinary_request_is_safe(self):
        result = moderate_content("Need a plumber in Portmore tomorrow, will pay 4000")
        assert result.safe is True
        assert result.reason is None

    def test_blocked_word(self):
        result = moderate_content("Looking for someone to sell drugs")
        assert result.safe is False
        assert result.reason == "Contains inappropriate content: drugs"

    def test_blocked_word_matches_whole_words_only(self):
        assert moderate_content("Need a better painter for mi house").safe is True

    def test_multi_word_blocked_term(self):
        result = moderate_content("Call the loan shark if you need cash")
        assert result.reason == "Contains inappropriate content: loan shark"

    def test_scam_pattern(self):
        result = moderate_content("Send the money first and I will come Monday")
        assert result.safe is False
        assert result.reason == "Contains suspicious pattern that may indicate a scam"

    def test_too_short(self):
        result = moderate_content(" a ")
        assert result.safe is False
        assert result.reason == "Content too short to be meaningful"

    def test_repeated_characters(self):
        result = moderate_content("Heeeeeeeeeeeeelp mi nuh")
        assert result.safe is False
        assert result.reason == "Contains repetitive spam content"


class TestRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = RateLimiter(max_requests=3, window_minutes=1, clock=FakeClock())
        assert [limiter.check("+18765550100") for _ in range(4)] == [True, True, True, False]

    def test_callers_are_independent(self):
        limiter = RateLimiter(max_requests=1, window_minutes=1, clock=FakeClock())
        assert limiter.check("a") is True
        assert limiter.check("b") is True
        assert limiter.check("a") is False

    def test_window_resets(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=1, window_minutes=15, clock=clock)
        assert limiter.check("a") is True
        assert limiter.check("a") is False
        clock.now = 15 * 60 + 1
        assert limiter.check("a") is True

    def test_remaining(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=5, window_minutes=15, clock=clock)
        assert limiter.remaining("a") == 5
        limiter.check("a")
        limiter.check("a")
        assert limiter.remaining("a") == 3
        clock.now = 10_000
        assert limiter.remaining("a") == 5

    def test_reset(self):
        limiter = RateLimiter(max_requests=1, window_minutes=1, clock=FakeClock())
        limiter.check("a")
        limiter.reset()
        assert limiter.check("a") is True

    def test_expired_records_are_dropped(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=5, window_minutes=15, clock=clock)
        limiter.check("a")
        limiter.check("b")
        assert len(limiter) == 2

        clock.now = 15 * 60 + 1
        limiter.check("c")
        assert len(limiter) == 1
        assert limiter.remaining("a") == 5


class TestRateLimiterConcurrency:
    def test_single_caller_gets_exactly_max_requests(self):
        limiter = RateLimiter(max_requests=5, window_minutes=15)
        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: limiter.check("+18765550100"), range(200)))
        assert results.count(True) == 5
        assert limiter.remaining("+18765550100") == 0

    def test_many_callers(self):
        limiter = RateLimiter(max_requests=3, window_minutes=15)
        callers = [f"caller-{i % 20}" for i in range(200)]
        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(limiter.check, callers))
        assert results.count(True) == 20 * 3
        assert len(limiter) == 20
