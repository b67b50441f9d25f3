"""Unit tests for the response generator."""

import random

from catgpt.chat.generator import GeneratedResponse, ResponseGenerator
from catgpt.chat.sentiment import Intensity, Sentiment
from catgpt.chat.tone import TONE_POOLS, ToneContext
from catgpt.config import Settings

ANALYSIS_PROMPT = (
    "Please write me a comprehensive analysis of quantum physics and its "
    "philosophical implications, however surprising"
)


class TestResponseGenerator:
    """Test cases for ResponseGenerator."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.generator = ResponseGenerator(rng=random.Random(1234), clock=lambda: 12)

    def test_greeting_gets_short_reply(self) -> None:
        """Test that a greeting gets two to five sounds."""
        for _ in range(50):
            response = self.generator.generate("hi")
            assert response.complexity <= 6
            assert 2 <= response.token_count <= 5
            assert len(response.tokens) == response.token_count

    def test_complex_prompt_gets_long_reply(self) -> None:
        """Test that an elaborate prompt gets at least thirty sounds."""
        for _ in range(20):
            response = self.generator.generate(ANALYSIS_PROMPT)
            assert response.complexity > 45
            assert response.token_count >= 30

    def test_angry_message_gets_hostile_reply(self) -> None:
        """Test that an angry message gets hissing and growling."""
        response = self.generator.generate("I hate this, it's horrible!!!")

        assert response.sentiment.sentiment is Sentiment.NEGATIVE
        assert response.sentiment.at_least(Intensity.HIGH)

        hostile = [
            t for t in response.tokens
            if t.context in (ToneContext.HOSTILE, ToneContext.DEFENSIVE)
        ]
        assert len(hostile) > len(response.tokens) / 2

    def test_client_hour_overrides_clock(self) -> None:
        """Test that the client's hour drives the time adjustment."""
        evening = self.generator.generate("tell me about cats", hour=21)
        night = self.generator.generate("tell me about cats", hour=3)

        assert evening.complexity > night.complexity

    def test_sleep_words_produce_sleepy_tokens(self) -> None:
        """Test sleepy replies for tired users."""
        contexts = set()
        for _ in range(20):
            response = self.generator.generate("I want to take a nap in my bed")
            contexts.update(t.context for t in response.tokens)

        assert ToneContext.SLEEPY in contexts

    def test_stream_words_rebuild_content(self) -> None:
        """Test the streamed words join back into the full reply."""
        response = self.generator.generate("What is your favorite toy?")

        assert " ".join(response.stream_words) == response.content
        assert response.content == " ".join(response.sentences)
        assert all(response.stream_words)

    def test_to_dict(self) -> None:
        """Test dictionary conversion for logging."""
        response = self.generator.generate("hello there")
        result = response.to_dict()

        assert result["complexity"] == response.complexity
        assert result["token_count"] == response.token_count
        assert result["sentences"] == len(response.sentences)
        assert result["sentiment"]["sentiment"] == response.sentiment.sentiment.value

    def test_seeded_generators_agree(self) -> None:
        """Test that equal seeds give equal replies."""
        first = ResponseGenerator(rng=random.Random(7), clock=lambda: 12)
        second = ResponseGenerator(rng=random.Random(7), clock=lambda: 12)

        for text in ("hi", "feed me now", ANALYSIS_PROMPT):
            assert first.generate(text).content == second.generate(text).content

    def test_from_settings(self, tmp_path) -> None:
        """Test building a generator from settings."""
        overrides = tmp_path / "complexity.json"
        overrides.write_text('{"scoring": {"max_score": 40}}')
        app_settings = Settings(
            random_seed=5,
            min_delay_ms=50,
            max_delay_ms=60,
            complexity_overrides_file=str(overrides),
        )

        generator = ResponseGenerator.from_settings(app_settings)

        assert generator.complexity_analyzer.config.scoring.max_score == 40
        assert generator.delay_model.config.min_delay_ms == 50
        assert generator.delay_model.config.max_delay_ms == 60
        assert generator.generate(ANALYSIS_PROMPT, hour=12).complexity == 40
        assert 50 <= generator.token_delay("meow", 0, 10, 40) <= 60

    def test_welcome_meows(self) -> None:
        """Test the greeting shape."""
        allowed = (
            set(TONE_POOLS[ToneContext.STANDARD])
            | set(TONE_POOLS[ToneContext.QUESTION])
            | set(TONE_POOLS[ToneContext.EXCITED])
        )
        endings = set()

        for _ in range(100):
            greeting = self.generator.welcome_meows()
            endings.add(greeting[-1])
            words = greeting[:-1].split(" ")

            assert 5 <= len(words) <= 7
            assert set(words) <= allowed

        assert endings == {"!", "?"}

    def test_usage_stats(self) -> None:
        """Test generation statistics."""
        assert self.generator.get_usage_stats() == {
            "total_replies": 0,
            "total_tokens": 0,
            "avg_tokens_per_reply": 0.0,
        }

        first = self.generator.generate("hi")
        second = self.generator.generate("hello")
        stats = self.generator.get_usage_stats()

        assert stats["total_replies"] == 2
        assert stats["total_tokens"] == first.token_count + second.token_count

        self.generator.reset_usage_stats()
        assert self.generator.get_usage_stats()["total_replies"] == 0


class TestGeneratedResponse:
    """Test cases for GeneratedResponse."""

    def test_content_from_sentences(self) -> None:
        """Test content joins sentences with spaces."""
        generator = ResponseGenerator(rng=random.Random(3), clock=lambda: 12)
        response = generator.generate("hi")
        rebuilt = GeneratedResponse(
            complexity=response.complexity,
            sentiment=response.sentiment,
            token_count=response.token_count,
            tokens=response.tokens,
            sentences=["meow.", "mrow :3"],
        )

        assert rebuilt.content == "meow. mrow :3"
        assert rebuilt.stream_words == ["meow.", "mrow", ":3"]
