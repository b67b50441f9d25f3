"""Cat sound response generation for CatGPT."""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..config import Settings, settings
from .complexity import ComplexityAnalyzer, ComplexityConfig
from .delay import DelayConfig, StreamingDelayModel
from .formatter import SentenceFormatter, emoticon_probability
from .length import UtteranceLengthPolicy
from .sentiment import SentimentAnalyzer, SentimentResult
from .tone import TONE_POOLS, ToneContext, ToneSelector, ToneToken, scan_keywords

logger = logging.getLogger(__name__)


@dataclass
class GeneratedResponse:
    """A complete reply and the analysis behind it."""

    complexity: int
    sentiment: SentimentResult
    token_count: int
    tokens: list[ToneToken]
    sentences: list[str]

    @property
    def content(self) -> str:
        return " ".join(self.sentences)

    @property
    def stream_words(self) -> list[str]:
        """Words in the order they are streamed to the client."""
        return self.content.split(" ")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/debugging."""
        return {
            "complexity": self.complexity,
            "sentiment": self.sentiment.to_dict(),
            "token_count": self.token_count,
            "sentences": len(self.sentences),
        }


class ResponseGenerator:
    """Runs the analysis and generation pipeline for one message at a time."""

    def __init__(
        self,
        rng: random.Random | None = None,
        complexity_config: ComplexityConfig | None = None,
        delay_config: DelayConfig | None = None,
        sentiment_analyzer: SentimentAnalyzer | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        Initialize the generator.

        Args:
            rng: Random source shared by every random component
            complexity_config: Complexity scoring configuration
            delay_config: Streaming delay configuration
            sentiment_analyzer: Sentiment analyzer (defaults to SentimentAnalyzer())
            clock: Returns the current hour when the client does not send one
        """
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now().hour)
        self.complexity_analyzer = ComplexityAnalyzer(complexity_config, clock=self.clock)
        self.sentiment_analyzer = sentiment_analyzer or SentimentAnalyzer()
        self.length_policy = UtteranceLengthPolicy(rng=self.rng)
        self.tone_selector = ToneSelector(rng=self.rng)
        self.formatter = SentenceFormatter(rng=self.rng)
        self.delay_model = StreamingDelayModel(delay_config, rng=self.rng)

        self._total_replies = 0
        self._total_tokens = 0

        logger.info(
            f"Response generator initialized: "
            f"{len(self.complexity_analyzer.config.patterns)} patterns, "
            f"{len(self.complexity_analyzer.config.keyword_categories)} keyword categories"
        )

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "ResponseGenerator":
        """Build a generator from application settings."""
        complexity_config = (
            ComplexityConfig.from_file(app_settings.complexity_overrides_file)
            if app_settings.complexity_overrides_file
            else ComplexityConfig()
        )
        delay_config = DelayConfig(
            min_delay_ms=app_settings.min_delay_ms,
            max_delay_ms=app_settings.max_delay_ms,
        )
        return cls(
            rng=random.Random(app_settings.random_seed),
            complexity_config=complexity_config,
            delay_config=delay_config,
        )

    def generate(self, text: str, hour: int | None = None) -> GeneratedResponse:
        """
        Generate a cat sound reply for a user message.

        Args:
            text: The user message
            hour: Hour of day on the client, if known

        Returns:
            GeneratedResponse with sentences ready for streaming
        """
        if hour is None:
            hour = self.clock()

        complexity = self.complexity_analyzer.score(text, hour=hour)
        sentiment = self.sentiment_analyzer.analyze(text)
        token_count = self.length_policy.token_count(complexity)

        signals = scan_keywords(text)
        sleepy = self.tone_selector.sleepy_mode(signals, hour)
        tokens = [
            self.tone_selector.select_token(i, sentiment, signals, sleepy)
            for i in range(token_count)
        ]
        sentences = self.formatter.format(tokens, emoticon_probability(sentiment), sentiment)

        response = GeneratedResponse(
            complexity=complexity,
            sentiment=sentiment,
            token_count=token_count,
            tokens=tokens,
            sentences=sentences,
        )

        self._total_replies += 1
        self._total_tokens += token_count

        logger.info(f"Generated reply: {response.to_dict()}, sleepy={sleepy}")
        return response

    def token_delay(self, token: str, position: int, total_tokens: int, complexity: int) -> int:
        """Delay in milliseconds before emitting ``token``."""
        return self.delay_model.delay(token, position, total_tokens, complexity)

    def welcome_meows(self) -> str:
        """Build the greeting shown under the title."""
        sounds = []
        for _ in range(self.rng.randint(5, 7)):
            roll = self.rng.random()
            if roll < 0.5:
                pool = TONE_POOLS[ToneContext.STANDARD]
            elif roll < 0.75:
                pool = TONE_POOLS[ToneContext.QUESTION]
            else:
                pool = TONE_POOLS[ToneContext.EXCITED]
            sounds.append(self.rng.choice(pool))

        return " ".join(sounds) + ("!" if self.rng.random() < 0.75 else "?")

    def get_usage_stats(self) -> dict[str, Any]:
        """Get current usage statistics."""
        return {
            "total_replies": self._total_replies,
            "total_tokens": self._total_tokens,
            "avg_tokens_per_reply": (
                round(self._total_tokens / self._total_replies, 1)
                if self._total_replies > 0
                else 0.0
            ),
        }

    def reset_usage_stats(self) -> None:
        """Reset usage statistics."""
        self._total_replies = 0
        self._total_tokens = 0
        logger.info("Usage statistics reset")


# Global generator instance
response_generator = ResponseGenerator.from_settings(settings)
