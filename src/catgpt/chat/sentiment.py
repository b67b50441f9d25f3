"""Lexicon-based sentiment estimation for CatGPT."""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Sentiment(Enum):
    """Polarity of a message."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Intensity(Enum):
    """Magnitude band of a sentiment score."""

    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


INTENSITY_ORDER = [
    Intensity.NONE,
    Intensity.LOW,
    Intensity.MODERATE,
    Intensity.HIGH,
    Intensity.EXTREME,
]


@dataclass(frozen=True)
class SentimentResult:
    """Sentiment classification for a message."""

    sentiment: Sentiment
    intensity: Intensity
    score: float  # -1.0 to 1.0

    @property
    def is_neutral(self) -> bool:
        return self.sentiment is Sentiment.NEUTRAL

    def at_least(self, intensity: Intensity) -> bool:
        """Check whether the intensity band is ``intensity`` or stronger."""
        return INTENSITY_ORDER.index(self.intensity) >= INTENSITY_ORDER.index(intensity)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/debugging."""
        return {
            "sentiment": self.sentiment.value,
            "intensity": self.intensity.value,
            "score": self.score,
        }


NEUTRAL_RESULT = SentimentResult(Sentiment.NEUTRAL, Intensity.NONE, 0.0)

# Word tiers and their weights
SENTIMENT_TIERS: dict[float, frozenset[str]] = {
    3.0: frozenset({
        "amazing", "awesome", "fantastic", "incredible", "wonderful", "perfect",
        "outstanding", "brilliant", "magnificent", "spectacular", "adore", "ecstatic",
        "thrilled", "superb", "phenomenal",
    }),
    2.0: frozenset({
        "love", "excellent", "great", "beautiful", "delighted", "excited", "happy",
        "joy", "lovely", "glad", "cute", "adorable", "sweet", "best", "favorite",
    }),
    1.0: frozenset({
        "good", "nice", "like", "fine", "cool", "thanks", "thank", "pleasant", "fun",
        "okay", "enjoy", "interesting", "comfortable", "relaxed", "calm", "kind",
    }),
    -1.0: frozenset({
        "bad", "sad", "sorry", "boring", "annoying", "tired", "upset", "wrong",
        "problem", "difficult", "meh", "lonely", "worried", "confused", "dislike",
    }),
    -2.0: frozenset({
        "hate", "angry", "awful", "terrible", "ugly", "stupid", "mad", "furious",
        "miserable", "disappointed", "painful", "broken", "hurt", "scared", "gross",
    }),
    -3.0: frozenset({
        "horrible", "disgusting", "despise", "loathe", "atrocious", "abysmal",
        "worst", "devastated", "horrific", "dreadful", "appalling", "vile",
        "detest", "hideous", "nightmare",
    }),
}

INTENSIFIERS: dict[str, float] = {
    "slightly": 0.6,
    "somewhat": 0.8,
    "quite": 1.2,
    "really": 1.4,
    "very": 1.5,
    "so": 1.5,
    "super": 1.7,
    "totally": 1.7,
    "absolutely": 1.8,
    "extremely": 2.0,
    "incredibly": 2.0,
}

NEGATIONS = frozenset({
    "not", "no", "never", "nothing", "nobody", "none", "neither", "nor",
    "don't", "doesn't", "didn't", "isn't", "aren't", "wasn't", "weren't",
    "can't", "cannot", "won't", "wouldn't", "shouldn't", "hardly",
})

NEGATION_WINDOW = 3

# Score magnitude thresholds, checked strongest first
INTENSITY_THRESHOLDS: list[tuple[float, Intensity]] = [
    (0.55, Intensity.EXTREME),
    (0.30, Intensity.HIGH),
    (0.15, Intensity.MODERATE),
    (0.08, Intensity.LOW),
]

_WORD_RE = re.compile(r"[a-z]+(?:'[a-z]+)?")
_RAW_WORD_RE = re.compile(r"[A-Za-z]+(?:'[A-Za-z]+)?")
_REPETITION_RE = re.compile(r"([a-z])\1{2,}")


class SentimentMethod(Protocol):
    """A way of turning text into a raw lexical score and word count."""

    name: str

    def lexical_score(self, text: str) -> tuple[float, int]: ...


def _walk(tokens: list[str], lookup: Any) -> float:
    """Sum tier weights with intensifier and negation handling."""
    total = 0.0
    for i, token in enumerate(tokens):
        weight = lookup(token)
        if not weight:
            continue
        if i > 0 and tokens[i - 1] in INTENSIFIERS:
            weight *= INTENSIFIERS[tokens[i - 1]]
        window = tokens[max(0, i - NEGATION_WINDOW):i]
        if any(previous in NEGATIONS for previous in window):
            weight = -weight
        total += weight
    return total


class WeightedLexiconMethod:
    """Exact lowercase word lookup against the weighted tiers."""

    name = "lexicon"

    def __init__(self, tiers: dict[float, frozenset[str]] | None = None):
        self._weights = {
            word: weight
            for weight, words in (tiers or SENTIMENT_TIERS).items()
            for word in words
        }

    def lexical_score(self, text: str) -> tuple[float, int]:
        tokens = [token.strip("'") for token in text.lower().split()]
        tokens = [re.sub(r"[^a-z']", "", token) for token in tokens]
        tokens = [token for token in tokens if token]
        return _walk(tokens, self._weights.get), len(tokens)


class StemmedTokenMethod:
    """Regex tokenizer that also recognizes regular inflections, so "loved" and "hating" still count.

    Only inflections of a lexicon word itself are indexed, never bare stems,
    so "hats" is not read as "hate" and "wondering" is not read as "wonderful".
    """

    name = "stemmed"

    def __init__(self, tiers: dict[float, frozenset[str]] | None = None):
        self._forms: dict[str, float] = {}
        for weight, words in (tiers or SENTIMENT_TIERS).items():
            for word in words:
                self._forms[word] = weight
        for weight, words in (tiers or SENTIMENT_TIERS).items():
            for word in words:
                for form in self.inflections(word):
                    self._forms.setdefault(form, weight)

    @staticmethod
    def inflections(word: str) -> set[str]:
        """Regular -s, -ed and -ing forms of ``word``."""
        if word.endswith("e"):
            return {word + "s", word + "d", word[:-1] + "ing"}
        plural = word + "es" if word.endswith(("s", "x", "ch", "sh")) else word + "s"
        return {plural, word + "ed", word + "ing"}

    def lexical_score(self, text: str) -> tuple[float, int]:
        tokens = _WORD_RE.findall(text.lower())
        return _walk(tokens, self._forms.get), len(tokens)


class SentimentAnalyzer:
    """Classifies text into sentiment polarity and intensity."""

    def __init__(
        self,
        primary: SentimentMethod | None = None,
        fallback: SentimentMethod | None = None,
        exclamation_weight: float = 0.5,
        caps_weight: float = 0.3,
        repetition_weight: float = 0.25,
    ):
        """
        Initialize sentiment analyzer.

        Args:
            primary: Method tried first (defaults to StemmedTokenMethod)
            fallback: Method used when the primary one raises
            exclamation_weight: Emphasis per exclamation mark (max 3 counted)
            caps_weight: Emphasis per ALL-CAPS word (max 3 counted)
            repetition_weight: Emphasis per stretched word like "sooo" (max 2 counted)
        """
        self.primary = primary or StemmedTokenMethod()
        self.fallback = fallback or WeightedLexiconMethod()
        self.exclamation_weight = exclamation_weight
        self.caps_weight = caps_weight
        self.repetition_weight = repetition_weight

    def analyze(self, text: str) -> SentimentResult:
        """
        Analyze sentiment of a message.

        Args:
            text: Message text

        Returns:
            SentimentResult with a score in [-1, 1]
        """
        if not text or not text.strip():
            return NEUTRAL_RESULT

        try:
            raw, word_count = self.primary.lexical_score(text)
        except Exception as e:
            logger.warning(
                f"Sentiment method '{self.primary.name}' failed: {e}. "
                f"Falling back to '{self.fallback.name}'"
            )
            raw, word_count = self.fallback.lexical_score(text)

        raw += math.copysign(self._emphasis(text), raw) if raw else 0.0
        score = self._normalize(raw, word_count)
        result = self.classify(score)

        logger.debug(f"Sentiment for {text[:50]!r}: {result.to_dict()}")
        return result

    def _emphasis(self, text: str) -> float:
        exclamations = min(text.count("!"), 3)
        caps_words = min(
            sum(1 for word in _RAW_WORD_RE.findall(text) if len(word) > 1 and word.isupper()),
            3,
        )
        repetitions = min(len(_REPETITION_RE.findall(text.lower())), 2)
        return (
            exclamations * self.exclamation_weight
            + caps_words * self.caps_weight
            + repetitions * self.repetition_weight
        )

    @staticmethod
    def _normalize(raw: float, word_count: int) -> float:
        denominator = 2.0 + 2.0 * math.sqrt(max(word_count, 1))
        return round(max(-1.0, min(1.0, raw / denominator)), 4)

    @staticmethod
    def classify(score: float) -> SentimentResult:
        """Map a normalized score to polarity and intensity bands."""
        magnitude = abs(score)
        for threshold, intensity in INTENSITY_THRESHOLDS:
            if magnitude >= threshold:
                sentiment = Sentiment.POSITIVE if score > 0 else Sentiment.NEGATIVE
                return SentimentResult(sentiment, intensity, score)
        return SentimentResult(Sentiment.NEUTRAL, Intensity.NONE, score)
