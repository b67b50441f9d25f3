"""Tone selection for CatGPT sound tokens."""

import logging
import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .sentiment import Intensity, Sentiment, SentimentResult

logger = logging.getLogger(__name__)


class ToneContext(Enum):
    """Emotional context attached to every generated sound."""

    STANDARD = "standard"
    QUESTION = "question"
    CURIOUS = "curious"
    EXCITED = "excited"
    DEMANDING = "demanding"
    SAD = "sad"
    SLEEPY = "sleepy"
    CONTENT = "content"
    AFFECTIONATE = "affectionate"
    PLAYFUL = "playful"
    WARY = "wary"
    ANNOYED = "annoyed"
    DEFENSIVE = "defensive"
    HOSTILE = "hostile"


TONE_POOLS: dict[ToneContext, tuple[str, ...]] = {
    ToneContext.STANDARD: ("meow", "mrow", "mrrow", "mew", "miau"),
    ToneContext.QUESTION: ("meow", "mrow", "mrrow", "mew"),
    ToneContext.CURIOUS: ("mrow", "mrrow", "mew", "meow", "miau"),
    ToneContext.EXCITED: ("MEOW", "MROW", "meow", "mrow", "MEW"),
    ToneContext.DEMANDING: ("MEOW", "MROW", "MEW", "FEED ME", "OVERTHROW THE GOVERNMENT"),
    ToneContext.SAD: ("mew", "meow", "mrow"),
    ToneContext.SLEEPY: ("mrow", "mrrrr", "yawn", "*yawn*", "zzz"),
    ToneContext.CONTENT: ("purr", "purrr", "mrrrr", "prrrr"),
    ToneContext.AFFECTIONATE: ("purr", "mrow", "meow", "mrrow"),
    ToneContext.PLAYFUL: ("mrow", "mrp", "prr", "mew", "mewmew", "miau"),
    ToneContext.WARY: ("mrrr", "mrow", "mew", "hrrm"),
    ToneContext.ANNOYED: ("mrrrow", "MROW", "hmph", "mrrp"),
    ToneContext.DEFENSIVE: ("hiss", "growl", "mrrrow", "HISS"),
    ToneContext.HOSTILE: ("HISS", "GRRR", "growl", "HSSSS", "spit"),
}

# Contexts drawn for each (polarity, intensity) band
SENTIMENT_CONTEXTS: dict[tuple[Sentiment, Intensity], tuple[ToneContext, ...]] = {
    (Sentiment.POSITIVE, Intensity.LOW): (ToneContext.CONTENT, ToneContext.STANDARD),
    (Sentiment.POSITIVE, Intensity.MODERATE): (ToneContext.CONTENT, ToneContext.PLAYFUL),
    (Sentiment.POSITIVE, Intensity.HIGH): (ToneContext.EXCITED, ToneContext.AFFECTIONATE),
    (Sentiment.POSITIVE, Intensity.EXTREME): (ToneContext.EXCITED,),
    (Sentiment.NEGATIVE, Intensity.LOW): (ToneContext.WARY, ToneContext.SAD),
    (Sentiment.NEGATIVE, Intensity.MODERATE): (ToneContext.WARY, ToneContext.ANNOYED),
    (Sentiment.NEGATIVE, Intensity.HIGH): (ToneContext.DEFENSIVE, ToneContext.ANNOYED),
    (Sentiment.NEGATIVE, Intensity.EXTREME): (ToneContext.HOSTILE, ToneContext.DEFENSIVE),
}

SLEEP_WORDS = ("tired", "sleep", "sleepy", "nap", "bed")
FOOD_WORDS = ("food", "hungry", "treat", "feed", "dinner")
PLAY_WORDS = ("play", "fun", "game", "toy")


@dataclass(frozen=True)
class ToneToken:
    """A generated sound and the context that produced it."""

    sound: str
    context: ToneContext


@dataclass(frozen=True)
class KeywordSignals:
    """Keyword and punctuation cues found in the raw message."""

    has_question: bool = False
    mentions_sleep: bool = False
    mentions_food: bool = False
    mentions_play: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/debugging."""
        return {
            "has_question": self.has_question,
            "mentions_sleep": self.mentions_sleep,
            "mentions_food": self.mentions_food,
            "mentions_play": self.mentions_play,
        }


def scan_keywords(text: str) -> KeywordSignals:
    """Find the keyword cues that steer neutral replies."""
    text_lower = (text or "").lower()

    def mentions(words: tuple[str, ...]) -> bool:
        return any(re.search(rf"\b{word}", text_lower) for word in words)

    return KeywordSignals(
        has_question="?" in text_lower,
        mentions_sleep=mentions(SLEEP_WORDS),
        mentions_food=mentions(FOOD_WORDS),
        mentions_play=mentions(PLAY_WORDS),
    )


def is_night(hour: int) -> bool:
    """Check whether ``hour`` falls in the 22:00-05:59 window."""
    return hour >= 22 or hour <= 5


class ToneSelector:
    """Picks a sound pool for each token of a reply."""

    def __init__(
        self,
        rng: random.Random | None = None,
        night_sleepy_chance: float = 0.3,
        sleepy_token_chance: float = 0.35,
        question_chance: float = 0.4,
        demanding_chance: float = 0.4,
        playful_chance: float = 0.3,
        variety_chance: float = 0.2,
    ):
        """
        Initialize tone selector with probabilities.

        Args:
            rng: Random source
            night_sleepy_chance: Chance that a reply at night is sleepy
            sleepy_token_chance: Chance that a token of a sleepy reply is sleepy
            question_chance: Chance of a question/curious token for questions
            demanding_chance: Chance of a demanding token when food comes up
            playful_chance: Chance of a playful token when play comes up
            variety_chance: Chance of a random special token for neutral text
        """
        self.rng = rng or random.Random()
        self.night_sleepy_chance = night_sleepy_chance
        self.sleepy_token_chance = sleepy_token_chance
        self.question_chance = question_chance
        self.demanding_chance = demanding_chance
        self.playful_chance = playful_chance
        self.variety_chance = variety_chance

    def sleepy_mode(self, signals: KeywordSignals, hour: int) -> bool:
        """Decide once per reply whether the cat is sleepy."""
        if signals.mentions_sleep:
            return True
        return is_night(hour) and self.rng.random() < self.night_sleepy_chance

    def select_token(
        self,
        index: int,
        sentiment: SentimentResult,
        signals: KeywordSignals,
        forced_sleepy: bool,
    ) -> ToneToken:
        """
        Select the sound for one slot of the reply.

        Args:
            index: Position of the token in the reply
            sentiment: Sentiment of the user message
            signals: Keyword cues of the user message
            forced_sleepy: Whether sleepy mode is active for this reply

        Returns:
            ToneToken with the chosen sound and its context
        """
        context = self._choose_context(sentiment, signals, forced_sleepy)
        if context is None:
            # Random variety keeps neutral replies interesting
            pool = (
                TONE_POOLS[ToneContext.PLAYFUL]
                + TONE_POOLS[ToneContext.CONTENT]
                + TONE_POOLS[ToneContext.CURIOUS]
            )
            token = ToneToken(self.rng.choice(pool), ToneContext.PLAYFUL)
        else:
            token = ToneToken(self.rng.choice(TONE_POOLS[context]), context)

        logger.debug(f"Token {index}: {token.sound!r} ({token.context.value})")
        return token

    def _choose_context(
        self,
        sentiment: SentimentResult,
        signals: KeywordSignals,
        forced_sleepy: bool,
    ) -> ToneContext | None:
        if forced_sleepy and self.rng.random() < self.sleepy_token_chance:
            return ToneContext.SLEEPY

        if not sentiment.is_neutral:
            contexts = SENTIMENT_CONTEXTS.get((sentiment.sentiment, sentiment.intensity))
            if contexts:
                return self.rng.choice(contexts)

        if signals.has_question and self.rng.random() < self.question_chance:
            return self.rng.choice((ToneContext.QUESTION, ToneContext.CURIOUS))
        if signals.mentions_food and self.rng.random() < self.demanding_chance:
            return ToneContext.DEMANDING
        if signals.mentions_play and self.rng.random() < self.playful_chance:
            return ToneContext.PLAYFUL
        if self.rng.random() < self.variety_chance:
            return None
        return ToneContext.STANDARD
