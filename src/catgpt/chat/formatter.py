"""Groups cat sounds into punctuated pseudo-sentences."""

import logging
import random
from collections.abc import Sequence

from .sentiment import Intensity, SentimentResult
from .tone import ToneContext, ToneToken

logger = logging.getLogger(__name__)

CAT_EMOTICONS: dict[ToneContext, tuple[str, ...]] = {
    ToneContext.STANDARD: (":3", ":>", "=^.^=", "^.^", "~(^◡^)~"),
    ToneContext.QUESTION: (":3?", ":>?", "=^.^=?", "^.^?", "(・・)?"),
    ToneContext.EXCITED: (":D", ":3!", "X3", "=^o^=", "^o^", ">:3", "(^◡^)"),
    ToneContext.DEMANDING: (">:3", ">:(", "=^x^=", "(>_<)", "~(>_<)~"),
    ToneContext.SAD: (":(", ":c", ";-;", "(╥﹏╥)", "=T.T="),
    ToneContext.SLEEPY: ("=.=", "-.-", "=~.~=", "(-.-)", "zzz :3"),
    ToneContext.CONTENT: (":3", "=^.^=", "^.^", "(￣▾￣)", "~(^◡^)~"),
    ToneContext.AFFECTIONATE: (":3♡", "=^.^=♡", "(◡ ‿ ◡)", "♡~"),
    ToneContext.PLAYFUL: (":3", ":P", "X3", "=^.^=", ">:3", "^o^"),
    ToneContext.CURIOUS: (":3?", "=^.^=?", "(・・)?", "(´・ω・`)?", "^.^?"),
    ToneContext.ANNOYED: ("-_-", ">:|", "=-.-="),
    ToneContext.DEFENSIVE: (">:(", "=`ω´=", "(╬ Ò﹏Ó)"),
    ToneContext.HOSTILE: (">:((", "(╬ಠ益ಠ)", "=ΦωΦ="),
}

TERMINAL_PUNCTUATION: dict[ToneContext, str] = {
    ToneContext.QUESTION: "?",
    ToneContext.CURIOUS: "?",
    ToneContext.EXCITED: "!",
    ToneContext.DEMANDING: "!",
    ToneContext.DEFENSIVE: "!",
    ToneContext.HOSTILE: "!",
    ToneContext.SAD: "...",
    ToneContext.SLEEPY: "...",
    ToneContext.WARY: "...",
}

EXTREME_PUNCTUATION = {"!": "!!!", "...": "......"}

INTENSITY_EMOTICON_BOOST = {
    Intensity.NONE: 1.0,
    Intensity.LOW: 1.0,
    Intensity.MODERATE: 1.25,
    Intensity.HIGH: 1.75,
    Intensity.EXTREME: 2.5,
}


def emoticon_probability(
    sentiment: SentimentResult,
    base: float = 0.2,
    cap: float = 0.8,
) -> float:
    """Chance that a sentence ends in an emoticon, higher for emotional messages."""
    if sentiment.is_neutral:
        return base
    return min(cap, base * INTENSITY_EMOTICON_BOOST[sentiment.intensity])


class SentenceFormatter:
    """Turns a stream of tone tokens into sentences."""

    def __init__(
        self,
        rng: random.Random | None = None,
        min_sentence_length: int = 3,
        max_sentence_length: int = 6,
        emoticons: dict[ToneContext, tuple[str, ...]] | None = None,
    ):
        """
        Initialize the formatter.

        Args:
            rng: Random source
            min_sentence_length: Fewest sounds in a full sentence
            max_sentence_length: Most sounds in a sentence
            emoticons: Emoticon table per context (contexts without one use punctuation)
        """
        if not 1 <= min_sentence_length <= max_sentence_length:
            raise ValueError("Invalid sentence length range")
        self.rng = rng or random.Random()
        self.min_sentence_length = min_sentence_length
        self.max_sentence_length = max_sentence_length
        self.emoticons = CAT_EMOTICONS if emoticons is None else emoticons

    def format(
        self,
        tokens: Sequence[ToneToken],
        emoticon_probability: float,
        sentiment: SentimentResult,
    ) -> list[str]:
        """
        Group tokens into sentences.

        Args:
            tokens: Generated tokens, in order
            emoticon_probability: Chance of ending a sentence with an emoticon
            sentiment: Sentiment of the user message

        Returns:
            Sentences, each ending in punctuation or an emoticon
        """
        sentences = []
        for run in self._runs(tokens):
            context = next(
                (t.context for t in run if t.context is not ToneContext.STANDARD),
                ToneContext.STANDARD,
            )
            ending = self._ending(context, emoticon_probability, sentiment)
            sentences.append(" ".join(t.sound for t in run) + ending)

        logger.debug(f"Formatted {len(tokens)} tokens into {len(sentences)} sentences")
        return sentences

    def _runs(self, tokens: Sequence[ToneToken]) -> list[list[ToneToken]]:
        runs = []
        start = 0
        while start < len(tokens):
            length = self.rng.randint(self.min_sentence_length, self.max_sentence_length)
            runs.append(list(tokens[start:start + length]))
            start += length
        return runs

    def _ending(
        self,
        context: ToneContext,
        emoticon_probability: float,
        sentiment: SentimentResult,
    ) -> str:
        emoticons = self.emoticons.get(context)
        if emoticons and self.rng.random() < emoticon_probability:
            return " " + self.rng.choice(emoticons)

        punctuation = TERMINAL_PUNCTUATION.get(context, ".")
        if sentiment.intensity is Intensity.EXTREME:
            punctuation = EXTREME_PUNCTUATION.get(punctuation, punctuation)
        return punctuation
