"""Prompt complexity scoring for CatGPT responses."""

import json
import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScoringWeights(_FrozenModel):
    """Scalar weights and bounds for the additive complexity model."""

    length_divisor: float = Field(default=3.0, gt=0)
    max_length_score: float = 25.0
    question_multiplier: float = 5.0
    exclamation_multiplier: float = 3.0
    sentence_multiplier: float = 4.0
    complex_word_multiplier: float = 1.5
    complex_word_threshold: int = 5
    relationship_weight: float = 3.0
    abstract_weight: float = 4.0
    quantitative_weight: float = 2.0
    comma_weight: float = 0.5
    semicolon_weight: float = 2.0
    colon_weight: float = 1.5
    parenthetical_weight: float = 2.0
    quotation_weight: float = 1.0
    combination_bonus: float = 3.0
    min_score: int = 2
    max_score: int = 80


class PatternRule(_FrozenModel):
    """A phrase pattern that marks a request type."""

    regex: str
    base_score: float
    category: str
    type: str

    @field_validator("regex")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid pattern {v!r}: {e}") from e
        return v


class KeywordCategory(_FrozenModel):
    """Keywords whose presence raises the score with diminishing returns."""

    base_score: float
    words: tuple[str, ...]


class ReductionRule(_FrozenModel):
    """Bare inputs that lower the score."""

    penalty: float
    words: tuple[str, ...]


class TimeAdjustment(_FrozenModel):
    """Score adjustment for an inclusive hour range, which may wrap midnight."""

    hour_range: tuple[int, int]
    score: float
    description: str = ""

    @field_validator("hour_range")
    @classmethod
    def validate_hours(cls, v: tuple[int, int]) -> tuple[int, int]:
        """Hours must be valid clock hours."""
        if not all(0 <= hour <= 23 for hour in v):
            raise ValueError(f"Hour range out of bounds: {v}")
        return v

    def matches(self, hour: int) -> bool:
        start, end = self.hour_range
        if start <= end:
            return start <= hour <= end
        return hour >= start or hour <= end


_DEFAULT_PATTERNS = (
    PatternRule(regex=r"write (me )?a", base_score=15, category="creative", type="Creative Writing"),
    PatternRule(regex=r"create (me )?a", base_score=15, category="creative", type="Creative Request"),
    PatternRule(regex=r"compose a", base_score=15, category="creative", type="Composition"),
    PatternRule(regex=r"tell me about", base_score=12, category="informational", type="Information Request"),
    PatternRule(regex=r"explain (how|why|what|when|where)", base_score=14, category="educational", type="Detailed Explanation"),
    PatternRule(regex=r"how (do|to|can)", base_score=12, category="instructional", type="Instructional"),
    PatternRule(regex=r"what (is|are|would|should)", base_score=10, category="questioning", type="Definition/Question"),
    PatternRule(regex=r"give me (a|an|some)", base_score=10, category="requesting", type="Request"),
    PatternRule(regex=r"show me", base_score=10, category="demonstrative", type="Demonstration"),
    PatternRule(regex=r"teach me", base_score=14, category="educational", type="Educational"),
    PatternRule(regex=r"help me (with|understand)", base_score=12, category="assistance", type="Assistance"),
    PatternRule(regex=r"compare", base_score=13, category="analytical", type="Analytical"),
    PatternRule(regex=r"analyze", base_score=13, category="analytical", type="Analysis"),
    PatternRule(regex=r"describe", base_score=11, category="descriptive", type="Description"),
    PatternRule(regex=r"list|give me examples", base_score=10, category="listing", type="Listing"),
    PatternRule(regex=r"recommend", base_score=9, category="advisory", type="Recommendation"),
    PatternRule(regex=r"review", base_score=11, category="evaluative", type="Review"),
    PatternRule(regex=r"(step by step|tutorial|guide)", base_score=14, category="tutorial", type="Tutorial"),
)

_DEFAULT_KEYWORD_CATEGORIES = {
    "creative": KeywordCategory(
        base_score=8,
        words=(
            "poem", "story", "song", "lyrics", "novel", "essay", "article", "script",
            "dialogue", "character", "plot", "narrative", "creative", "artistic",
            "design", "imagine", "invent", "original",
        ),
    ),
    "academic": KeywordCategory(
        base_score=10,
        words=(
            "universe", "philosophy", "theory", "concept", "analysis", "research",
            "science", "physics", "mathematics", "history", "literature", "psychology",
            "sociology", "economics", "politics", "biology", "chemistry", "astronomy",
            "quantum", "relativity", "evolution", "consciousness", "existence",
        ),
    ),
    "complexity": KeywordCategory(
        base_score=7,
        words=(
            "explain", "elaborate", "detail", "comprehensive", "thorough", "complete",
            "understand", "analyze", "examine", "explore", "investigate", "discuss",
            "evaluate", "assess", "critique", "interpret", "synthesize",
        ),
    ),
    "technical": KeywordCategory(
        base_score=9,
        words=(
            "algorithm", "programming", "software", "technology", "computer", "coding",
            "development", "engineering", "technical", "implementation", "architecture",
            "framework", "methodology", "optimization", "debugging",
        ),
    ),
}

_DEFAULT_CATEGORY_MULTIPLIERS = {
    "creative": 1.0,
    "academic": 1.2,
    "technical": 1.1,
    "educational": 1.1,
    "analytical": 1.15,
    "informational": 1.0,
    "instructional": 1.05,
    "questioning": 0.9,
    "requesting": 0.95,
    "demonstrative": 1.0,
    "assistance": 1.0,
    "descriptive": 1.0,
    "listing": 0.9,
    "advisory": 1.0,
    "evaluative": 1.05,
    "tutorial": 1.1,
}


class ComplexityConfig(_FrozenModel):
    """Immutable configuration for :class:`ComplexityAnalyzer`.

    Build it once at startup and hand it to the analyzer. ``merged`` returns a
    new instance, so in-flight scoring never sees a half-updated config.
    """

    scoring: ScoringWeights = ScoringWeights()
    relationship_words: tuple[str, ...] = (
        "because", "therefore", "however", "moreover", "furthermore",
        "nevertheless", "consequently", "meanwhile", "although", "whereas",
    )
    abstract_words: tuple[str, ...] = (
        "concept", "principle", "theory", "hypothesis", "assumption",
        "perspective", "approach", "methodology", "framework",
    )
    quantitative_words: tuple[str, ...] = (
        "percent", "ratio", "proportion", "statistics", "data",
        "measurement", "calculate", "estimate", "approximately",
    )
    patterns: tuple[PatternRule, ...] = _DEFAULT_PATTERNS
    keyword_categories: dict[str, KeywordCategory] = Field(
        default_factory=lambda: dict(_DEFAULT_KEYWORD_CATEGORIES)
    )
    category_multipliers: dict[str, float] = Field(
        default_factory=lambda: dict(_DEFAULT_CATEGORY_MULTIPLIERS)
    )
    reduction_rules: dict[str, ReductionRule] = Field(
        default_factory=lambda: {
            "simple_greetings": ReductionRule(penalty=-5, words=("hi", "hello", "hey")),
            "simple_responses": ReductionRule(
                penalty=-4,
                words=("yes", "no", "ok", "thanks", "bye", "cool", "nice", "lol"),
            ),
        }
    )
    time_adjustments: tuple[TimeAdjustment, ...] = (
        TimeAdjustment(hour_range=(6, 9), score=2, description="Morning energy"),
        TimeAdjustment(hour_range=(12, 14), score=-1, description="Afternoon nap"),
        TimeAdjustment(hour_range=(20, 23), score=3, description="Evening activity"),
        TimeAdjustment(hour_range=(0, 5), score=-3, description="Night sleepiness"),
    )
    high_complexity_categories: tuple[str, ...] = ("academic", "technical", "analytical")
    adaptive_length_steps: tuple[int, ...] = (100, 200, 300)
    adaptive_length_bonus: float = 0.1
    adaptive_category_bonus: float = 0.05

    def merged(self, overrides: dict[str, Any]) -> "ComplexityConfig":
        """
        Return a new config with ``overrides`` applied.

        Args:
            overrides: Mapping shaped like this model. ``scoring``,
                ``category_multipliers`` and ``reduction_rules`` update per key;
                ``patterns`` update the pattern with the same ``type`` or are
                appended; ``keyword_categories`` merge fields and extend word
                lists; ``time_adjustments`` replace the whole list; anything
                else replaces the field.

        Returns:
            A validated ComplexityConfig
        """
        data = self.model_dump()
        for key, value in overrides.items():
            if key == "scoring":
                data["scoring"].update(value)
            elif key == "patterns":
                by_type = {p["type"]: i for i, p in enumerate(data["patterns"])}
                patterns = list(data["patterns"])
                for pattern in value:
                    index = by_type.get(pattern.get("type"))
                    if index is not None:
                        patterns[index] = {**patterns[index], **pattern}
                    else:
                        patterns.append(pattern)
                data["patterns"] = patterns
            elif key == "keyword_categories":
                for name, category in value.items():
                    existing = data["keyword_categories"].get(name)
                    if existing:
                        words = tuple(existing["words"]) + tuple(category.get("words", ()))
                        data["keyword_categories"][name] = {**existing, **category, "words": words}
                    else:
                        data["keyword_categories"][name] = category
            elif key in ("category_multipliers", "reduction_rules"):
                data[key].update(value)
            else:
                data[key] = value

        config = ComplexityConfig.model_validate(data)
        logger.info(f"Complexity configuration updated: {sorted(overrides)}")
        return config

    @classmethod
    def from_file(cls, path: str | Path) -> "ComplexityConfig":
        """Load defaults merged with overrides from a JSON file."""
        with open(path, encoding="utf-8") as f:
            overrides = json.load(f)
        return cls().merged(overrides)


@dataclass
class ComplexityBreakdown:
    """Per-term contributions to a complexity score."""

    length: float = 0.0
    semantic: float = 0.0
    structural: float = 0.0
    pattern: float = 0.0
    keyword: float = 0.0
    punctuation: float = 0.0
    sentence: float = 0.0
    complex_words: float = 0.0
    reduction: float = 0.0
    time_of_day: float = 0.0
    adaptive_multiplier: float = 1.0
    matched_patterns: list[str] = field(default_factory=list)
    matched_categories: list[str] = field(default_factory=list)
    keyword_categories: list[str] = field(default_factory=list)
    final_score: int = 0

    @property
    def raw_total(self) -> float:
        return (
            self.length
            + self.semantic
            + self.structural
            + self.pattern
            + self.keyword
            + self.punctuation
            + self.sentence
            + self.complex_words
            + self.reduction
            + self.time_of_day
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/debugging."""
        return {
            "length": round(self.length, 2),
            "semantic": self.semantic,
            "structural": self.structural,
            "pattern": self.pattern,
            "keyword": self.keyword,
            "punctuation": self.punctuation,
            "sentence": self.sentence,
            "complex_words": self.complex_words,
            "reduction": self.reduction,
            "time_of_day": self.time_of_day,
            "adaptive_multiplier": round(self.adaptive_multiplier, 2),
            "matched_categories": self.matched_categories,
            "keyword_categories": self.keyword_categories,
            "final_score": self.final_score,
        }


def _current_hour() -> int:
    return datetime.now().hour


class ComplexityAnalyzer:
    """Scores how demanding a prompt is, which drives the reply length."""

    def __init__(
        self,
        config: ComplexityConfig | None = None,
        clock: Callable[[], int] = _current_hour,
    ):
        """
        Initialize the analyzer.

        Args:
            config: Scoring configuration (defaults to ComplexityConfig())
            clock: Returns the current hour, used when no hour is passed
        """
        self.config = config or ComplexityConfig()
        self.clock = clock

    @cached_property
    def _compiled_patterns(self) -> list[tuple[re.Pattern[str], PatternRule]]:
        return [(re.compile(rule.regex), rule) for rule in self.config.patterns]

    def score(self, text: str, hour: int | None = None) -> int:
        """Score ``text`` in [min_score, max_score]."""
        return self.analyze(text, hour).final_score

    def analyze(self, text: str, hour: int | None = None) -> ComplexityBreakdown:
        """
        Compute every term of the complexity score.

        Args:
            text: Prompt text
            hour: Hour of day for the time term (defaults to the clock)

        Returns:
            ComplexityBreakdown with the clamped final score
        """
        weights = self.config.scoring
        breakdown = ComplexityBreakdown()

        if not text or not text.strip():
            breakdown.final_score = weights.min_score
            return breakdown

        text = text.lower()
        breakdown.length = min(len(text) / weights.length_divisor, weights.max_length_score)
        breakdown.semantic = self._semantic_score(text)
        breakdown.structural = self._structural_score(text)
        breakdown.pattern = self._pattern_score(text, breakdown)
        breakdown.keyword = self._keyword_score(text, breakdown)

        breakdown.punctuation = (
            text.count("?") * weights.question_multiplier
            + text.count("!") * weights.exclamation_multiplier
        )

        sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
        breakdown.sentence = max(0, (len(sentences) - 1) * weights.sentence_multiplier)

        complex_words = [
            word
            for word in text.split()
            if len(re.sub(r"[^a-z]", "", word)) > weights.complex_word_threshold
        ]
        breakdown.complex_words = len(complex_words) * weights.complex_word_multiplier

        breakdown.reduction = self._reduction_score(text)
        breakdown.time_of_day = self._time_score(self.clock() if hour is None else hour)
        # Only phrase-pattern categories drive the context bonus
        breakdown.adaptive_multiplier = self._adaptive_multiplier(
            len(text), breakdown.matched_categories
        )

        total = round(breakdown.raw_total * breakdown.adaptive_multiplier)
        breakdown.final_score = max(weights.min_score, min(weights.max_score, total))

        logger.debug(f"Complexity analysis for {text[:50]!r}: {breakdown.to_dict()}")
        return breakdown

    def _semantic_score(self, text: str) -> float:
        weights = self.config.scoring
        return (
            self._count_words(text, self.config.relationship_words) * weights.relationship_weight
            + self._count_words(text, self.config.abstract_words) * weights.abstract_weight
            + self._count_words(text, self.config.quantitative_words) * weights.quantitative_weight
        )

    @staticmethod
    def _count_words(text: str, words: tuple[str, ...]) -> int:
        return sum(len(re.findall(rf"\b{re.escape(word)}", text)) for word in words)

    def _structural_score(self, text: str) -> float:
        weights = self.config.scoring
        parentheticals = len(re.findall(r"\([^)]*\)", text))
        quote_pairs = len(re.findall(r"[\"']", text)) / 2
        return (
            text.count(",") * weights.comma_weight
            + text.count(";") * weights.semicolon_weight
            + text.count(":") * weights.colon_weight
            + parentheticals * weights.parenthetical_weight
            + quote_pairs * weights.quotation_weight
        )

    def _pattern_score(self, text: str, breakdown: ComplexityBreakdown) -> float:
        multipliers = self.config.category_multipliers
        score = 0.0
        categories: list[str] = []

        for regex, rule in self._compiled_patterns:
            if regex.search(text):
                score += round(rule.base_score * multipliers.get(rule.category, 1.0))
                breakdown.matched_patterns.append(rule.type)
                if rule.category not in categories:
                    categories.append(rule.category)

        if len(categories) > 1:
            avg_multiplier = sum(multipliers.get(c, 1.0) for c in categories) / len(categories)
            score += round(
                (len(categories) - 1) * self.config.scoring.combination_bonus * avg_multiplier
            )

        breakdown.matched_categories.extend(categories)
        return score

    def _keyword_score(self, text: str, breakdown: ComplexityBreakdown) -> float:
        score = 0.0
        for name, category in self.config.keyword_categories.items():
            matches = [word for word in category.words if word in text]
            if not matches:
                continue

            # Repeated hits from one category grow sub-linearly
            diminishing = min(1.0, 1.0 / math.sqrt(len(matches)))
            multiplier = self.config.category_multipliers.get(name, 1.0)
            score += round(category.base_score * multiplier * len(matches) * diminishing)
            breakdown.keyword_categories.append(name)
        return score

    def _reduction_score(self, text: str) -> float:
        stripped = text.strip()
        return sum(
            rule.penalty
            for rule in self.config.reduction_rules.values()
            for word in rule.words
            if stripped in (word, f"{word}!")
        )

    def _time_score(self, hour: int) -> float:
        for adjustment in self.config.time_adjustments:
            if adjustment.matches(hour):
                return adjustment.score
        return 0.0

    def _adaptive_multiplier(self, text_length: int, categories: list[str]) -> float:
        multiplier = 1.0
        for step in self.config.adaptive_length_steps:
            if text_length > step:
                multiplier += self.config.adaptive_length_bonus
        if any(c in self.config.high_complexity_categories for c in categories):
            multiplier += self.config.adaptive_category_bonus
        return multiplier
