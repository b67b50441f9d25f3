"""Maps complexity scores to reply lengths."""

import logging
import random
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LengthBand:
    """Token-count range for complexity scores up to ``max_complexity``."""

    max_complexity: int | None  # None means "everything above"
    min_tokens: int
    max_tokens: int
    label: str = ""


DEFAULT_BANDS = (
    LengthBand(6, 2, 5, "very short"),
    LengthBand(12, 5, 10, "short"),
    LengthBand(20, 10, 19, "medium-short"),
    LengthBand(30, 20, 34, "medium"),
    LengthBand(45, 30, 49, "long"),
    LengthBand(60, 45, 69, "very long"),
    LengthBand(None, 60, 94, "extremely long"),
)


class UtteranceLengthPolicy:
    """Samples how many sounds a reply gets for a given complexity."""

    def __init__(
        self,
        bands: tuple[LengthBand, ...] = DEFAULT_BANDS,
        rng: random.Random | None = None,
    ):
        """
        Initialize the policy.

        Args:
            bands: Bands ordered by increasing complexity; the last one must be open-ended
            rng: Random source for sampling

        Raises:
            ValueError: If the bands are not monotonically non-decreasing
        """
        self._validate(bands)
        self.bands = bands
        self.rng = rng or random.Random()

    @staticmethod
    def _validate(bands: tuple[LengthBand, ...]) -> None:
        if not bands:
            raise ValueError("At least one length band is required")
        if bands[-1].max_complexity is not None:
            raise ValueError("The last length band must be open-ended")

        for band in bands:
            if not 1 <= band.min_tokens <= band.max_tokens:
                raise ValueError(f"Invalid token range in band {band}")

        for previous, current in zip(bands, bands[1:]):
            if previous.max_complexity is None:
                raise ValueError("Only the last length band may be open-ended")
            if current.max_complexity is not None and current.max_complexity <= previous.max_complexity:
                raise ValueError("Band complexity thresholds must increase")
            if current.min_tokens < previous.min_tokens or current.max_tokens < previous.max_tokens:
                raise ValueError(f"Band token ranges must not decrease: {previous} -> {current}")

    def band_for(self, complexity: int) -> LengthBand:
        """Get the band that covers ``complexity``."""
        for band in self.bands:
            if band.max_complexity is None or complexity <= band.max_complexity:
                return band
        return self.bands[-1]

    def token_count(self, complexity: int) -> int:
        """Sample a token count for ``complexity``."""
        band = self.band_for(complexity)
        count = self.rng.randint(band.min_tokens, band.max_tokens)
        logger.debug(
            f"Token count {count} for complexity {complexity} "
            f"({band.label or 'band'} {band.min_tokens}-{band.max_tokens})"
        )
        return count
