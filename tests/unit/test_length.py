"""Unit tests for reply length policy."""

import random

import pytest

from catgpt.chat.length import DEFAULT_BANDS, LengthBand, UtteranceLengthPolicy


class TestUtteranceLengthPolicy:
    """Test cases for UtteranceLengthPolicy."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.policy = UtteranceLengthPolicy(rng=random.Random(42))

    @pytest.mark.parametrize(
        ("complexity", "low", "high"),
        [
            (2, 2, 5),
            (6, 2, 5),
            (7, 5, 10),
            (12, 5, 10),
            (20, 10, 19),
            (30, 20, 34),
            (45, 30, 49),
            (60, 45, 69),
            (61, 60, 94),
            (80, 60, 94),
        ],
    )
    def test_token_count_within_band(self, complexity: int, low: int, high: int) -> None:
        """Test sampled counts stay inside the band for the complexity."""
        for _ in range(200):
            assert low <= self.policy.token_count(complexity) <= high

    def test_band_edges(self) -> None:
        """Test that band thresholds are inclusive."""
        assert self.policy.band_for(6).label == "very short"
        assert self.policy.band_for(7).label == "short"
        assert self.policy.band_for(500).label == "extremely long"

    def test_complex_prompts_get_longer_replies(self) -> None:
        """Test mean reply length grows with complexity."""
        trials = 1000
        mean_high = sum(self.policy.token_count(70) for _ in range(trials)) / trials
        mean_low = sum(self.policy.token_count(10) for _ in range(trials)) / trials

        assert mean_high > mean_low

    def test_seeded_policy_is_reproducible(self) -> None:
        """Test that equal seeds give equal samples."""
        first = UtteranceLengthPolicy(rng=random.Random(5))
        second = UtteranceLengthPolicy(rng=random.Random(5))

        assert [first.token_count(40) for _ in range(20)] == [second.token_count(40) for _ in range(20)]

    def test_default_bands_are_valid(self) -> None:
        """Test default bands are accepted as-is."""
        assert UtteranceLengthPolicy(DEFAULT_BANDS).bands == DEFAULT_BANDS

    def test_rejects_closed_last_band(self) -> None:
        """Test that the last band must be open-ended."""
        with pytest.raises(ValueError, match="open-ended"):
            UtteranceLengthPolicy((LengthBand(10, 1, 3), LengthBand(20, 3, 6)))

    def test_rejects_decreasing_ranges(self) -> None:
        """Test that token ranges must not shrink as complexity grows."""
        with pytest.raises(ValueError, match="must not decrease"):
            UtteranceLengthPolicy((LengthBand(10, 5, 10), LengthBand(None, 2, 4)))

    def test_rejects_unordered_thresholds(self) -> None:
        """Test that thresholds must increase."""
        with pytest.raises(ValueError, match="must increase"):
            UtteranceLengthPolicy(
                (LengthBand(20, 1, 3), LengthBand(10, 3, 6), LengthBand(None, 6, 9))
            )

    def test_rejects_empty_and_invalid_ranges(self) -> None:
        """Test degenerate band definitions."""
        with pytest.raises(ValueError):
            UtteranceLengthPolicy(())
        with pytest.raises(ValueError, match="Invalid token range"):
            UtteranceLengthPolicy((LengthBand(None, 5, 2),))
