"""Unit tests for streaming delay model."""

import random

import pytest

from catgpt.chat.delay import DelayConfig, StreamingDelayModel


class TestStreamingDelayModel:
    """Test cases for StreamingDelayModel."""

    def test_delays_within_bounds(self) -> None:
        """Test clamping over many random inputs."""
        model = StreamingDelayModel(rng=random.Random(0))
        inputs = random.Random(1)
        tokens = ["meow", "MEOW!", "mrow?", "zzz...", "OVERTHROW", "x" * 200, ""]

        for _ in range(10_000):
            total = inputs.randint(1, 100)
            delay = model.delay(
                inputs.choice(tokens),
                inputs.randrange(total),
                total,
                inputs.randint(2, 80),
            )
            assert 20 <= delay <= 800
            assert isinstance(delay, int)

    def test_seeded_model_is_reproducible(self) -> None:
        """Test equal seeds give equal delay sequences."""
        first = StreamingDelayModel(rng=random.Random(99))
        second = StreamingDelayModel(rng=random.Random(99))

        args = [("meow", i, 20, 40) for i in range(20)]
        assert [first.delay(*a) for a in args] == [second.delay(*a) for a in args]

    def test_first_token_is_slower(self) -> None:
        """Test the first-token latency on average."""
        model = StreamingDelayModel(rng=random.Random(5))
        first = sum(model.delay("meow", 0, 10, 20) for _ in range(500)) / 500
        later = sum(model.delay("meow", 3, 10, 20) for _ in range(500)) / 500

        assert first > later

    def test_complexity_slows_generation(self) -> None:
        """Test harder prompts stream slower on average."""
        model = StreamingDelayModel(rng=random.Random(6))
        easy = sum(model.delay("meow", 2, 10, 2) for _ in range(500)) / 500
        hard = sum(model.delay("meow", 2, 10, 80) for _ in range(500)) / 500

        assert hard > easy

    def test_custom_bounds(self) -> None:
        """Test configured clamp range."""
        model = StreamingDelayModel(DelayConfig(min_delay_ms=100, max_delay_ms=120), rng=random.Random(2))
        delays = {model.delay("meow", i % 10, 10, 50) for i in range(300)}

        assert min(delays) >= 100
        assert max(delays) <= 120

    def test_rejects_inverted_bounds(self) -> None:
        """Test construction with min above max."""
        with pytest.raises(ValueError):
            StreamingDelayModel(DelayConfig(min_delay_ms=500, max_delay_ms=100))
