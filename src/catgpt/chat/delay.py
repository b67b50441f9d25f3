"""Simulated token latency for streamed replies."""

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class DelayConfig:
    """Latency components in milliseconds, with probabilities for the random ones."""

    base_ms: float = 45.0
    first_token_ms: tuple[float, float] = (100.0, 300.0)
    complexity_divisor: float = 100.0
    per_char_ms: float = 8.0
    emphatic_ms: tuple[float, float] = (20.0, 60.0)
    attention_spike_chance: float = 0.15
    attention_spike_ms: tuple[float, float] = (30.0, 100.0)
    tail_fraction: float = 0.8
    tail_ms: tuple[float, float] = (15.0, 40.0)
    jitter_ms: float = 15.0
    thinking_pause_chance: float = 0.08
    thinking_pause_ms: tuple[float, float] = (100.0, 250.0)
    cache_burst_chance: float = 0.2
    cache_burst_factor: float = 0.6
    min_delay_ms: int = 20
    max_delay_ms: int = 800


class StreamingDelayModel:
    """Per-token delay that imitates a model emitting tokens.

    The only state is the injected random source, so a seeded ``rng`` gives
    reproducible delays.
    """

    def __init__(self, config: DelayConfig | None = None, rng: random.Random | None = None):
        self.config = config or DelayConfig()
        if self.config.min_delay_ms > self.config.max_delay_ms:
            raise ValueError("min_delay_ms must not exceed max_delay_ms")
        self.rng = rng or random.Random()

    def delay(self, token: str, position: int, total_tokens: int, complexity: int) -> int:
        """
        Compute the wait before emitting a token.

        Args:
            token: The token about to be emitted
            position: Zero-based position of the token
            total_tokens: Number of tokens in the reply
            complexity: Complexity score of the prompt

        Returns:
            Delay in milliseconds within [min_delay_ms, max_delay_ms]
        """
        cfg = self.config
        rng = self.rng

        delay = cfg.base_ms
        if position == 0:
            delay += rng.uniform(*cfg.first_token_ms)

        # Harder prompts generate slower
        delay *= 1 + complexity / cfg.complexity_divisor
        delay += len(token) * cfg.per_char_ms

        if "!" in token or "?" in token or "..." in token:
            delay += rng.uniform(*cfg.emphatic_ms)
        if rng.random() < cfg.attention_spike_chance:
            delay += rng.uniform(*cfg.attention_spike_ms)
        if position > total_tokens * cfg.tail_fraction:
            delay += rng.uniform(*cfg.tail_ms)

        delay += rng.uniform(-cfg.jitter_ms, cfg.jitter_ms)

        if rng.random() < cfg.thinking_pause_chance:
            delay += rng.uniform(*cfg.thinking_pause_ms)
        if position > 0 and rng.random() < cfg.cache_burst_chance:
            delay *= cfg.cache_burst_factor

        return round(max(cfg.min_delay_ms, min(delay, cfg.max_delay_ms)))
