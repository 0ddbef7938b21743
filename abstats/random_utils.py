from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class SeededRandom:
    """Small reproducible uniform source.

    Linear congruential generator:
      state = (state * 9301 + 49297) % 233280
      value = state / 233280

    Only 233280 distinct values, so it is meant for repeatable demos and
    tests, not for anything that needs statistical quality.
    """

    state: int

    def random(self) -> float:
        self.state = (self.state * 9301 + 49297) % 233280
        return self.state / 233280.0

    @classmethod
    def from_string(cls, seed: str) -> "SeededRandom":
        h = 0
        for ch in seed:
            h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
        # interpret as signed 32-bit
        if h >= 0x80000000:
            h -= 0x100000000
        return cls(abs(h))


def make_rng(seed: Optional[Union[int, str]] = None) -> Union[SeededRandom, random.Random]:
    """String seeds give the LCG, int seeds the stdlib Mersenne Twister."""
    if isinstance(seed, str):
        return SeededRandom.from_string(seed)
    return random.Random(seed)
