from __future__ import annotations

from typing import Iterator, List

MODULUS = 2147483647  # 2**31 - 1
MULTIPLIER = 16807


class SeededSequence:
    """Park-Miller "minimal standard" generator yielding floats in [0, 1).

    Every call advances the state (`s = s * 16807 mod 2**31-1`) and returns
    `(s - 1) / (2**31 - 2)`. Two instances built from the same seed yield the
    same values, which is what keeps the synthetic datasets reproducible.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._state = self._normalize(seed)

    @staticmethod
    def _normalize(seed: int) -> int:
        state = int(seed) % MODULUS
        if state <= 0:
            state += MODULUS - 1
        return state

    @property
    def state(self) -> int:
        return self._state

    def __call__(self) -> float:
        self._state = (self._state * MULTIPLIER) % MODULUS
        return (self._state - 1) / (MODULUS - 1)

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self()

    def take(self, n: int) -> List[float]:
        return [self() for _ in range(n)]

    def restart(self) -> None:
        """Rewind to the initial seed."""
        self._state = self._normalize(self.seed)

    def draw(self, span: int, offset: int = 0) -> int:
        """Integer draw `floor(rng() * span) + offset`."""
        return int(self() * span) + offset
