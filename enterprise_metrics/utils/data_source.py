"""Pseudo-random data source for the simulated endpoints.

Services draw every simulated value through a ``DataSourceProtocol`` so tests
can substitute a scripted source and assert exact metric updates.
"""

import random
import string
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

_ID_ALPHABET = string.ascii_lowercase + string.digits


class DataSourceProtocol(ABC):
    """Protocol for simulation data sources."""

    @abstractmethod
    def choice(self, options: Sequence[T]) -> T:
        """Pick one of the options."""

    @abstractmethod
    def randint(self, low: int, high: int) -> int:
        """Return an integer in [low, high], both inclusive."""

    @abstractmethod
    def random(self) -> float:
        """Return a float in [0.0, 1.0)."""

    @abstractmethod
    def identifier(self, length: int = 9) -> str:
        """Return a short random identifier."""


class RandomDataSource(DataSourceProtocol):
    """Data source backed by ``random.Random``.

    Args:
        seed: Optional seed for reproducible runs; None seeds from the OS.
    """

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)

    def choice(self, options: Sequence[T]) -> T:
        return self._random.choice(options)

    def randint(self, low: int, high: int) -> int:
        return self._random.randint(low, high)

    def random(self) -> float:
        return self._random.random()

    def identifier(self, length: int = 9) -> str:
        return "".join(self._random.choices(_ID_ALPHABET, k=length))
