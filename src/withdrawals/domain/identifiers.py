"""Identifier and reference-number generation strategies."""

import itertools
import random
import uuid
from datetime import datetime, UTC
from typing import Callable, Optional


class IdGenerator:
    """Default identifier strategy.

    Opaque identifiers are UUID4 hex strings. Human-readable project and
    reference numbers combine a UTC timestamp with a random suffix.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.clock = clock or (lambda: datetime.now(UTC))
        self.rng = rng or random.Random()

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _suffix(self) -> str:
        return f"{self.rng.randrange(10000):04d}"

    def project_number(self) -> str:
        return f"PRJ-{self.clock():%Y%m%d}-{self._suffix()}"

    def ref_number(self) -> str:
        return f"WR-{self.clock():%Y%m%d%H%M%S}-{self._suffix()}"


class SequentialIdGenerator(IdGenerator):
    """Deterministic identifiers, for tests and reproducible imports."""

    def __init__(self, prefix: str = ""):
        super().__init__()
        self.prefix = prefix
        self._ids = itertools.count(1)
        self._projects = itertools.count(1)
        self._refs = itertools.count(1)

    def new_id(self) -> str:
        return f"{self.prefix}{next(self._ids):08d}"

    def project_number(self) -> str:
        return f"PRJ-{next(self._projects):05d}"

    def ref_number(self) -> str:
        return f"WR-{next(self._refs):05d}"
