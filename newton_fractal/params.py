"""Parameter and result types for a single Newton fractal render."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import NamedTuple, Optional

# Root index used inside the JIT kernels for "did not converge"
NO_ROOT = -1


@dataclass(frozen=True)
class FractalParameters:
    """Immutable snapshot of everything one render depends on.

    Invalid values are rejected here, at the boundary, so the kernels
    never have to check them per pixel.
    """

    width: int
    height: int
    n: int
    max_iter: int

    def __post_init__(self) -> None:
        for name in ("width", "height", "n", "max_iter"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.n < 2:
            raise ValueError(f"n must be at least 2, got {self.n}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {self.max_iter}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


class IterationResult(NamedTuple):
    """Outcome of iterating one starting coordinate."""

    root_index: Optional[int]
    iterations: int

    @property
    def converged(self) -> bool:
        return self.root_index is not None
