"""
Configuration for a k-means teaching session.
"""

from dataclasses import dataclass, asdict
from typing import Optional

__all__ = [
    "LabConfig",
    "METHODS",
]

# Point distributions understood by synthetic_data.generate_points
METHODS = ("uniform", "gaussian", "clusters")


@dataclass
class LabConfig:
    """Configuration for one interactive session."""

    # Canvas bounds (points and random centroids live in [0, w) x [0, h))
    width: float = 800.0
    height: float = 600.0

    # k selector
    k_min: int = 1
    k_max: int = 10
    k: int = 3

    # Point generation
    count: int = 200
    count_min: int = 10
    count_max: int = 1000
    method: str = "uniform"

    # Convergence
    threshold: float = 0.1
    max_iterations: int = 100

    # Automatic stepping
    interval_ms: int = 50

    seed: Optional[int] = None

    def __post_init__(self):
        if self.method not in METHODS:
            raise ValueError(f"Unknown data method: {self.method!r}")
        if self.k_min < 1 or self.k_max < self.k_min:
            raise ValueError(f"Invalid k range: [{self.k_min}, {self.k_max}]")
        self.k = self.clamp_k(self.k)
        self.count = self.clamp_count(self.count)

    @property
    def bounds(self) -> tuple:
        return (self.width, self.height)

    @property
    def k_range(self) -> range:
        return range(self.k_min, self.k_max + 1)

    def clamp_k(self, value) -> int:
        return int(min(self.k_max, max(self.k_min, int(value))))

    def clamp_count(self, value) -> int:
        """
        Clamp a requested point count. Decimals are truncated; anything
        non-numeric (NaN included) becomes the minimum.
        """
        try:
            value = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return self.count_min
        return min(self.count_max, max(self.count_min, value))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_args(cls, args) -> "LabConfig":
        """Build from an argparse namespace, ignoring options that were not given."""
        known = cls.__dataclass_fields__.keys()
        kwargs = {
            name: value
            for name, value in vars(args).items()
            if name in known and value is not None
        }
        return cls(**kwargs)
