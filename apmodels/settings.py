"""Run configuration for affinity propagation."""

from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Any, Dict

import numpy as np


class PreferenceChoice(str, Enum):
    """How the shared self-similarity (preference) is derived."""

    MEDIAN = 'median'
    MIN = 'min'
    MAX = 'max'
    AVERAGE = 'average'
    CONSTANT = 'constant'

    @classmethod
    def parse(cls, value) -> 'PreferenceChoice':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown preference choice: {value!r}. "
                f"Available: {[c.value for c in cls]}"
            ) from None


@dataclass(frozen=True)
class APSettings:
    """
    Immutable settings for one affinity propagation run.

    Attributes:
        max_iterations: Number of message-passing rounds (always all executed)
        damping_factor: Weight of the previous value in each damped update,
            expected in [0, 1) but not checked
        preference: Policy for the diagonal of the similarity matrix
        constant_preference: Preference used when policy is CONSTANT
        random_noise: Subtract uniform noise from every similarity
        noise_scale: Upper bound of the noise draw
        random_seed: Seed for the noise generator; negative means unseeded
    """
    max_iterations: int = 100
    damping_factor: float = 0.9
    preference: PreferenceChoice = PreferenceChoice.MEDIAN
    constant_preference: float = -1.0
    random_noise: bool = False
    noise_scale: float = 1e-8
    random_seed: int = -1

    def __post_init__(self):
        object.__setattr__(self, 'preference', PreferenceChoice.parse(self.preference))

    def replace(self, **changes) -> 'APSettings':
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_params(self) -> Dict[str, Any]:
        params = asdict(self)
        params['preference'] = self.preference.value
        return params

    def make_rng(self) -> np.random.Generator:
        """Noise generator: seeded when random_seed >= 0, OS entropy otherwise."""
        return make_rng(self.random_seed)


def make_rng(seed: int) -> np.random.Generator:
    if seed is not None and seed >= 0:
        return np.random.default_rng(seed)
    return np.random.default_rng()
