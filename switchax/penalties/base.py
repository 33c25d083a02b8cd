# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Base class and configuration for augmented Lagrangian penalties.

An augmented penalty p(h, λ) replaces a hard constraint on h by a smooth cost
parameterized by a Lagrange multiplier λ. The solver minimizes the penalty
while the multiplier is updated between iterations (dual ascent).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import jax
import jax.numpy as jnp
from jax import Array

# Lower bound on inequality multipliers. Keeps the constraint active in the
# augmented cost even when it has been strictly satisfied for a while.
MULTIPLIER_FLOOR = 1e-4


@dataclass(frozen=True)
class PenaltyConfig:
    """Shape parameters of an augmented penalty.

    Attributes:
        scale: Penalty scaling factor (mu), > 0.
        relaxation: Relaxation threshold (delta) of barrier penalties, > 0.
        step_size: Damping of the multiplier update, >= 0.
    """
    scale: float = 100.0
    relaxation: float = 1e-2
    step_size: float = 0.0

    def __post_init__(self):
        if self.scale <= 0.0:
            raise ValueError(f"scale must be > 0, got {self.scale}")
        if self.relaxation <= 0.0:
            raise ValueError(f"relaxation must be > 0, got {self.relaxation}")
        if self.step_size < 0.0:
            raise ValueError(f"step_size must be >= 0, got {self.step_size}")


def check_positive_multiplier(l: Array):
    """Raises ValueError if any multiplier is not strictly positive.

    Traced multipliers are not checked.
    """
    if isinstance(l, jax.core.Tracer):
        return
    if jnp.any(jnp.asarray(l) <= 0.0):
        raise ValueError(
            f"Penalty multipliers must be strictly positive, got {l}"
        )


class AugmentedPenalty(ABC):
    """Abstract augmented Lagrangian penalty.

    All methods act element-wise on arrays of multipliers ``l`` and
    constraint values ``h``. Instances are immutable, so a single penalty
    may be shared by any number of constraint terms and threads.
    """

    name: str = "base"

    def __init__(self, config: PenaltyConfig = PenaltyConfig()):
        self.config = config

    @abstractmethod
    def value(self, t: float, l: Array, h: Array) -> Array:
        """Penalty value p(h, l)."""
        ...

    @abstractmethod
    def derivative(self, t: float, l: Array, h: Array) -> Array:
        """First derivative dp/dh."""
        ...

    @abstractmethod
    def second_derivative(self, t: float, l: Array, h: Array) -> Array:
        """Second derivative d2p/dh2."""
        ...

    @abstractmethod
    def update_multiplier(self, t: float, l: Array, h: Array) -> Array:
        """Multiplier for the next iteration given the current constraint."""
        ...

    @abstractmethod
    def initialize_multiplier(self) -> float:
        """Multiplier used when no previous iterate exists."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config})"
