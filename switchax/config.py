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

"""Configuration classes for rollouts, line search and penalties.

Provides nested dataclass configuration; nested sections may be given as
plain dicts and are converted on construction.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Literal

from switchax.penalties import AugmentedPenalty, PenaltyConfig, get_penalty


@dataclass
class RolloutSettings:
    """Configuration for the time-triggered rollout.

    Attributes:
        time_step: Nominal integration step. Every segment between events is
            split into ceil(duration / time_step) equal steps.
        integrator: One-step scheme ('euler', 'midpoint', 'heun', 'rk4').
        max_num_steps: Upper bound on the total number of steps per rollout.
        check_numerical_stability: Whether to check every stored state for
            non-finite values.
    """
    time_step: float = 1e-2
    integrator: Literal['euler', 'midpoint', 'heun', 'rk4'] = 'rk4'
    max_num_steps: int = 100000
    check_numerical_stability: bool = True

    def __post_init__(self):
        if self.time_step <= 0.0:
            raise ValueError(f"time_step must be > 0, got {self.time_step}")
        if self.max_num_steps < 1:
            raise ValueError(f"max_num_steps must be >= 1, got {self.max_num_steps}")


@dataclass
class LineSearchSettings:
    """Configuration for the backtracking line search.

    Attributes:
        min_step_length: Smallest step length tried.
        max_step_length: First step length tried.
        contraction_rate: Factor applied to the step length after a rejection.
        armijo_coefficient: Required fraction of the expected merit decrease.
    """
    min_step_length: float = 1e-3
    max_step_length: float = 1.0
    contraction_rate: float = 0.5
    armijo_coefficient: float = 1e-4

    def __post_init__(self):
        if not 0.0 < self.contraction_rate < 1.0:
            raise ValueError(
                f"contraction_rate must be in (0, 1), got {self.contraction_rate}"
            )
        if not 0.0 < self.min_step_length <= self.max_step_length:
            raise ValueError(
                f"Need 0 < min_step_length <= max_step_length, got "
                f"{self.min_step_length} and {self.max_step_length}"
            )


@dataclass
class Settings:
    """Complete configuration of the solver core.

    Attributes:
        rollout: Rollout configuration.
        line_search: Line-search configuration.
        penalty: Default shape of inequality penalties.
        penalty_type: Name passed to ``switchax.penalties.get_penalty``.
    """
    rollout: RolloutSettings = field(default_factory=RolloutSettings)
    line_search: LineSearchSettings = field(default_factory=LineSearchSettings)
    penalty: PenaltyConfig = field(default_factory=PenaltyConfig)
    penalty_type: str = 'modified_relaxed_barrier'

    def __post_init__(self):
        """Convert nested dicts to their config classes."""
        if isinstance(self.rollout, dict):
            self.rollout = RolloutSettings(**self.rollout)
        if isinstance(self.line_search, dict):
            self.line_search = LineSearchSettings(**self.line_search)
        if isinstance(self.penalty, dict):
            self.penalty = PenaltyConfig(**self.penalty)
        # Fails early on an unknown penalty_type.
        self.make_penalty()

    def make_penalty(self) -> AugmentedPenalty:
        """Return the configured penalty for soft inequality constraints.

        Raises:
            ValueError: If ``penalty_type`` is not a known penalty.
        """
        return get_penalty(self.penalty_type, self.penalty)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'Settings':
        """Build settings from a (possibly nested) mapping."""
        return cls(**config)
