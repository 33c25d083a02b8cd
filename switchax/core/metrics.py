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

"""Rollout metrics and the performance index reduced from them."""

from dataclasses import dataclass, field, fields
from typing import Dict, List, NamedTuple

import jax.numpy as jnp
from jax import Array


class LagrangianMetrics(NamedTuple):
    """Constraint value and penalty of one augmented Lagrangian term."""
    constraint: Array
    penalty: float


def sum_penalties(terms: Dict[str, LagrangianMetrics]) -> float:
    """Sums the penalty part of a collection of Lagrangian metrics."""
    total = 0.0
    for term in terms.values():
        total += float(term[1])
    return total


def _empty() -> Array:
    return jnp.zeros(0)


@dataclass
class Metrics:
    """Cost and constraint terms evaluated at one time point.

    Attributes:
        cost: Sum of all cost terms.
        state_eq_constraint: Stacked state-only equality residuals.
        state_input_eq_constraint: Stacked state-input equality residuals.
        state_eq_lagrangian: State-only equality soft constraints.
        state_ineq_lagrangian: State-only inequality soft constraints.
        state_input_eq_lagrangian: State-input equality soft constraints.
        state_input_ineq_lagrangian: State-input inequality soft constraints.
    """
    cost: float = 0.0
    state_eq_constraint: Array = field(default_factory=_empty)
    state_input_eq_constraint: Array = field(default_factory=_empty)
    state_eq_lagrangian: Dict[str, LagrangianMetrics] = field(default_factory=dict)
    state_ineq_lagrangian: Dict[str, LagrangianMetrics] = field(default_factory=dict)
    state_input_eq_lagrangian: Dict[str, LagrangianMetrics] = field(default_factory=dict)
    state_input_ineq_lagrangian: Dict[str, LagrangianMetrics] = field(default_factory=dict)


@dataclass
class MetricsCollection:
    """Metrics of a whole rollout, partitioned like the dual solution."""
    final: Metrics = field(default_factory=Metrics)
    pre_jumps: List[Metrics] = field(default_factory=list)
    intermediates: List[Metrics] = field(default_factory=list)


@dataclass(frozen=True)
class PerformanceIndex:
    """Scalar summary of a rollout.

    Attributes:
        total_cost: Final, pre-jump and integrated intermediate cost.
        dynamics_violation_sse: Sum of squared dynamics defects. Always zero
            for rollouts, which satisfy the dynamics by construction.
        equality_constraints_sse: Sum of squared equality residuals.
        equality_lagrangians_penalty: Sum of equality soft-constraint penalties.
        inequality_lagrangians_penalty: Sum of inequality soft-constraint
            penalties.
    """
    total_cost: float = 0.0
    dynamics_violation_sse: float = 0.0
    equality_constraints_sse: float = 0.0
    equality_lagrangians_penalty: float = 0.0
    inequality_lagrangians_penalty: float = 0.0

    @property
    def merit(self) -> float:
        """Return the augmented Lagrangian merit used by line searches."""
        return (self.total_cost + self.equality_lagrangians_penalty
                + self.inequality_lagrangians_penalty)

    def __add__(self, other: 'PerformanceIndex') -> 'PerformanceIndex':
        return PerformanceIndex(**{
            f.name: getattr(self, f.name) + getattr(other, f.name)
            for f in fields(self)
        })
