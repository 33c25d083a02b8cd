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

"""Soft-constraint terms pairing a vector constraint with a penalty."""

from typing import Tuple

import jax.numpy as jnp
from jax import Array

from switchax.core.metrics import LagrangianMetrics
from switchax.core.types import StateFn, StateInputFn
from switchax.penalties.base import AugmentedPenalty


class _AugmentedLagrangianBase:
    """Shared evaluation of a vector constraint under a scalar penalty."""

    def __init__(self, constraint, penalty: AugmentedPenalty):
        self.constraint = constraint
        self.penalty = penalty

    def _evaluate(self, t: float, h: Array, multiplier: Array) -> LagrangianMetrics:
        h = jnp.atleast_1d(jnp.asarray(h))
        multiplier = jnp.atleast_1d(jnp.asarray(multiplier))
        if multiplier.shape != h.shape:
            raise ValueError(
                f"Multiplier shape {multiplier.shape} does not match "
                f"constraint shape {h.shape}"
            )
        penalty = jnp.sum(self.penalty.value(t, multiplier, h))
        return LagrangianMetrics(constraint=h, penalty=float(penalty))

    def _update(self, t: float, h: Array,
                multiplier: Array) -> Tuple[LagrangianMetrics, Array]:
        metrics = self._evaluate(t, h, multiplier)
        new_multiplier = self.penalty.update_multiplier(
            t, jnp.atleast_1d(jnp.asarray(multiplier)), metrics.constraint)
        return metrics, new_multiplier

    def _initialize(self, h: Array) -> Array:
        h = jnp.atleast_1d(jnp.asarray(h, dtype=jnp.result_type(float)))
        return jnp.full_like(h, self.penalty.initialize_multiplier())


class StateAugmentedLagrangian(_AugmentedLagrangianBase):
    """Soft constraint on (t, x); used at intermediate, pre-jump and final times.

    Example:
        >>> term = StateAugmentedLagrangian(
        ...     lambda t, x: x[:1] - 0.5, ModifiedRelaxedBarrierPenalty())
        >>> l = term.initialize_lagrangian(0.0, x)
        >>> metrics = term.get_value(0.0, x, l)
    """

    def __init__(self, constraint: StateFn, penalty: AugmentedPenalty):
        super().__init__(constraint, penalty)

    def get_value(self, t: float, x: Array, multiplier: Array) -> LagrangianMetrics:
        return self._evaluate(t, self.constraint(t, x), multiplier)

    def update_lagrangian(self, t: float, x: Array,
                          multiplier: Array) -> Tuple[LagrangianMetrics, Array]:
        return self._update(t, self.constraint(t, x), multiplier)

    def initialize_lagrangian(self, t: float, x: Array) -> Array:
        return self._initialize(self.constraint(t, x))


class StateInputAugmentedLagrangian(_AugmentedLagrangianBase):
    """Soft constraint on (t, x, u); used at intermediate times only."""

    def __init__(self, constraint: StateInputFn, penalty: AugmentedPenalty):
        super().__init__(constraint, penalty)

    def get_value(self, t: float, x: Array, u: Array,
                  multiplier: Array) -> LagrangianMetrics:
        return self._evaluate(t, self.constraint(t, x, u), multiplier)

    def update_lagrangian(self, t: float, x: Array, u: Array,
                          multiplier: Array) -> Tuple[LagrangianMetrics, Array]:
        return self._update(t, self.constraint(t, x, u), multiplier)

    def initialize_lagrangian(self, t: float, x: Array, u: Array) -> Array:
        return self._initialize(self.constraint(t, x, u))
