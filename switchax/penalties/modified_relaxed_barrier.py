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

"""Modified relaxed log-barrier augmented penalty for h >= 0.

The penalty is

    p(h, λ) = λ² μ ψ(h / (λ μ))

where ψ is a shifted log barrier, relaxed by a quadratic below the threshold
δ. With v = h/(μλ) and w = μλ²:

    v >  δ:  p = -w log(1 + v)
    v <= δ:  p = w (a/2 (v-δ)² + b (v-δ) + c)

with a = 1/(1+δ)², b = -1/(1+δ), c = -log(1+δ). The constants make value and
slope of both branches agree at v = δ. The multiplier follows the damped
dual ascent λ+ = -α λ ψ'(v) on the relaxed branch.
"""

import math

import jax.numpy as jnp
from jax import Array

from switchax.penalties.base import (
    AugmentedPenalty,
    MULTIPLIER_FLOOR,
    PenaltyConfig,
    check_positive_multiplier,
)


class ModifiedRelaxedBarrierPenalty(AugmentedPenalty):
    """Smooth-PHR penalty built on a quadratically relaxed log barrier.

    Example:
        >>> penalty = ModifiedRelaxedBarrierPenalty(PenaltyConfig(scale=10.0))
        >>> l = penalty.initialize_multiplier()
        >>> p = penalty.value(0.0, l, jnp.array([0.3, -0.1]))
        >>> l_next = penalty.update_multiplier(0.0, l, jnp.array([0.3, -0.1]))
    """

    name = "modified_relaxed_barrier"

    def __init__(self, config: PenaltyConfig = PenaltyConfig()):
        super().__init__(config)
        delta = config.relaxation
        self._a = 1.0 / (1.0 + delta) ** 2
        self._b = -1.0 / (1.0 + delta)
        self._c = -math.log(1.0 + delta)

    def _terms(self, l: Array, h: Array):
        check_positive_multiplier(l)
        l = jnp.asarray(l, dtype=jnp.result_type(float))
        h = jnp.asarray(h, dtype=l.dtype)
        scale = self.config.scale
        v = h / (scale * l)
        w = scale * l * l
        dldh = 1.0 / (scale * l)
        is_log = v > self.config.relaxation
        # Keeps the inactive log branch finite for v <= -1.
        v_log = jnp.where(is_log, v, self.config.relaxation)
        return v, w, dldh, is_log, v_log

    def value(self, t: float, l: Array, h: Array) -> Array:
        v, w, _, is_log, v_log = self._terms(l, h)
        v_rel = v - self.config.relaxation
        log_branch = -w * jnp.log1p(v_log)
        quad_branch = w * (0.5 * self._a * v_rel * v_rel + self._b * v_rel + self._c)
        return jnp.where(is_log, log_branch, quad_branch)

    def derivative(self, t: float, l: Array, h: Array) -> Array:
        v, w, dldh, is_log, v_log = self._terms(l, h)
        log_branch = -w / (1.0 + v_log) * dldh
        quad_branch = w * (self._a * (v - self.config.relaxation) + self._b) * dldh
        return jnp.where(is_log, log_branch, quad_branch)

    def second_derivative(self, t: float, l: Array, h: Array) -> Array:
        _, w, dldh, is_log, v_log = self._terms(l, h)
        log_branch = w / ((1.0 + v_log) * (1.0 + v_log)) * dldh * dldh
        quad_branch = w * self._a * dldh * dldh
        return jnp.where(is_log, log_branch, quad_branch)

    def update_multiplier(self, t: float, l: Array, h: Array) -> Array:
        v, w, dldh, is_log, v_log = self._terms(l, h)
        log_branch = w * (1.0 / (1.0 + v_log)) * dldh
        quad_branch = (self.config.step_size * w
                       * (-self._a * (v - self.config.relaxation) - self._b) * dldh)
        return jnp.maximum(jnp.where(is_log, log_branch, quad_branch),
                           MULTIPLIER_FLOOR)

    def initialize_multiplier(self) -> float:
        return 1.0
