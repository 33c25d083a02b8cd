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

"""Quadratic augmented penalties.

QuadraticPenalty handles equality constraints h = 0 with the classic
augmented Lagrangian λh + μ/2 h². SlacknessSquaredHingePenalty is the
Powell-Hestenes-Rockafellar penalty for h >= 0, obtained by eliminating a
slack variable from the equality formulation.
"""

import jax.numpy as jnp
from jax import Array

from switchax.penalties.base import (
    AugmentedPenalty,
    MULTIPLIER_FLOOR,
    check_positive_multiplier,
)


class QuadraticPenalty(AugmentedPenalty):
    """Augmented Lagrangian of an equality constraint h = 0.

    Equality multipliers are signed, so no floor is applied on update.
    """

    name = "quadratic"

    def value(self, t: float, l: Array, h: Array) -> Array:
        return l * h + 0.5 * self.config.scale * h * h

    def derivative(self, t: float, l: Array, h: Array) -> Array:
        return l + self.config.scale * h

    def second_derivative(self, t: float, l: Array, h: Array) -> Array:
        return jnp.full_like(jnp.asarray(h, dtype=jnp.result_type(float)),
                             self.config.scale)

    def update_multiplier(self, t: float, l: Array, h: Array) -> Array:
        return l + self.config.step_size * self.config.scale * h

    def initialize_multiplier(self) -> float:
        return 0.0


class SlacknessSquaredHingePenalty(AugmentedPenalty):
    """PHR penalty of an inequality constraint h >= 0.

        p(h, λ) = (max(0, λ - μh)² - λ²) / (2μ)
    """

    name = "slackness_squared_hinge"

    def _active(self, l: Array, h: Array) -> Array:
        check_positive_multiplier(l)
        return jnp.maximum(l - self.config.scale * h, 0.0)

    def value(self, t: float, l: Array, h: Array) -> Array:
        active = self._active(l, h)
        return (active * active - l * l) / (2.0 * self.config.scale)

    def derivative(self, t: float, l: Array, h: Array) -> Array:
        return -self._active(l, h)

    def second_derivative(self, t: float, l: Array, h: Array) -> Array:
        active = self._active(l, h)
        return jnp.where(active > 0.0, self.config.scale, 0.0)

    def update_multiplier(self, t: float, l: Array, h: Array) -> Array:
        check_positive_multiplier(l)
        return jnp.maximum(l - self.config.step_size * self.config.scale * h,
                           MULTIPLIER_FLOOR)

    def initialize_multiplier(self) -> float:
        return MULTIPLIER_FLOOR
