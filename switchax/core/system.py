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

"""Switched system dynamics: continuous flow map plus event jump map."""

from dataclasses import dataclass
from typing import Optional

import jax.numpy as jnp
from jax import Array

from switchax.core.types import FlowMapFn, JumpMapFn


@dataclass(frozen=True)
class SystemDynamics:
    """Dynamics of a switched system.

    Between events the state follows ``dx/dt = flow_map(t, x, u)``; at an
    event time the state is reset by ``x+ = jump_map(t, x-)``.

    Attributes:
        flow_map: Continuous-time dynamics (t, x, u) -> dx/dt.
        jump_map: Event transition (t, x) -> x+. Identity if None.

    Example:
        >>> system = SystemDynamics(flow_map=lambda t, x, u: -x + u)
        >>> dxdt = system.compute_flow_map(0.0, jnp.ones(1), jnp.zeros(1))
    """

    flow_map: FlowMapFn
    jump_map: Optional[JumpMapFn] = None

    def compute_flow_map(self, t: float, x: Array, u: Array) -> Array:
        return jnp.asarray(self.flow_map(t, x, u))

    def compute_jump_map(self, t: float, x: Array) -> Array:
        if self.jump_map is None:
            return x
        return jnp.asarray(self.jump_map(t, x))
