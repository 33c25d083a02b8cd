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

"""Forward simulation of switched systems under a feedback controller.

- TimeTriggeredRollout: fixed-step rollout with scheduled jumps
- rollout_trajectory: rolls out into a PrimalSolution with divergence check
- Integrators: euler, midpoint, heun, rk4
"""

from switchax.rollout.integrators import (
    euler,
    midpoint,
    heun,
    rk4,
    get_integrator,
)
from switchax.rollout.time_triggered import (
    RolloutResult,
    TimeTriggeredRollout,
    rollout_trajectory,
)

__all__ = [
    # Integrators
    'euler',
    'midpoint',
    'heun',
    'rk4',
    'get_integrator',
    # Rollout
    'RolloutResult',
    'TimeTriggeredRollout',
    'rollout_trajectory',
]
