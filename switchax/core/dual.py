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

"""Dual solution: Lagrange multipliers of the augmented Lagrangian terms."""

from dataclasses import dataclass, field
from typing import Dict, List

from jax import Array

from switchax.core.trajectory import PrimalSolution


@dataclass
class MultiplierCollection:
    """Multipliers of one time point, keyed by Lagrangian term name.

    Attributes:
        state_eq: Multipliers of state-only equality terms.
        state_ineq: Multipliers of state-only inequality terms.
        state_input_eq: Multipliers of state-input equality terms.
        state_input_ineq: Multipliers of state-input inequality terms.
    """
    state_eq: Dict[str, Array] = field(default_factory=dict)
    state_ineq: Dict[str, Array] = field(default_factory=dict)
    state_input_eq: Dict[str, Array] = field(default_factory=dict)
    state_input_ineq: Dict[str, Array] = field(default_factory=dict)


@dataclass
class DualSolution:
    """Multipliers along a trajectory.

    ``intermediates`` is index-aligned with the primal time trajectory and
    ``pre_jumps`` with its post-event indices.
    """
    final: MultiplierCollection = field(default_factory=MultiplierCollection)
    pre_jumps: List[MultiplierCollection] = field(default_factory=list)
    intermediates: List[MultiplierCollection] = field(default_factory=list)

    def validate_against(self, primal_solution: PrimalSolution):
        """Check that the partitions match the primal trajectory.

        Raises:
            ValueError: On a length mismatch.
        """
        if len(self.intermediates) != len(primal_solution.time_trajectory):
            raise ValueError(
                f"Dual solution has {len(self.intermediates)} intermediate "
                f"entries but the trajectory has "
                f"{len(primal_solution.time_trajectory)} samples"
            )
        if len(self.pre_jumps) != len(primal_solution.post_event_indices):
            raise ValueError(
                f"Dual solution has {len(self.pre_jumps)} pre-jump entries "
                f"but the trajectory has "
                f"{len(primal_solution.post_event_indices)} events"
            )
