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

"""Initial guess for the com-kino model.

The initializer proposes an input and a next state for the time interval
[time, next_time] before any optimization has run: the robot stands still,
its weight distributed over the legs in contact.
"""

from typing import Tuple

import jax.numpy as jnp
from jax import Array

from switchax.switched_model.com_model import ComModel, weight_compensating_inputs
from switchax.switched_model.mode_schedule_manager import (
    SwitchedModelModeScheduleManager,
)
from switchax.switched_model.state import (
    BASE_COORDINATE_SIZE,
    STATE_DIM,
    get_com_pose,
    get_joint_positions,
    get_orientation,
)


class ComKinoInitializer:
    """Weight-compensating initializer of the com-kino model.

    The mode schedule manager is shared, not copied, so schedule updates are
    seen by the initializer.

    Example:
        >>> initializer = ComKinoInitializer(ComModel(total_mass=50.0), manager)
        >>> u, x_next = initializer.compute(0.0, x, 0.1)
    """

    def __init__(
        self,
        com_model: ComModel,
        mode_schedule_manager: SwitchedModelModeScheduleManager,
    ):
        self.com_model = com_model
        self.mode_schedule_manager = mode_schedule_manager

    def compute(
        self,
        time: float,
        state: Array,
        next_time: float,
    ) -> Tuple[Array, Array]:
        """Computes the initial input and next state.

        Args:
            time: Start of the interval; selects the contact flags.
            state: Com-kino state of shape (24,).
            next_time: End of the interval (unused).

        Returns:
            Tuple (input, next_state). The next state keeps pose and joint
            positions and has zero twist.

        Raises:
            ValueError: If ``state`` does not have the com-kino dimension.
        """
        del next_time
        state = jnp.asarray(state)
        if state.shape != (STATE_DIM,):
            raise ValueError(
                f"Expected a com-kino state of shape ({STATE_DIM},), "
                f"got {state.shape}"
            )

        com_pose = get_com_pose(state)
        contact_flags = self.mode_schedule_manager.get_contact_flags(time)
        inputs = weight_compensating_inputs(
            self.com_model, contact_flags, get_orientation(com_pose))

        next_state = jnp.concatenate([
            com_pose,
            jnp.zeros(BASE_COORDINATE_SIZE, dtype=state.dtype),
            get_joint_positions(state),
        ])
        return inputs, next_state
