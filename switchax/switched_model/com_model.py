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

"""Centre-of-mass model and weight-compensating inputs."""

from dataclasses import dataclass
from typing import Sequence

import jax.numpy as jnp
from jax import Array

from switchax.switched_model.contact import NUM_CONTACT_POINTS, num_contacts
from switchax.switched_model.state import (
    INPUT_DIM,
    rotation_matrix_base_to_origin,
)


@dataclass(frozen=True)
class ComModel:
    """Lumped mass of the robot.

    Attributes:
        total_mass: Total robot mass [kg].
        gravity: Gravitational acceleration [m/s^2].
    """
    total_mass: float
    gravity: float = 9.81

    def __post_init__(self):
        if self.total_mass <= 0.0:
            raise ValueError(f"total_mass must be > 0, got {self.total_mass}")

    @property
    def weight(self) -> float:
        return self.total_mass * self.gravity


def weight_compensating_inputs(
    com_model: ComModel,
    contact_flags: Sequence[bool],
    orientation: Array,
) -> Array:
    """Inputs that carry the robot weight equally on all stance legs.

    Each stance leg gets the force [0, 0, m*g/n_stance] in the origin frame,
    rotated into the base frame. Swing legs and joint velocities are zero.

    Args:
        com_model: Mass model.
        contact_flags: (LF, RF, LH, RH) stance flags.
        orientation: Base euler XYZ angles.

    Returns:
        Input vector of shape (24,).
    """
    inputs = jnp.zeros(INPUT_DIM)
    n_stance = num_contacts(contact_flags)
    if n_stance == 0:
        return inputs

    force_in_origin = jnp.array([0.0, 0.0, com_model.weight / n_stance])
    force_in_base = rotation_matrix_base_to_origin(orientation).T @ force_in_origin
    for leg in range(NUM_CONTACT_POINTS):
        if contact_flags[leg]:
            inputs = inputs.at[3 * leg:3 * leg + 3].set(force_in_base)
    return inputs
