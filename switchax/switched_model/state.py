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

"""Layout of the centroidal-kinematic (com-kino) state and input.

State (24):
    [0:3]   base orientation, euler angles XYZ
    [3:6]   base position in the origin frame
    [6:12]  base twist (angular, linear) in the base frame
    [12:24] joint positions, 3 per leg

Input (24):
    [0:12]  contact forces in the base frame, 3 per leg
    [12:24] joint velocities, 3 per leg
"""

import jax.numpy as jnp
from jax import Array

from switchax.switched_model.contact import NUM_CONTACT_POINTS

BASE_COORDINATE_SIZE = 6
JOINT_COORDINATE_SIZE = 3 * NUM_CONTACT_POINTS
STATE_DIM = 2 * BASE_COORDINATE_SIZE + JOINT_COORDINATE_SIZE
INPUT_DIM = 3 * NUM_CONTACT_POINTS + JOINT_COORDINATE_SIZE


def get_com_pose(state: Array) -> Array:
    """Return the base pose (orientation, position) of shape (6,)."""
    return state[0:BASE_COORDINATE_SIZE]


def get_orientation(pose: Array) -> Array:
    """Return the euler XYZ angles of a base pose."""
    return pose[0:3]


def get_position(pose: Array) -> Array:
    return pose[3:6]


def get_com_twist(state: Array) -> Array:
    return state[BASE_COORDINATE_SIZE:2 * BASE_COORDINATE_SIZE]


def get_joint_positions(state: Array) -> Array:
    return state[2 * BASE_COORDINATE_SIZE:STATE_DIM]


def rotation_matrix_base_to_origin(euler_xyz: Array) -> Array:
    """Rotation matrix of XYZ euler angles, R = Rx(a) @ Ry(b) @ Rz(c).

    Maps vectors expressed in the base frame to the origin frame.
    """
    a, b, c = euler_xyz[0], euler_xyz[1], euler_xyz[2]
    ca, sa = jnp.cos(a), jnp.sin(a)
    cb, sb = jnp.cos(b), jnp.sin(b)
    cc, sc = jnp.cos(c), jnp.sin(c)
    one, zero = jnp.ones_like(a), jnp.zeros_like(a)

    rx = jnp.array([[one, zero, zero], [zero, ca, -sa], [zero, sa, ca]])
    ry = jnp.array([[cb, zero, sb], [zero, one, zero], [-sb, zero, cb]])
    rz = jnp.array([[cc, -sc, zero], [sc, cc, zero], [zero, zero, one]])
    return rx @ ry @ rz
