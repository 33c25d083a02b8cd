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

"""Switched model of a four-legged robot in com-kino coordinates.

- Contact flags and their mode encoding
- State and input layout with accessors
- ComModel and weight-compensating inputs
- ComKinoInitializer: standing initial guess from the mode schedule
"""

from switchax.switched_model.contact import (
    NUM_CONTACT_POINTS,
    ContactFlags,
    mode_number_to_contact_flags,
    contact_flags_to_mode_number,
    num_contacts,
)
from switchax.switched_model.state import (
    BASE_COORDINATE_SIZE,
    JOINT_COORDINATE_SIZE,
    STATE_DIM,
    INPUT_DIM,
    get_com_pose,
    get_orientation,
    get_position,
    get_com_twist,
    get_joint_positions,
    rotation_matrix_base_to_origin,
)
from switchax.switched_model.com_model import (
    ComModel,
    weight_compensating_inputs,
)
from switchax.switched_model.mode_schedule_manager import (
    SwitchedModelModeScheduleManager,
)
from switchax.switched_model.initializer import ComKinoInitializer

__all__ = [
    # Contacts
    'NUM_CONTACT_POINTS',
    'ContactFlags',
    'mode_number_to_contact_flags',
    'contact_flags_to_mode_number',
    'num_contacts',
    # State layout
    'BASE_COORDINATE_SIZE',
    'JOINT_COORDINATE_SIZE',
    'STATE_DIM',
    'INPUT_DIM',
    'get_com_pose',
    'get_orientation',
    'get_position',
    'get_com_twist',
    'get_joint_positions',
    'rotation_matrix_base_to_origin',
    # Model
    'ComModel',
    'weight_compensating_inputs',
    'SwitchedModelModeScheduleManager',
    'ComKinoInitializer',
]
