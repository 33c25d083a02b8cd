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

"""Tests for the com-kino switched model and its initializer."""

from absl.testing import absltest
from absl.testing import parameterized

import jax.numpy as jnp
from jax import config
import numpy as np

from switchax.core import ModeSchedule
from switchax.switched_model import (
    INPUT_DIM,
    STATE_DIM,
    ComKinoInitializer,
    ComModel,
    SwitchedModelModeScheduleManager,
    contact_flags_to_mode_number,
    get_com_twist,
    get_joint_positions,
    get_orientation,
    get_position,
    mode_number_to_contact_flags,
    num_contacts,
    rotation_matrix_base_to_origin,
    weight_compensating_inputs,
)

config.update('jax_enable_x64', True)


class ContactTest(parameterized.TestCase):

    @parameterized.parameters(
        (15, (True, True, True, True)),
        (0, (False, False, False, False)),
        (8, (True, False, False, False)),
        (1, (False, False, False, True)),
        (6, (False, True, True, False)),
        (9, (True, False, False, True)),
    )
    def test_mode_encoding(self, mode, flags):
        self.assertEqual(mode_number_to_contact_flags(mode), flags)
        self.assertEqual(contact_flags_to_mode_number(flags), mode)

    def test_num_contacts(self):
        self.assertEqual(num_contacts(mode_number_to_contact_flags(6)), 2)
        self.assertEqual(num_contacts(mode_number_to_contact_flags(0)), 0)

    def test_invalid_modes(self):
        with self.assertRaises(ValueError):
            mode_number_to_contact_flags(16)
        with self.assertRaises(ValueError):
            contact_flags_to_mode_number((True, False))


class StateLayoutTest(absltest.TestCase):

    def test_accessors(self):
        state = jnp.arange(STATE_DIM, dtype=float)
        np.testing.assert_allclose(get_orientation(state), [0.0, 1.0, 2.0])
        np.testing.assert_allclose(get_position(state), [3.0, 4.0, 5.0])
        np.testing.assert_allclose(get_com_twist(state), jnp.arange(6.0, 12.0))
        np.testing.assert_allclose(get_joint_positions(state), jnp.arange(12.0, 24.0))

    def test_rotation_matrix(self):
        np.testing.assert_allclose(
            rotation_matrix_base_to_origin(jnp.zeros(3)), jnp.eye(3), atol=1e-12)

        rotation = rotation_matrix_base_to_origin(jnp.array([0.0, 0.0, jnp.pi / 2]))
        np.testing.assert_allclose(rotation @ jnp.array([1.0, 0.0, 0.0]),
                                   [0.0, 1.0, 0.0], atol=1e-12)

        rotation = rotation_matrix_base_to_origin(jnp.array([0.3, -0.2, 1.1]))
        np.testing.assert_allclose(rotation.T @ rotation, jnp.eye(3), atol=1e-12)
        self.assertAlmostEqual(float(jnp.linalg.det(rotation)), 1.0)


class WeightCompensationTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.com_model = ComModel(total_mass=20.0, gravity=10.0)

    def test_full_stance(self):
        inputs = weight_compensating_inputs(
            self.com_model, mode_number_to_contact_flags(15), jnp.zeros(3))
        forces = inputs[:12].reshape(4, 3)
        np.testing.assert_allclose(forces[:, 2], 50.0)
        np.testing.assert_allclose(forces[:, :2], 0.0, atol=1e-12)
        np.testing.assert_allclose(inputs[12:], 0.0)

    def test_swing_legs_carry_nothing(self):
        inputs = weight_compensating_inputs(
            self.com_model, mode_number_to_contact_flags(6), jnp.zeros(3))
        forces = inputs[:12].reshape(4, 3)
        np.testing.assert_allclose(forces[:, 2], [0.0, 100.0, 100.0, 0.0])

    def test_rotated_base(self):
        orientation = jnp.array([0.2, -0.1, 0.7])
        inputs = weight_compensating_inputs(
            self.com_model, mode_number_to_contact_flags(15), orientation)
        rotation = rotation_matrix_base_to_origin(orientation)
        np.testing.assert_allclose(rotation @ inputs[0:3], [0.0, 0.0, 50.0],
                                   atol=1e-10)

    def test_flight(self):
        inputs = weight_compensating_inputs(
            self.com_model, mode_number_to_contact_flags(0), jnp.zeros(3))
        np.testing.assert_allclose(inputs, jnp.zeros(INPUT_DIM))

    def test_invalid_mass(self):
        with self.assertRaises(ValueError):
            ComModel(total_mass=0.0)


class ComKinoInitializerTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.manager = SwitchedModelModeScheduleManager(
            ModeSchedule(event_times=(0.5,), mode_sequence=(15, 0)))
        self.initializer = ComKinoInitializer(ComModel(total_mass=40.0), self.manager)
        self.state = jnp.arange(STATE_DIM, dtype=float) / 10.0

    def test_contact_flags_from_schedule(self):
        self.assertEqual(self.manager.get_contact_flags(0.2), (True,) * 4)
        self.assertEqual(self.manager.get_contact_flags(0.7), (False,) * 4)

    def test_stance(self):
        inputs, next_state = self.initializer.compute(0.0, self.state, 0.1)
        self.assertEqual(inputs.shape, (INPUT_DIM,))
        self.assertEqual(next_state.shape, (STATE_DIM,))
        np.testing.assert_allclose(next_state[:6], self.state[:6])
        np.testing.assert_allclose(get_com_twist(next_state), jnp.zeros(6))
        np.testing.assert_allclose(get_joint_positions(next_state),
                                   get_joint_positions(self.state))
        rotation = rotation_matrix_base_to_origin(get_orientation(self.state))
        total_force = sum(rotation @ inputs[3 * leg:3 * leg + 3] for leg in range(4))
        np.testing.assert_allclose(total_force, [0.0, 0.0, 40.0 * 9.81], atol=1e-9)

    def test_no_contacts(self):
        inputs, next_state = self.initializer.compute(1.0, self.state, 1.1)
        np.testing.assert_allclose(inputs, jnp.zeros(INPUT_DIM))
        np.testing.assert_allclose(get_com_twist(next_state), jnp.zeros(6))

    def test_schedule_updates_are_seen(self):
        self.manager.set_mode_schedule(ModeSchedule(mode_sequence=(0,)))
        inputs, _ = self.initializer.compute(0.0, self.state, 0.1)
        np.testing.assert_allclose(inputs, jnp.zeros(INPUT_DIM))

    def test_wrong_state_dimension(self):
        with self.assertRaises(ValueError):
            self.initializer.compute(0.0, jnp.zeros(12), 0.1)


if __name__ == '__main__':
    absltest.main()
