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

"""Tests for augmented Lagrangian penalties."""

from absl.testing import absltest
from absl.testing import parameterized

import jax
import jax.numpy as jnp
from jax import config
import numpy as np

from switchax.penalties import (
    MULTIPLIER_FLOOR,
    ModifiedRelaxedBarrierPenalty,
    PenaltyConfig,
    QuadraticPenalty,
    SlacknessSquaredHingePenalty,
    get_penalty,
)

config.update('jax_enable_x64', True)


class ModifiedRelaxedBarrierPenaltyTest(parameterized.TestCase):

    def setUp(self):
        super().setUp()
        self.config = PenaltyConfig(scale=100.0, relaxation=0.01, step_size=0.5)
        self.penalty = ModifiedRelaxedBarrierPenalty(self.config)
        # v = h / (scale * l) equals the relaxation at this h for l = 1.
        self.h_switch = self.config.relaxation * self.config.scale

    def test_value_continuous_at_relaxation(self):
        l = jnp.array(1.0)
        eps = 1e-9
        below = self.penalty.value(0.0, l, self.h_switch - eps)
        above = self.penalty.value(0.0, l, self.h_switch + eps)
        self.assertAlmostEqual(float(below), float(above), places=6)

    def test_derivative_continuous_at_relaxation(self):
        l = jnp.array(1.0)
        eps = 1e-9
        below = self.penalty.derivative(0.0, l, self.h_switch - eps)
        above = self.penalty.derivative(0.0, l, self.h_switch + eps)
        self.assertAlmostEqual(float(below), float(above), places=6)

    @parameterized.parameters(-5.0, -0.5, 0.3, 1.5, 50.0)
    def test_derivative_matches_finite_difference(self, h):
        l = jnp.array(2.0)
        eps = 1e-6
        fd = (self.penalty.value(0.0, l, h + eps)
              - self.penalty.value(0.0, l, h - eps)) / (2 * eps)
        self.assertAlmostEqual(float(self.penalty.derivative(0.0, l, h)),
                               float(fd), places=5)

    def test_value_decreases_with_constraint_satisfaction(self):
        h = jnp.linspace(-10.0, 10.0, 41)
        l = jnp.ones_like(h)
        derivative = self.penalty.derivative(0.0, l, h)
        self.assertTrue(bool(jnp.all(derivative < 0.0)))
        self.assertTrue(bool(jnp.all(
            self.penalty.second_derivative(0.0, l, h) > 0.0)))

    def test_value_finite_for_large_violation(self):
        value = self.penalty.value(0.0, jnp.array(1.0), jnp.array(-1e3))
        self.assertTrue(bool(jnp.isfinite(value)))
        self.assertGreater(float(value), 0.0)

    def test_update_is_floored_when_strictly_satisfied(self):
        updated = self.penalty.update_multiplier(0.0, jnp.array(1.0), jnp.array(1e9))
        self.assertAlmostEqual(float(updated), MULTIPLIER_FLOOR)

    def test_update_is_floored_without_step_size(self):
        penalty = ModifiedRelaxedBarrierPenalty(PenaltyConfig(step_size=0.0))
        updated = penalty.update_multiplier(0.0, jnp.array(1.0), jnp.array(-1.0))
        self.assertAlmostEqual(float(updated), MULTIPLIER_FLOOR)

    def test_update_grows_multiplier_on_violation(self):
        l = jnp.array(1.0)
        updated = self.penalty.update_multiplier(0.0, l, jnp.array(-500.0))
        self.assertGreater(float(updated), float(l))

    def test_update_never_below_floor(self):
        h = jnp.linspace(-100.0, 100.0, 21)
        l = jnp.full_like(h, 0.5)
        updated = self.penalty.update_multiplier(0.0, l, h)
        self.assertTrue(bool(jnp.all(updated >= MULTIPLIER_FLOOR)))

    def test_nonpositive_multiplier_raises(self):
        with self.assertRaises(ValueError):
            self.penalty.value(0.0, jnp.array(0.0), jnp.array(1.0))
        with self.assertRaises(ValueError):
            self.penalty.update_multiplier(0.0, jnp.array(-1.0), jnp.array(1.0))

    def test_initial_multiplier(self):
        self.assertEqual(self.penalty.initialize_multiplier(), 1.0)

    def test_traceable(self):
        grad = jax.grad(lambda h: self.penalty.value(0.0, jnp.array(2.0), h))
        for h in (-3.0, 0.5, 10.0):
            self.assertAlmostEqual(
                float(grad(h)),
                float(self.penalty.derivative(0.0, jnp.array(2.0), h)), places=8)

        update = jax.jit(self.penalty.update_multiplier)
        np.testing.assert_allclose(
            update(0.0, jnp.array([1.0, 2.0]), jnp.array([-1.0, 3.0])),
            self.penalty.update_multiplier(
                0.0, jnp.array([1.0, 2.0]), jnp.array([-1.0, 3.0])))


class QuadraticPenaltyTest(absltest.TestCase):

    def test_value_and_derivatives(self):
        penalty = QuadraticPenalty(PenaltyConfig(scale=100.0))
        l, h = jnp.array(1.0), jnp.array(2.0)
        self.assertAlmostEqual(float(penalty.value(0.0, l, h)), 202.0)
        self.assertAlmostEqual(float(penalty.derivative(0.0, l, h)), 201.0)
        self.assertAlmostEqual(float(penalty.second_derivative(0.0, l, h)), 100.0)

    def test_update_is_signed(self):
        penalty = QuadraticPenalty(PenaltyConfig(scale=100.0, step_size=1.0))
        updated = penalty.update_multiplier(0.0, jnp.array(0.0), jnp.array(-1.0))
        self.assertAlmostEqual(float(updated), -100.0)
        self.assertEqual(penalty.initialize_multiplier(), 0.0)


class SlacknessSquaredHingePenaltyTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.penalty = SlacknessSquaredHingePenalty(
            PenaltyConfig(scale=100.0, step_size=1.0))

    def test_inactive_constraint(self):
        l, h = jnp.array(1.0), jnp.array(1.0)
        self.assertAlmostEqual(float(self.penalty.value(0.0, l, h)), -0.005)
        self.assertAlmostEqual(float(self.penalty.derivative(0.0, l, h)), 0.0)
        self.assertAlmostEqual(float(self.penalty.second_derivative(0.0, l, h)), 0.0)

    def test_active_constraint(self):
        l, h = jnp.array(1.0), jnp.array(-0.1)
        # max(0, 1 + 10)^2 - 1 over 200.
        self.assertAlmostEqual(float(self.penalty.value(0.0, l, h)), 0.6)
        self.assertAlmostEqual(float(self.penalty.derivative(0.0, l, h)), -11.0)
        self.assertAlmostEqual(float(self.penalty.second_derivative(0.0, l, h)), 100.0)

    def test_update_floor(self):
        updated = self.penalty.update_multiplier(0.0, jnp.array(1.0), jnp.array(5.0))
        self.assertAlmostEqual(float(updated), MULTIPLIER_FLOOR)
        self.assertEqual(self.penalty.initialize_multiplier(), MULTIPLIER_FLOOR)


class PenaltyFactoryTest(parameterized.TestCase):

    @parameterized.parameters(
        ('modified_relaxed_barrier', ModifiedRelaxedBarrierPenalty),
        ('Quadratic', QuadraticPenalty),
        ('slackness_squared_hinge', SlacknessSquaredHingePenalty),
    )
    def test_get_penalty(self, name, expected_type):
        config = PenaltyConfig(scale=10.0)
        penalty = get_penalty(name, config)
        self.assertIsInstance(penalty, expected_type)
        self.assertEqual(penalty.config, config)

    def test_unknown_penalty(self):
        with self.assertRaises(ValueError):
            get_penalty('log_barrier')

    @parameterized.parameters(
        dict(scale=0.0),
        dict(relaxation=-1.0),
        dict(step_size=-0.1),
    )
    def test_invalid_config(self, **kwargs):
        with self.assertRaises(ValueError):
            PenaltyConfig(**kwargs)

    def test_elementwise(self):
        penalty = get_penalty('modified_relaxed_barrier')
        h = jnp.array([-1.0, 0.0, 3.0])
        values = penalty.value(0.0, jnp.ones(3), h)
        np.testing.assert_allclose(
            values, [float(penalty.value(0.0, 1.0, hi)) for hi in h])


if __name__ == '__main__':
    absltest.main()
