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

"""Tests for configuration classes."""

from absl.testing import absltest

import jax.numpy as jnp
from jax import config

from switchax.config import LineSearchSettings, RolloutSettings, Settings
from switchax.penalties import (
    ModifiedRelaxedBarrierPenalty,
    PenaltyConfig,
    QuadraticPenalty,
    StateAugmentedLagrangian,
)

config.update('jax_enable_x64', True)


class SettingsTest(absltest.TestCase):

    def test_defaults(self):
        settings = Settings()
        self.assertEqual(settings.rollout.integrator, 'rk4')
        self.assertEqual(settings.penalty_type, 'modified_relaxed_barrier')
        self.assertIsInstance(settings.penalty, PenaltyConfig)

    def test_from_dict(self):
        settings = Settings.from_dict({
            'rollout': {'time_step': 0.05, 'integrator': 'euler'},
            'line_search': {'contraction_rate': 0.25},
            'penalty': {'scale': 10.0},
            'penalty_type': 'quadratic',
        })
        self.assertIsInstance(settings.rollout, RolloutSettings)
        self.assertEqual(settings.rollout.time_step, 0.05)
        self.assertIsInstance(settings.line_search, LineSearchSettings)
        self.assertEqual(settings.line_search.contraction_rate, 0.25)
        self.assertEqual(settings.penalty.scale, 10.0)
        self.assertEqual(settings.penalty_type, 'quadratic')

    def test_make_penalty(self):
        penalty = Settings().make_penalty()
        self.assertIsInstance(penalty, ModifiedRelaxedBarrierPenalty)

        settings = Settings.from_dict({
            'penalty': {'scale': 2.0},
            'penalty_type': 'quadratic',
        })
        penalty = settings.make_penalty()
        self.assertIsInstance(penalty, QuadraticPenalty)
        self.assertEqual(penalty.config.scale, 2.0)

        term = StateAugmentedLagrangian(lambda t, x: x, settings.make_penalty())
        x = jnp.array([1.0, 2.0])
        metrics = term.get_value(0.0, x, term.initialize_lagrangian(0.0, x))
        self.assertAlmostEqual(metrics.penalty, 5.0)

    def test_unknown_penalty_type(self):
        with self.assertRaises(ValueError):
            Settings(penalty_type='log_barrier')

    def test_invalid_rollout_settings(self):
        with self.assertRaises(ValueError):
            RolloutSettings(time_step=0.0)
        with self.assertRaises(ValueError):
            RolloutSettings(max_num_steps=0)
        with self.assertRaises(ValueError):
            Settings.from_dict({'penalty': {'relaxation': 0.0}})


if __name__ == '__main__':
    absltest.main()
