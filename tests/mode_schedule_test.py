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

"""Tests for mode schedules and their manager."""

from absl.testing import absltest
from absl.testing import parameterized

from switchax.core import ModeSchedule, ModeScheduleManager, events_in_window


class ModeScheduleTest(parameterized.TestCase):

    def setUp(self):
        super().setUp()
        self.schedule = ModeSchedule(event_times=(0.5, 1.0), mode_sequence=(15, 6, 9))

    @parameterized.parameters(
        (0.0, 15),
        (0.5, 15),  # the mode before the switch at an event
        (0.7, 6),
        (1.0, 6),
        (2.0, 9),
    )
    def test_mode_at_time(self, time, mode):
        self.assertEqual(self.schedule.mode_at_time(time), mode)

    def test_event_times_in_window(self):
        self.assertEqual(self.schedule.event_times_in(0.0, 1.0), [0.5])
        self.assertEqual(self.schedule.event_times_in(0.5, 2.0), [1.0])
        self.assertEqual(self.schedule.num_events, 2)

    def test_events_in_window_excludes_bounds(self):
        self.assertEqual(events_in_window([0.0, 0.5, 0.5, 1.0], 0.0, 1.0), [0.5, 0.5])
        self.assertEqual(events_in_window([2.0], 0.0, 1.0), [])

    def test_default_schedule(self):
        schedule = ModeSchedule()
        self.assertEqual(schedule.num_events, 0)
        self.assertEqual(schedule.mode_at_time(3.0), 0)

    def test_invalid_schedules(self):
        with self.assertRaises(ValueError):
            ModeSchedule(event_times=(0.5,), mode_sequence=(1,))
        with self.assertRaises(ValueError):
            ModeSchedule(event_times=(1.0, 0.5), mode_sequence=(1, 2, 3))

    def test_sequences_are_tuples(self):
        schedule = ModeSchedule(event_times=[0.5], mode_sequence=[1, 2])
        self.assertEqual(schedule.event_times, (0.5,))
        self.assertEqual(schedule.mode_sequence, (1, 2))


class ModeScheduleManagerTest(absltest.TestCase):

    def test_replace_schedule(self):
        manager = ModeScheduleManager()
        self.assertEqual(manager.mode_at_time(1.0), 0)
        schedule = ModeSchedule(event_times=(0.5,), mode_sequence=(3, 4))
        manager.set_mode_schedule(schedule)
        self.assertIs(manager.get_mode_schedule(), schedule)
        self.assertEqual(manager.mode_at_time(1.0), 4)


if __name__ == '__main__':
    absltest.main()
