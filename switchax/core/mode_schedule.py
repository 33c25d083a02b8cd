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

"""Mode schedule: ordered event times and the modes they separate."""

import bisect
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple


def events_in_window(event_times: Sequence[float], start: float, end: float) -> List[float]:
    """Return the event times strictly inside ``(start, end)``, in order.

    Events at the window bounds do not trigger a jump inside the window.
    """
    return [float(t) for t in event_times if start < t < end]


@dataclass(frozen=True)
class ModeSchedule:
    """Sequence of discrete modes bracketed by event times.

    Mode ``mode_sequence[i]`` is active on the interval
    ``(event_times[i-1], event_times[i]]``; the first mode extends to -inf
    and the last one to +inf.

    Attributes:
        event_times: Non-decreasing event (switching) times.
        mode_sequence: Mode labels, one more than the number of events.

    Example:
        >>> schedule = ModeSchedule(event_times=(0.5,), mode_sequence=(15, 6))
        >>> schedule.mode_at_time(0.2)
        15
        >>> schedule.mode_at_time(0.7)
        6
    """

    event_times: Tuple[float, ...] = ()
    mode_sequence: Tuple[int, ...] = (0,)

    def __post_init__(self):
        """Validate the schedule and freeze its sequences."""
        object.__setattr__(self, 'event_times',
                           tuple(float(t) for t in self.event_times))
        object.__setattr__(self, 'mode_sequence',
                           tuple(int(m) for m in self.mode_sequence))

        if len(self.mode_sequence) != len(self.event_times) + 1:
            raise ValueError(
                f"mode_sequence must have one more element than event_times, "
                f"got {len(self.mode_sequence)} modes and "
                f"{len(self.event_times)} events"
            )
        for t_prev, t_next in zip(self.event_times[:-1], self.event_times[1:]):
            if t_next < t_prev:
                raise ValueError(
                    f"event_times must be non-decreasing, got {self.event_times}"
                )

    @property
    def num_events(self) -> int:
        """Return the number of events."""
        return len(self.event_times)

    def mode_at_time(self, time: float) -> int:
        """Return the mode active at ``time``.

        At an exact event time the mode before the switch is returned.
        """
        index = bisect.bisect_left(self.event_times, time)
        return self.mode_sequence[index]

    def event_times_in(self, start: float, end: float) -> List[float]:
        """Return the event times strictly inside ``(start, end)``."""
        return events_in_window(self.event_times, start, end)


@dataclass
class ModeScheduleManager:
    """Long-lived owner of the active mode schedule.

    Consumers hold a reference to the manager and query it per call. The
    schedule is only ever replaced as a whole, so readers never observe a
    partially updated schedule.
    """

    mode_schedule: ModeSchedule = field(default_factory=ModeSchedule)

    def get_mode_schedule(self) -> ModeSchedule:
        return self.mode_schedule

    def set_mode_schedule(self, mode_schedule: ModeSchedule):
        self.mode_schedule = mode_schedule

    def mode_at_time(self, time: float) -> int:
        return self.mode_schedule.mode_at_time(time)
