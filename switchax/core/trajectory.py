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

"""Primal solution: the trajectory produced by a hybrid rollout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from jax import Array

from switchax.core.mode_schedule import ModeSchedule

if TYPE_CHECKING:
    from switchax.control.linear_controller import LinearController


@dataclass
class PrimalSolution:
    """Container for a rolled-out switched trajectory.

    The rollout engine writes into this object; the caller owns it. Event
    times appear twice in ``time_trajectory``: once for the pre-jump sample
    and once for the post-jump sample, whose index is stored in
    ``post_event_indices``.

    Attributes:
        time_trajectory: Sample times t_0 <= t_1 <= ... <= t_N.
        state_trajectory: State at each sample, each of shape (n,).
        input_trajectory: Input at each sample, each of shape (m,).
        post_event_indices: Index of the post-jump sample of every event.
        mode_schedule: Mode schedule used for the rollout.
        controller: Controller used for the rollout.

    Example:
        >>> primal = PrimalSolution()
        >>> rollout_trajectory(rollout, (0.0, 1.0), x0, schedule, primal)
        >>> x_final = primal.final_state
    """

    time_trajectory: List[float] = field(default_factory=list)
    state_trajectory: List[Array] = field(default_factory=list)
    input_trajectory: List[Array] = field(default_factory=list)
    post_event_indices: List[int] = field(default_factory=list)
    mode_schedule: ModeSchedule = field(default_factory=ModeSchedule)
    controller: Optional['LinearController'] = None

    def __len__(self) -> int:
        return len(self.time_trajectory)

    @property
    def final_time(self) -> float:
        """Return the last sample time."""
        return self.time_trajectory[-1]

    @property
    def final_state(self) -> Array:
        """Return the last sample state."""
        return self.state_trajectory[-1]

    def clear(self):
        """Drop all samples and events, keeping the controller."""
        self.time_trajectory = []
        self.state_trajectory = []
        self.input_trajectory = []
        self.post_event_indices = []
        self.mode_schedule = ModeSchedule()

    def validate(self):
        """Check the structural invariants of the trajectory.

        Raises:
            ValueError: If the trajectories have different lengths or the
                post-event indices are not strictly increasing in [1, N-1].
        """
        n = len(self.time_trajectory)
        if len(self.state_trajectory) != n or len(self.input_trajectory) != n:
            raise ValueError(
                f"Trajectory lengths differ: {n} times, "
                f"{len(self.state_trajectory)} states, "
                f"{len(self.input_trajectory)} inputs"
            )
        previous = 0
        for index in self.post_event_indices:
            if index <= previous or index > n - 1:
                raise ValueError(
                    f"post_event_indices must be strictly increasing in "
                    f"[1, {n - 1}], got {self.post_event_indices}"
                )
            previous = index

    def partition_bounds(self) -> List[Tuple[int, int]]:
        """Return (begin, end) index pairs of the continuous segments.

        ``end`` is exclusive, so ``time_trajectory[begin:end]`` is one
        segment between two events.
        """
        if not self.time_trajectory:
            return []
        starts = [0] + list(self.post_event_indices)
        ends = list(self.post_event_indices) + [len(self.time_trajectory)]
        return list(zip(starts, ends))
