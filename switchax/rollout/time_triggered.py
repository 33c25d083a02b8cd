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

"""Time-triggered rollout of switched systems.

The rollout integrates the closed-loop dynamics between scheduled events and
applies the jump map at every event inside the time window:

    x(t) = x(t_i+) + ∫_{t_i}^{t} flow_map(s, x, controller(s, x)) ds
    x(t_{i+1}+) = jump_map(t_{i+1}, x(t_{i+1}-))

Both the pre-jump and the post-jump sample are stored, with the same time
stamp; the index of the post-jump sample is recorded as a post-event index.
"""

import math
from typing import List, NamedTuple, Optional, Sequence

from absl import logging
import jax
import jax.numpy as jnp
from jax import Array, lax

from switchax.config import RolloutSettings
from switchax.control.linear_controller import LinearController
from switchax.core.mode_schedule import ModeSchedule, events_in_window
from switchax.core.system import SystemDynamics
from switchax.core.trajectory import PrimalSolution
from switchax.core.types import RolloutDivergenceError, TimeWindow
from switchax.rollout.integrators import get_integrator

# Segments shorter than this fraction of a step do not get an extra step.
_STEP_TOLERANCE = 1e-9


class RolloutResult(NamedTuple):
    """Output of a single rollout."""
    final_state: Array
    time_trajectory: List[float]
    post_event_indices: List[int]
    state_trajectory: List[Array]
    input_trajectory: List[Array]


def _num_steps(duration: float, time_step: float) -> int:
    return max(1, math.ceil(duration / time_step - _STEP_TOLERANCE))


class TimeTriggeredRollout:
    """Fixed-step rollout with jumps at scheduled event times.

    The rollout holds only the dynamics and immutable settings, so a single
    instance may serve concurrent rollouts as long as each call writes into
    its own outputs.

    Example:
        >>> system = SystemDynamics(flow_map=lambda t, x, u: -x + u)
        >>> rollout = TimeTriggeredRollout(system, RolloutSettings(time_step=0.01))
        >>> controller = LinearController.zeros([0.0, 1.0], 1, 1)
        >>> result = rollout.run(0.0, jnp.ones(1), 1.0, controller, [])
        >>> result.final_state  # ≈ exp(-1)
    """

    def __init__(
        self,
        system: SystemDynamics,
        settings: Optional[RolloutSettings] = None,
    ):
        self.system = system
        self.settings = settings or RolloutSettings()
        self._integrator = get_integrator(self.settings.integrator)

    def run(
        self,
        init_time: float,
        init_state: Array,
        final_time: float,
        controller: LinearController,
        event_times: Sequence[float],
    ) -> RolloutResult:
        """Rolls out the closed-loop system over [init_time, final_time].

        Args:
            init_time: Start of the time window.
            init_state: State at ``init_time``.
            final_time: End of the time window.
            controller: Control law evaluated at every integration stage.
            event_times: Event times; only those strictly inside the window
                trigger a jump.

        Returns:
            RolloutResult with the stored samples and post-event indices.

        Raises:
            ValueError: If the window is reversed or the controller is empty.
            RuntimeError: If the rollout needs more than ``max_num_steps``.
            RolloutDivergenceError: If a non-finite state is produced and
                ``check_numerical_stability`` is set.
        """
        if final_time < init_time:
            raise ValueError(
                f"final_time ({final_time}) must be >= init_time ({init_time})"
            )
        if controller is None or controller.is_empty():
            raise ValueError("The rollout requires a non-empty controller.")

        events = events_in_window(event_times, init_time, final_time)
        boundaries = [float(init_time)] + events + [float(final_time)]
        segments = list(zip(boundaries[:-1], boundaries[1:]))
        steps = [_num_steps(t1 - t0, self.settings.time_step) for t0, t1 in segments]
        if sum(steps) > self.settings.max_num_steps:
            raise RuntimeError(
                f"Rollout over [{init_time}, {final_time}] needs {sum(steps)} "
                f"steps, exceeding max_num_steps={self.settings.max_num_steps}."
            )

        def closed_loop(t, x):
            return self.system.compute_flow_map(t, x, controller.compute_input(t, x))

        step = self._integrator(closed_loop)

        time_trajectory: List[float] = []
        state_trajectory: List[Array] = []
        post_event_indices: List[int] = []

        x = jnp.asarray(init_state, dtype=jnp.result_type(float))
        for i, ((t0, t1), num_steps) in enumerate(zip(segments, steps)):
            dt = (t1 - t0) / num_steps
            times = [t0 + k * dt for k in range(num_steps)] + [t1]

            def body(x, t, dt=dt):
                x_next = step(t, x, dt)
                return x_next, x_next

            _, X_rest = lax.scan(body, x, jnp.asarray(times[:-1]))
            time_trajectory.extend(times)
            state_trajectory.append(x)
            state_trajectory.extend(list(X_rest))

            if self.settings.check_numerical_stability:
                self._check_finite(init_time, final_time, times, X_rest)

            x = state_trajectory[-1]
            if i < len(segments) - 1:
                post_event_indices.append(len(time_trajectory))
                x = self.system.compute_jump_map(t1, x)

        input_trajectory = list(jax.vmap(controller.compute_input)(
            jnp.asarray(time_trajectory), jnp.stack(state_trajectory)))

        logging.debug(
            'Rollout over [%s, %s]: %d samples, %d events.',
            init_time, final_time, len(time_trajectory), len(post_event_indices))

        return RolloutResult(
            final_state=state_trajectory[-1],
            time_trajectory=time_trajectory,
            post_event_indices=post_event_indices,
            state_trajectory=state_trajectory,
            input_trajectory=input_trajectory,
        )

    @staticmethod
    def _check_finite(init_time, final_time, times, X_rest):
        finite = jnp.all(jnp.isfinite(X_rest), axis=1)
        if bool(jnp.all(finite)):
            return
        first = int(jnp.argmin(finite))
        logging.warning(
            'Non-finite state at t=%s during rollout over [%s, %s].',
            times[first + 1], init_time, final_time)
        raise RolloutDivergenceError(
            (init_time, final_time), final_state=X_rest[first], time=times[first + 1])


def rollout_trajectory(
    rollout: TimeTriggeredRollout,
    time_window: TimeWindow,
    init_state: Array,
    mode_schedule: ModeSchedule,
    primal_solution: PrimalSolution,
) -> float:
    """Rolls out ``primal_solution.controller`` and stores the trajectory.

    Args:
        rollout: Rollout engine.
        time_window: (start, end) of the rollout.
        init_state: State at the start of the window.
        mode_schedule: Schedule whose event times trigger the jumps.
        primal_solution: Output; its ``controller`` is rolled out and all
            trajectories, post-event indices and the schedule are overwritten.

    Returns:
        Average time step (end - start) / number of samples.

    Raises:
        RolloutDivergenceError: If the final state has a non-finite component.
    """
    start, end = time_window
    result = rollout.run(start, init_state, end, primal_solution.controller,
                         mode_schedule.event_times)
    primal_solution.mode_schedule = mode_schedule
    primal_solution.time_trajectory = result.time_trajectory
    primal_solution.state_trajectory = result.state_trajectory
    primal_solution.input_trajectory = result.input_trajectory
    primal_solution.post_event_indices = result.post_event_indices

    if not bool(jnp.all(jnp.isfinite(result.final_state))):
        logging.warning('Rollout over [%s, %s] diverged.', start, end)
        raise RolloutDivergenceError(time_window, final_state=result.final_state,
                                     time=end)

    average_time_step = (end - start) / len(primal_solution.time_trajectory)
    logging.debug('Average rollout time step: %s', average_time_step)
    return average_time_step
