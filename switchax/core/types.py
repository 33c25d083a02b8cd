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

"""Type definitions for switched-system trajectory optimization."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

from jax import Array


# Type aliases for common shapes
# State: (n,) array
# Input: (m,) array
# Time trajectories are plain sequences of floats; event times are duplicated
# (pre-jump and post-jump samples share the same time stamp).

ScalarArray = Sequence[float]
TimeWindow = Tuple[float, float]


# Function type protocols

class FlowMapFn(Protocol):
    """Protocol for continuous-time dynamics.

    Signature: flow_map(t, x, u) -> dx/dt

    Args:
        t: Time (scalar float)
        x: State vector (n,)
        u: Input vector (m,)

    Returns:
        dxdt: State derivative (n,)
    """
    def __call__(self, t: float, x: Array, u: Array) -> Array:
        ...


class JumpMapFn(Protocol):
    """Protocol for the discrete state transition at an event.

    Signature: jump_map(t, x_pre) -> x_post

    Args:
        t: Event time (scalar float)
        x: Pre-jump state vector (n,)

    Returns:
        x_post: Post-jump state vector (n,)
    """
    def __call__(self, t: float, x: Array) -> Array:
        ...


class StateInputFn(Protocol):
    """Protocol for cost/constraint terms evaluated on (t, x, u).

    Costs return a scalar, constraints return a vector (n_constraints,).
    """
    def __call__(self, t: float, x: Array, u: Array) -> Array:
        ...


class StateFn(Protocol):
    """Protocol for cost/constraint terms evaluated on (t, x).

    Used for state-only intermediate terms and for pre-jump and final terms.
    """
    def __call__(self, t: float, x: Array) -> Array:
        ...


class RolloutDivergenceError(RuntimeError):
    """Raised when a rollout produces a non-finite state.

    The trajectory written so far must not be used by the caller.

    Attributes:
        time_window: (start, end) of the failed rollout.
        final_state: The offending state, if available.
        time: Time at which the first non-finite state was detected.
    """

    def __init__(
        self,
        time_window: TimeWindow,
        final_state: Optional[Array] = None,
        time: Optional[float] = None,
    ):
        self.time_window = time_window
        self.final_state = final_state
        self.time = time
        message = (
            f"System became unstable during the rollout over "
            f"[{time_window[0]}, {time_window[1]}]."
        )
        if time is not None:
            message += f" First non-finite state at t={time}."
        super().__init__(message)
