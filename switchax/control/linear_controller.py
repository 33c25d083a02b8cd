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

"""Time-varying affine feedback controller and its line-search update."""

from dataclasses import dataclass
from typing import Optional, Sequence

import jax.numpy as jnp
from jax import Array

from switchax.utils.interpolation import time_segment
from switchax.utils.quadrature import trapezoidal_integration


@dataclass(frozen=True)
class LinearController:
    """Affine control law u(t, x) = K(t) x + b(t).

    Gains and biases are stored at the controller time stamps and linearly
    interpolated in between. Outside the stamps the first or last sample is
    used; at a duplicated stamp (an event) the later sample is used.

    The controller is an immutable value. A proposed update is carried in
    ``delta_biases`` and turned into a new controller by
    ``increment_controller``.

    Attributes:
        time_stamps: Non-decreasing sample times of shape (N,).
        gains: Feedback gains of shape (N, m, n).
        biases: Feedforward biases of shape (N, m).
        delta_biases: Proposed bias increments of shape (N, m), or None.

    Example:
        >>> controller = LinearController(
        ...     time_stamps=jnp.array([0.0, 1.0]),
        ...     gains=jnp.zeros((2, 1, 2)),
        ...     biases=jnp.array([[0.0], [1.0]]),
        ... )
        >>> u = controller.compute_input(0.5, jnp.zeros(2))  # [0.5]
    """

    time_stamps: Array
    gains: Array
    biases: Array
    delta_biases: Optional[Array] = None

    def __post_init__(self):
        """Validate that all arrays share the time-stamp length."""
        time_stamps = jnp.asarray(self.time_stamps, dtype=jnp.result_type(float))
        gains = jnp.asarray(self.gains, dtype=time_stamps.dtype)
        biases = jnp.asarray(self.biases, dtype=time_stamps.dtype)
        object.__setattr__(self, 'time_stamps', time_stamps)
        object.__setattr__(self, 'gains', gains)
        object.__setattr__(self, 'biases', biases)

        n = time_stamps.shape[0]
        if time_stamps.ndim != 1:
            raise ValueError(
                f"time_stamps must be 1-D, got shape {time_stamps.shape}"
            )
        if gains.ndim != 3 or gains.shape[0] != n:
            raise ValueError(
                f"gains must have shape ({n}, m, n), got {gains.shape}"
            )
        if biases.ndim != 2 or biases.shape != gains.shape[:2]:
            raise ValueError(
                f"biases must have shape {gains.shape[:2]}, got {biases.shape}"
            )
        if self.delta_biases is not None:
            delta_biases = jnp.asarray(self.delta_biases, dtype=time_stamps.dtype)
            object.__setattr__(self, 'delta_biases', delta_biases)
            if delta_biases.shape != biases.shape:
                raise ValueError(
                    f"delta_biases must have shape {biases.shape}, "
                    f"got {delta_biases.shape}"
                )

    @classmethod
    def zeros(
        cls,
        time_stamps: Sequence[float],
        state_dim: int,
        input_dim: int,
    ) -> 'LinearController':
        """Creates a controller returning zero input everywhere."""
        n = len(time_stamps)
        return cls(
            time_stamps=jnp.asarray(time_stamps),
            gains=jnp.zeros((n, input_dim, state_dim)),
            biases=jnp.zeros((n, input_dim)),
        )

    @classmethod
    def feedforward(
        cls,
        time_stamps: Sequence[float],
        inputs: Array,
        state_dim: int,
    ) -> 'LinearController':
        """Creates an open-loop controller replaying ``inputs`` (N, m)."""
        inputs = jnp.asarray(inputs)
        return cls(
            time_stamps=jnp.asarray(time_stamps),
            gains=jnp.zeros((inputs.shape[0], inputs.shape[1], state_dim)),
            biases=inputs,
        )

    @property
    def state_dim(self) -> int:
        """Return the state dimension n."""
        return self.gains.shape[2]

    @property
    def input_dim(self) -> int:
        """Return the input dimension m."""
        return self.gains.shape[1]

    def size(self) -> int:
        """Return the number of time stamps."""
        return self.time_stamps.shape[0]

    def is_empty(self) -> bool:
        return self.size() == 0

    def clear(self) -> 'LinearController':
        """Return an empty controller with the same dimensions."""
        return LinearController(
            time_stamps=jnp.zeros(0),
            gains=jnp.zeros((0, self.input_dim, self.state_dim)),
            biases=jnp.zeros((0, self.input_dim)),
        )

    def compute_input(self, t: float, x: Array) -> Array:
        """Evaluates the control law at (t, x).

        Raises:
            ValueError: If the controller is empty.
        """
        if self.is_empty():
            raise ValueError("Cannot evaluate an empty controller.")
        if self.size() == 1:
            return self.gains[0] @ x + self.biases[0]

        index, alpha = time_segment(self.time_stamps, t)
        gain = alpha * self.gains[index] + (1.0 - alpha) * self.gains[index + 1]
        bias = alpha * self.biases[index] + (1.0 - alpha) * self.biases[index + 1]
        return gain @ x + bias


def increment_controller(
    step_length: float,
    unoptimized_controller: LinearController,
) -> LinearController:
    """Applies a step of the proposed bias update.

    The returned controller shares the time stamps and gains of
    ``unoptimized_controller`` and has biases

        b_k + step_length * delta_k

    The baseline is left untouched, so several step lengths may be tried
    concurrently from the same baseline.

    Args:
        step_length: Line-search step length, typically in [0, 1].
        unoptimized_controller: Baseline carrying ``delta_biases``.

    Returns:
        New LinearController without ``delta_biases``.

    Raises:
        ValueError: If the baseline has no ``delta_biases``.
    """
    if unoptimized_controller.delta_biases is None:
        raise ValueError("The unoptimized controller carries no delta_biases.")

    return LinearController(
        time_stamps=unoptimized_controller.time_stamps,
        gains=unoptimized_controller.gains,
        biases=(unoptimized_controller.biases
                + step_length * unoptimized_controller.delta_biases),
    )


def compute_controller_update_is(controller: LinearController) -> float:
    """Integral of the squared norm of the proposed bias update.

    Uses the trapezoidal rule over the controller's own time stamps. This is
    independent of the step length and is used by the line search to judge
    the size of the update.

    Returns:
        The integral; 0.0 for controllers with fewer than two samples or
        without ``delta_biases``.
    """
    if controller.delta_biases is None or controller.size() < 2:
        return 0.0
    squared_norms = jnp.sum(controller.delta_biases ** 2, axis=1)
    return trapezoidal_integration(controller.time_stamps, squared_norms)
