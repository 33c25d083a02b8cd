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

"""Linear interpolation over time-stamped arrays.

Both functions are written with jax.numpy only so they can be traced inside
lax.scan during rollouts.
"""

from typing import Tuple

import jax.numpy as jnp
from jax import Array


def time_segment(times: Array, t: float) -> Tuple[Array, Array]:
    """Locates ``t`` in a non-decreasing time array.

    Args:
        times: Time stamps of shape (N,), N >= 1.
        t: Query time.

    Returns:
        (index, alpha) such that the interpolated value is
        ``alpha * v[index] + (1 - alpha) * v[index + 1]``. Queries outside
        the stamps are clamped to the end samples. At a duplicated stamp the
        later sample is selected.
    """
    n = times.shape[0]
    if n == 1:
        return jnp.array(0), jnp.array(1.0)

    index = jnp.searchsorted(times, t, side='right') - 1
    index = jnp.clip(index, 0, n - 2)
    t_left = times[index]
    t_right = times[index + 1]
    width = t_right - t_left
    safe_width = jnp.where(width > 0.0, width, 1.0)
    alpha = jnp.where(width > 0.0, (t_right - t) / safe_width, 0.0)
    return index, jnp.clip(alpha, 0.0, 1.0)


def interpolate(times: Array, values: Array, t: float) -> Array:
    """Linearly interpolates ``values`` (N, ...) at time ``t``."""
    if values.shape[0] == 1:
        return values[0]
    index, alpha = time_segment(times, t)
    return alpha * values[index] + (1.0 - alpha) * values[index + 1]
