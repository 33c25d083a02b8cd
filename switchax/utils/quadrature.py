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

"""Quadrature over non-uniformly sampled time trajectories."""

from typing import Sequence

import jax.numpy as jnp


def trapezoidal_integration(
    times: Sequence[float],
    values: Sequence[float],
) -> float:
    """Integrates sampled values with the trapezoidal rule.

        Σ_{k=0}^{N-2} 0.5 (f_k + f_{k+1}) (t_{k+1} - t_k)

    Duplicated time stamps (events) contribute zero-width intervals.

    Args:
        times: Sample times of length N.
        values: Sample values of length N.

    Returns:
        The integral; 0.0 for fewer than two samples.

    Raises:
        ValueError: If the two sequences have different lengths.

    Example:
        >>> trapezoidal_integration([0.0, 1.0, 3.0], [0.0, 1.0, 3.0])
        4.5
    """
    if len(times) != len(values):
        raise ValueError(
            f"times and values must have the same length, "
            f"got {len(times)} and {len(values)}"
        )
    if len(times) < 2:
        return 0.0

    t = jnp.asarray(times, dtype=jnp.result_type(float))
    f = jnp.asarray(values, dtype=t.dtype)
    return float(jnp.sum(0.5 * (f[1:] + f[:-1]) * (t[1:] - t[:-1])))
