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

"""Building blocks of augmented Lagrangian solvers for switched systems.

- compute_rollout_metrics: cost and constraint terms along a rollout
- compute_rollout_performance_index: reduces metrics to a PerformanceIndex
- initialize_dual_solution / update_dual_solution: multiplier bookkeeping
- line_search: backtracking search along a controller update

Example:
    >>> from switchax.solvers import compute_rollout_metrics
    >>> metrics = compute_rollout_metrics(problem, primal, dual)
    >>> index = compute_rollout_performance_index(primal.time_trajectory, metrics)
"""

from switchax.solvers.helpers import (
    LineSearchResult,
    compute_rollout_metrics,
    compute_rollout_performance_index,
    initialize_dual_solution,
    update_dual_solution,
    line_search,
)

__all__ = [
    # Metrics
    'compute_rollout_metrics',
    'compute_rollout_performance_index',
    # Multipliers
    'initialize_dual_solution',
    'update_dual_solution',
    # Line search
    'LineSearchResult',
    'line_search',
]
