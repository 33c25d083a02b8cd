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

"""Core abstractions for switched-system trajectory optimization.

This module provides the fundamental data structures and type definitions:

- ModeSchedule / ModeScheduleManager: event times and active modes
- SystemDynamics: flow map and jump map of a switched system
- PrimalSolution / DualSolution: rollout trajectory and its multipliers
- Metrics / PerformanceIndex: evaluated costs and constraints
- OptimalControlProblem: named cost and constraint terms
"""

from switchax.core.types import (
    ScalarArray,
    TimeWindow,
    FlowMapFn,
    JumpMapFn,
    StateInputFn,
    StateFn,
    RolloutDivergenceError,
)

from switchax.core.mode_schedule import (
    ModeSchedule,
    ModeScheduleManager,
    events_in_window,
)

from switchax.core.system import SystemDynamics

from switchax.core.trajectory import PrimalSolution

from switchax.core.dual import (
    MultiplierCollection,
    DualSolution,
)

from switchax.core.metrics import (
    LagrangianMetrics,
    Metrics,
    MetricsCollection,
    PerformanceIndex,
    sum_penalties,
)

from switchax.core.problem import OptimalControlProblem

__all__ = [
    # Types
    'ScalarArray',
    'TimeWindow',
    'FlowMapFn',
    'JumpMapFn',
    'StateInputFn',
    'StateFn',
    'RolloutDivergenceError',
    # Mode schedule
    'ModeSchedule',
    'ModeScheduleManager',
    'events_in_window',
    # System
    'SystemDynamics',
    # Solutions
    'PrimalSolution',
    'MultiplierCollection',
    'DualSolution',
    # Metrics
    'LagrangianMetrics',
    'Metrics',
    'MetricsCollection',
    'PerformanceIndex',
    'sum_penalties',
    # Problem
    'OptimalControlProblem',
]
