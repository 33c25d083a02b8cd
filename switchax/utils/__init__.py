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

"""Numerical utilities over sampled time trajectories.

- Trapezoidal quadrature with duplicated event time stamps
- Piecewise-linear interpolation of stamped samples
"""

from switchax.utils.quadrature import trapezoidal_integration

from switchax.utils.interpolation import (
    time_segment,
    interpolate,
)

__all__ = [
    'trapezoidal_integration',
    'time_segment',
    'interpolate',
]
