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

"""Augmented Lagrangian penalty functions.

Available penalties:
- ModifiedRelaxedBarrierPenalty: relaxed log barrier for h >= 0
- SlacknessSquaredHingePenalty: PHR quadratic penalty for h >= 0
- QuadraticPenalty: augmented Lagrangian for h = 0

Example:
    >>> from switchax.penalties import get_penalty, PenaltyConfig
    >>> penalty = get_penalty('modified_relaxed_barrier', PenaltyConfig(scale=10.0))
    >>> term = StateInputAugmentedLagrangian(torque_limit, penalty)
"""

from switchax.penalties.base import (
    AugmentedPenalty,
    PenaltyConfig,
    MULTIPLIER_FLOOR,
)
from switchax.penalties.modified_relaxed_barrier import ModifiedRelaxedBarrierPenalty
from switchax.penalties.quadratic import (
    QuadraticPenalty,
    SlacknessSquaredHingePenalty,
)
from switchax.penalties.augmented_lagrangian import (
    StateAugmentedLagrangian,
    StateInputAugmentedLagrangian,
)


def get_penalty(name: str, config: PenaltyConfig = PenaltyConfig()) -> AugmentedPenalty:
    """Factory function to create a penalty by name.

    Args:
        name: Penalty name ('modified_relaxed_barrier',
            'slackness_squared_hinge', 'quadratic').
        config: Shape parameters of the penalty.

    Returns:
        AugmentedPenalty instance.

    Raises:
        ValueError: If penalty name is not recognized.
    """
    _PENALTIES = {
        'modified_relaxed_barrier': ModifiedRelaxedBarrierPenalty,
        'slackness_squared_hinge': SlacknessSquaredHingePenalty,
        'quadratic': QuadraticPenalty,
    }

    name_lower = name.lower()
    if name_lower not in _PENALTIES:
        available = list(_PENALTIES.keys())
        raise ValueError(
            f"Unknown penalty: {name}. Available: {available}"
        )

    return _PENALTIES[name_lower](config)


__all__ = [
    'AugmentedPenalty',
    'PenaltyConfig',
    'MULTIPLIER_FLOOR',
    'ModifiedRelaxedBarrierPenalty',
    'QuadraticPenalty',
    'SlacknessSquaredHingePenalty',
    'StateAugmentedLagrangian',
    'StateInputAugmentedLagrangian',
    'get_penalty',
]
