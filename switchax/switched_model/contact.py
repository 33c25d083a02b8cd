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

"""Contact flags of a four-legged robot and their mode encoding.

Legs are ordered LF, RF, LH, RH. A mode number packs the contact flags into
four bits with LF as the most significant bit:

    mode = 8*LF + 4*RF + 2*LH + RH

so mode 15 is full stance and mode 0 is flight.
"""

from typing import Sequence, Tuple

NUM_CONTACT_POINTS = 4

ContactFlags = Tuple[bool, bool, bool, bool]


def mode_number_to_contact_flags(mode: int) -> ContactFlags:
    """Decodes a mode number into (LF, RF, LH, RH) contact flags.

    Raises:
        ValueError: If the mode is outside [0, 15].
    """
    if not 0 <= mode < 2 ** NUM_CONTACT_POINTS:
        raise ValueError(f"Mode number must be in [0, 15], got {mode}")
    return tuple(
        bool(mode >> (NUM_CONTACT_POINTS - 1 - leg) & 1)
        for leg in range(NUM_CONTACT_POINTS))


def contact_flags_to_mode_number(contact_flags: Sequence[bool]) -> int:
    """Encodes (LF, RF, LH, RH) contact flags into a mode number."""
    if len(contact_flags) != NUM_CONTACT_POINTS:
        raise ValueError(
            f"Expected {NUM_CONTACT_POINTS} contact flags, got {len(contact_flags)}"
        )
    mode = 0
    for flag in contact_flags:
        mode = (mode << 1) | int(bool(flag))
    return mode


def num_contacts(contact_flags: Sequence[bool]) -> int:
    return sum(1 for flag in contact_flags if flag)
