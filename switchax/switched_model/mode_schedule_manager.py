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

"""Mode schedule manager that reports contact flags."""

from switchax.core.mode_schedule import ModeScheduleManager
from switchax.switched_model.contact import (
    ContactFlags,
    mode_number_to_contact_flags,
)


class SwitchedModelModeScheduleManager(ModeScheduleManager):
    """ModeScheduleManager whose modes are contact-flag encodings."""

    def get_contact_flags(self, time: float) -> ContactFlags:
        """Return the (LF, RF, LH, RH) contact flags active at ``time``."""
        return mode_number_to_contact_flags(self.mode_at_time(time))
