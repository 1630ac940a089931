# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core definitions for broadcast ephemeris processing.

- **Constants**: physical constants per constellation ICD, system IDs,
  solver tolerances
- **Time**: time scales, timescale-tagged epochs built on cssrlib
  ``gtime_t``, broadcast time offsets
- **Data Structures**: satellite identifiers and navigation frame keys
- **Errors**: exception hierarchy shared by every module

Example Usage:
    >>> from pybrdc.core import *
    >>>
    >>> sv = SV.from_str("C03")
    >>> toc = Epoch.from_str("2020-06-25T00:00:00 BDT")
    >>> sv.constellation.timescale()
    <TimeScale.BDT: 'BDT'>
"""

from .constants import *
from .data_structures import *
from .errors import *
from .time import *
