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

"""
PyBRDC - GNSS broadcast ephemeris resolution library

Resolves satellite position, velocity and clock offset from decoded
broadcast navigation messages (GPS, Galileo, BeiDou, QZSS, IRNSS, GLONASS
and SBAS). Inspired by RTKLIB and the constellation ICDs.
"""

__version__ = "1.0.0"
__author__ = "PyINS Development Team"
__title__ = "pybrdc"
__description__ = "GNSS broadcast ephemeris orbit and clock resolution"

from . import logger
from .core import *
from .satellite import *
from .gnss import *
