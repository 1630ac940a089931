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
Broadcast ephemeris resolution.

Modules
-------
orbits : module
    Orbit parameter store and the broadcast field vocabulary
health : module
    Typed health flags and their interpretation
ephemeris : module
    Ephemeris model, accessors and validity policy
ephemeris_manager : module
    Ephemeris pool and per-satellite selection
kepler : module
    Keplerian elements extraction
solver : module
    Kepler solver and ECEF rotations (MEO, BeiDou GEO)
state_propagator : module
    GLONASS/SBAS Cartesian state extrapolation
clock : module
    Satellite clock polynomial, relativistic term and group delays
satellite_position : module
    Position/velocity resolution entry points

Usage Examples
--------------
    >>> from pybrdc.satellite import EphemerisManager
    >>> pool = EphemerisManager()
    >>> pool.add_ephemeris(key, eph)
    >>> toc, toe, eph = pool.select(sv, t)
    >>> state = eph.resolve_orbital_state(sv, toc, t)
    >>> dts = eph.clock_correction(sv, toc, t)

Notes
-----
Positions are Earth-Centered Earth-Fixed, in km; velocities in km/s.
Epochs may be given in any time scale, they are transposed internally.
"""

from .clock import *
from .ephemeris import *
from .ephemeris_manager import *
from .health import *
from .kepler import *
from .orbits import *
from .satellite_position import *
from .solver import KeplerSolution, solve_kepler
from .state_propagator import *
