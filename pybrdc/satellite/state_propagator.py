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

"""GLONASS and SBAS Cartesian state extrapolation"""

import logging

import numpy as np

from ..core.constants import Constellation
from ..core.errors import BadOperationError, MissingDataError
from ..core.time import Epoch

logger = logging.getLogger(__name__)

__all__ = ['propagate_state_km']


def propagate_state_km(eph, sv, toc: Epoch, epoch: Epoch) -> np.ndarray:
    """
    Extrapolate the broadcast Earth-fixed state of a GLONASS or SBAS satellite

    Second order Taylor expansion about the time of clock:
    r(t) = r0 + v0 dt + a0 dt^2 / 2, v(t) = v0 + a0 dt

    Parameters
    ----------
    eph : Ephemeris
        GLONASS/SBAS message carrying posX/Y/Z (km), velX/Y/Z (km/s) and
        optionally accelX/Y/Z (km/s^2)
    sv : SV
        Broadcasting satellite
    toc : Epoch
        Reference time of the state
    epoch : Epoch
        Target instant, any time scale

    Returns
    -------
    np.ndarray, shape (6,)
        [x, y, z, vx, vy, vz] in km and km/s

    Raises
    ------
    BadOperationError
        For Keplerian constellations
    MissingDataError
        When position or velocity is absent

    Notes
    -----
    This is a local extrapolation, only meaningful inside the validity
    window of the message (30 min for GLONASS, 1 day for SBAS).
    dt is counted forward from ToC, dt = epoch - toc.
    """
    if not (sv.constellation == Constellation.Glonass or sv.constellation.is_sbas()):
        raise BadOperationError(f"{sv}: Keplerian broadcast, use the Kepler solver")

    state = eph.geo_glonass_reference_pos_vel_km()
    try:
        accel = eph.geo_glonass_reference_accel_km()
    except MissingDataError:
        accel = np.zeros(3)

    dt = epoch - toc.to_time_scale(epoch.time_scale)
    logger.debug(f"{sv}: extrapolating broadcast state over {dt:.1f} s")

    pos0, vel0 = state[:3], state[3:]
    pos = pos0 + vel0 * dt + 0.5 * accel * dt ** 2
    vel = vel0 + accel * dt
    return np.concatenate([pos, vel])
