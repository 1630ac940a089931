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

"""Observer-to-satellite geometry using cssrlib"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from cssrlib.gnss import ecef2pos, geodist, satazel

from ..core.errors import AlmanacError

__all__ = ['AzElRange', 'elevation_azimuth_range']

# Observers closer than this to the geocenter have no local frame (m)
_MIN_OBSERVER_RADIUS_M = 1.0


@dataclass(frozen=True)
class AzElRange:
    """Topocentric look angles and geometric range"""
    azimuth_deg: float
    elevation_deg: float
    range_km: float


def elevation_azimuth_range(sv_position_km: Sequence[float],
                            rx_position_km: Sequence[float]) -> AzElRange:
    """
    Azimuth, elevation and range of a satellite seen from an ECEF observer

    Parameters
    ----------
    sv_position_km : array_like
        Satellite ECEF position (km)
    rx_position_km : array_like
        Receiver ECEF position (km)

    Returns
    -------
    AzElRange
        Azimuth in [0, 360) deg clockwise from north, elevation in deg,
        geometric range in km (no Sagnac term)

    Raises
    ------
    AlmanacError
        When either position is not finite, the observer sits at the
        geocenter, or both positions coincide
    """
    rs = np.asarray(sv_position_km, dtype=float) * 1e3
    rr = np.asarray(rx_position_km, dtype=float) * 1e3

    if rs.shape != (3,) or rr.shape != (3,):
        raise AlmanacError("positions must be ECEF 3-vectors")
    if not (np.isfinite(rs).all() and np.isfinite(rr).all()):
        raise AlmanacError("non finite position")
    if np.linalg.norm(rr) < _MIN_OBSERVER_RADIUS_M:
        raise AlmanacError("observer at the geocenter has no local frame")

    range_m = float(np.linalg.norm(rs - rr))
    if range_m == 0.0:
        raise AlmanacError("satellite and observer positions coincide")

    _, los = geodist(rs, rr)
    az, el = satazel(ecef2pos(rr), los)

    return AzElRange(
        azimuth_deg=float(np.rad2deg(az)) % 360.0,
        elevation_deg=float(np.rad2deg(el)),
        range_km=range_m / 1e3,
    )
