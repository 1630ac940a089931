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

"""Satellite clock computation and correction"""

import logging
from typing import Tuple

from ..core.constants import (DEFAULT_MAX_ITERATION, FREQ_E5b, FREQ_L1,
                              FREQ_L2, FREQ_L5, Constellation)
from ..core.errors import MissingDataError, NotSupportedError
from ..core.time import Epoch
from . import solver

logger = logging.getLogger(__name__)

__all__ = [
    'clock_correction', 'relativistic_clock_correction',
    'total_clock_correction', 'group_delay_correction',
]


def clock_correction(eph, sv, toc: Epoch, epoch: Epoch,
                     max_iter: int = DEFAULT_MAX_ITERATION) -> float:
    """
    Compute satellite clock offset from the broadcast polynomial

    Parameters:
    -----------
    eph : Ephemeris
        Broadcast message (a0, a1, a2)
    sv : SV
        Satellite
    toc : Epoch
        Time of clock
    epoch : Epoch
        Time of interest
    max_iter : int
        Number of refinement passes

    Returns:
    --------
    float
        Clock offset (s)

    Notes:
    ------
    Both instants are moved to the satellite's time scale, then
    dt <- dt - (a0 + a1 dt + a2 dt^2) is applied exactly ``max_iter``
    times starting from dt = epoch - toc, turning the receiver-side
    epoch into satellite time before the final evaluation.
    """
    time_scale = sv.constellation.timescale()
    if time_scale is None:
        raise NotSupportedError(sv.constellation)

    t_sv = epoch.to_time_scale(time_scale)
    toc_sv = toc.to_time_scale(time_scale)

    a0, a1, a2 = eph.clock_bias_drift_driftrate()
    dt = t_sv - toc_sv

    for _ in range(max_iter):
        dt -= a0 + a1 * dt + a2 * dt ** 2

    return a0 + a1 * dt + a2 * dt ** 2


def relativistic_clock_correction(eph, sv, epoch: Epoch,
                                  max_iteration: int = DEFAULT_MAX_ITERATION) -> Tuple[float, float]:
    """
    Relativistic clock term F e sqrt(A) sin(E) and its rate

    Returns:
    --------
    dtr : float
        Correction (s)
    dtr_dot : float
        Rate (s/s)
    """
    kep = eph.to_keplerian(sv)
    solution = solver.solve(kep, sv, epoch, max_iteration, eph.get('adot'))
    return solution.dtr_s, solution.dtr_dot_s_s


def total_clock_correction(eph, sv, toc: Epoch, epoch: Epoch,
                           max_iteration: int = DEFAULT_MAX_ITERATION) -> float:
    """Polynomial plus relativistic clock offset (s)

    GLONASS and SBAS messages carry no Keplerian elements, only the
    polynomial applies to them.
    """
    dts = clock_correction(eph, sv, toc, epoch, max_iteration)
    if sv.constellation == Constellation.Glonass or sv.constellation.is_sbas():
        return dts
    dtr, _ = relativistic_clock_correction(eph, sv, epoch, max_iteration)
    return dts + dtr


def group_delay_correction(eph, sv, freq_idx: int = 0) -> float:
    """
    Broadcast group delay for a single-frequency user

    Parameters:
    -----------
    eph : Ephemeris
        Broadcast message
    sv : SV
        Satellite
    freq_idx : int
        0: L1/E1/B1I, 1: L2/E5b/B2I, 2: L5/E5a/B3I

    Returns:
    --------
    float
        Delay to subtract from the satellite clock offset (s)

    Notes:
    ------
    GPS/QZSS/IRNSS: TGD on L1, scaled by gamma = (f1/f2)^2 on L2.
    Galileo: BGD(E1,E5a) on E1 and E5a, BGD(E1,E5b) on E5b, scaled
    to the second frequency like GPS.
    BeiDou D1/D2: TGD1 (B1I-B3I) on B1I, TGD2 (B2I-B3I) on B2I, zero
    on the B3I reference.
    """
    constellation = sv.constellation

    if constellation in (Constellation.GPS, Constellation.QZSS, Constellation.IRNSS):
        tgd = eph.total_group_delay()
        if freq_idx == 0:
            return tgd
        if freq_idx == 1:
            return tgd * (FREQ_L1 / FREQ_L2) ** 2
        raise ValueError(f"no broadcast group delay for frequency index {freq_idx}")

    if constellation == Constellation.Galileo:
        if freq_idx == 0:
            return eph.get_orbit_field_f64('bgdE5aE1')
        if freq_idx == 1:
            return eph.get_orbit_field_f64('bgdE5bE1') * (FREQ_L1 / FREQ_E5b) ** 2
        if freq_idx == 2:
            return eph.get_orbit_field_f64('bgdE5aE1') * (FREQ_L1 / FREQ_L5) ** 2
        raise ValueError(f"no broadcast group delay for frequency index {freq_idx}")

    if constellation == Constellation.BeiDou:
        if freq_idx == 0:
            try:
                return eph.get_orbit_field_f64('tgd1b1b3')
            except MissingDataError:
                return eph.total_group_delay()
        if freq_idx == 1:
            return eph.get_orbit_field_f64('tgd2b2b3')
        if freq_idx == 2:
            return 0.0
        raise ValueError(f"no broadcast group delay for frequency index {freq_idx}")

    raise NotSupportedError(constellation)
