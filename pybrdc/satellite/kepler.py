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

"""Keplerian elements extracted from broadcast ephemerides"""

from dataclasses import dataclass

import numpy as np

from ..core.constants import Constellation
from ..core.errors import BadOperationError
from ..core.time import Epoch

__all__ = ['Keplerian', 'to_keplerian', 'with_keplerian']


@dataclass(frozen=True)
class Keplerian:
    """Broadcast Keplerian elements and their harmonic corrections.

    Attributes
    ----------
    epoch : Epoch
        Time of ephemeris (ToE), in the constellation's reference scale
    sma_m : float
        Semi-major axis (m)
    ecc : float
        Eccentricity
    inc_rad : float
        Inclination at ToE (rad)
    longan_rad : float
        Longitude of ascending node at weekly epoch (rad)
    ma_rad : float
        Mean anomaly at ToE (rad)
    aop_rad : float
        Argument of perigee (rad)
    dn_rad : float
        Mean motion difference (rad/s)
    i_dot_rad_s : float
        Inclination rate (rad/s)
    omega_dot_rad_s : float
        Rate of right ascension (rad/s)
    cus_rad, cuc_rad : float
        Argument of latitude harmonic corrections (rad)
    cis_rad, cic_rad : float
        Inclination harmonic corrections (rad)
    crs_m, crc_m : float
        Orbit radius harmonic corrections (m)
    """
    epoch: Epoch
    sma_m: float
    ecc: float
    inc_rad: float
    longan_rad: float
    ma_rad: float
    aop_rad: float
    dn_rad: float
    i_dot_rad_s: float
    omega_dot_rad_s: float
    cus_rad: float
    cuc_rad: float
    cis_rad: float
    cic_rad: float
    crs_m: float
    crc_m: float

    def dt(self, epoch: Epoch) -> float:
        """Seconds from ToE to ``epoch``, after moving ``epoch`` to ToE's scale"""
        return epoch.to_time_scale(self.epoch.time_scale) - self.epoch

    @property
    def toe_seconds(self) -> float:
        """ToE as seconds of week"""
        return self.epoch.to_time_of_week()[1]


def to_keplerian(eph, sv) -> Keplerian:
    """
    Extract the Keplerian elements of ``sv`` from an ephemeris

    Parameters
    ----------
    eph : Ephemeris
        Broadcast ephemeris
    sv : SV
        Broadcasting satellite

    Returns
    -------
    Keplerian
        Elements referenced to ToE

    Raises
    ------
    BadOperationError
        GLONASS and SBAS messages carry Cartesian states
    MissingDataError
        When one of the orbital or harmonic fields is absent
    """
    if sv.constellation == Constellation.Glonass or sv.constellation.is_sbas():
        raise BadOperationError(f"{sv} broadcasts Cartesian states, not Keplerian elements")

    cus, cuc = eph.harmonic_correction_usin_ucos()
    cis, cic = eph.harmonic_correction_isin_icos()
    crs, crc = eph.harmonic_correction_rsin_rcos()

    return Keplerian(
        epoch=eph.toe(sv),
        sma_m=eph.semi_major_axis_m(),
        ecc=eph.eccentricity(),
        inc_rad=eph.inclination_rad(),
        longan_rad=eph.longitude_ascending_node_rad(),
        ma_rad=eph.mean_anomaly_rad(),
        aop_rad=eph.argument_of_perigee_rad(),
        dn_rad=eph.mean_motion_difference_rad(),
        i_dot_rad_s=eph.inclination_rate_of_change_rad_s(),
        omega_dot_rad_s=eph.right_ascension_rate_of_change_rad_s(),
        cus_rad=cus,
        cuc_rad=cuc,
        cis_rad=cis,
        cic_rad=cic,
        crs_m=crs,
        crc_m=crc,
    )


def with_keplerian(eph, kep: Keplerian):
    """Copy of ``eph`` carrying the elements of ``kep``"""
    week, toe = kep.epoch.to_time_of_week()
    fields = (
        ('sqrta', np.sqrt(kep.sma_m)),
        ('e', kep.ecc),
        ('i0', kep.inc_rad),
        ('omega0', kep.longan_rad),
        ('m0', kep.ma_rad),
        ('omega', kep.aop_rad),
        ('deltaN', kep.dn_rad),
        ('idot', kep.i_dot_rad_s),
        ('omegaDot', kep.omega_dot_rad_s),
        ('cus', kep.cus_rad),
        ('cuc', kep.cuc_rad),
        ('cis', kep.cis_rad),
        ('cic', kep.cic_rad),
        ('crs', kep.crs_m),
        ('crc', kep.crc_m),
        ('toe', toe),
    )
    for key, value in fields:
        eph = eph.with_orbit(key, float(value))
    return eph.with_week(week)
