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

"""Broadcast ephemeris model and validation"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from ..core.constants import DAY_SECONDS, DEFAULT_MAX_ITERATION, Constellation
from ..core.errors import (BadOperationError, EphemerisError,
                           MissingDataError, NotSupportedError)
from ..core.time import Epoch, TimeScale
from ..gnss.geometry import AzElRange, elevation_azimuth_range
from . import clock, satellite_position
from .health import is_healthy, is_under_test
from .kepler import Keplerian, to_keplerian, with_keplerian
from .orbits import OrbitItems

logger = logging.getLogger(__name__)

__all__ = ['Ephemeris', 'VALIDITY_DURATIONS', 'validity_duration']

# Seconds a message may be used away from its reference time
VALIDITY_DURATIONS = {
    Constellation.GPS: 7200.0,
    Constellation.QZSS: 7200.0,
    Constellation.Galileo: 10800.0,
    Constellation.BeiDou: 21600.0,
    Constellation.IRNSS: 7200.0,
    Constellation.Glonass: 1800.0,
}

# toe week counters, by constellation
_TOE_TIMESCALES = {
    Constellation.GPS: TimeScale.GPST,
    Constellation.Galileo: TimeScale.GPST,  # Galileo weeks are broadcast aligned to GPS weeks
    Constellation.QZSS: TimeScale.QZSST,
    Constellation.BeiDou: TimeScale.BDT,
    Constellation.IRNSS: TimeScale.IRNSST,
}


def validity_duration(constellation: Constellation) -> Optional[float]:
    """
    Validity window of a broadcast message

    Returns
    -------
    float or None
        Window in seconds, None for unsupported constellations

    Notes
    -----
    - GPS/QZSS/IRNSS: 2 hours
    - Galileo: 3 hours
    - BeiDou: 6 hours
    - GLONASS: 30 minutes
    - SBAS: 1 day, GEO broadcasts refresh rarely
    """
    if constellation.is_sbas():
        return DAY_SECONDS
    return VALIDITY_DURATIONS.get(constellation)


@dataclass(frozen=True)
class Ephemeris:
    """
    Broadcast ephemeris: clock polynomial and orbit parameters.

    Clock terms are always present. Orbit terms depend on the constellation
    and message revision, accessors raise :class:`MissingDataError` rather
    than default a missing physical term. Instances are immutable, the
    ``with_*`` builders return modified copies.

    Attributes
    ----------
    clock_bias : float
        a0 (s)
    clock_drift : float
        a1 (s/s)
    clock_drift_rate : float
        a2 (s/s^2)
    orbits : OrbitItems
        Orbit parameter store, see :mod:`pybrdc.satellite.orbits`

    Examples
    --------
    >>> eph = Ephemeris(1.0e-4, 1.0e-12, 0.0, {'week': 2111, 'toe': 7200.0})
    >>> eph.week_number()
    2111
    >>> eph.with_orbit('e', 0.01).eccentricity()
    0.01
    """
    clock_bias: float
    clock_drift: float
    clock_drift_rate: float
    orbits: OrbitItems = field(default_factory=OrbitItems)

    def __post_init__(self):
        if not isinstance(self.orbits, OrbitItems):
            object.__setattr__(self, 'orbits', OrbitItems(self.orbits))

    def clock_bias_drift_driftrate(self) -> Tuple[float, float, float]:
        return self.clock_bias, self.clock_drift, self.clock_drift_rate

    def get(self, key: str) -> Optional[float]:
        """Orbit field as float, None when absent"""
        return self.orbits.get_f64(key)

    def get_orbit_field_f64(self, key: str) -> float:
        value = self.orbits.get_f64(key)
        if value is None:
            raise MissingDataError(key)
        return value

    def _get_orbit_field_int(self, key: str) -> int:
        value = self.orbits.get_int(key)
        if value is None:
            raise MissingDataError(key)
        return value

    def with_orbit(self, key: str, value) -> 'Ephemeris':
        """Copy with orbit field ``key`` set to ``value``"""
        return Ephemeris(self.clock_bias, self.clock_drift, self.clock_drift_rate,
                         self.orbits.updated(key, value))

    def with_week(self, week: int) -> 'Ephemeris':
        return self.with_orbit('week', float(week))

    def with_keplerian(self, kep: Keplerian) -> 'Ephemeris':
        return with_keplerian(self, kep)

    # Orbit accessors

    def semi_major_axis_m(self) -> float:
        sqrt_a = self.get_orbit_field_f64('sqrta')
        return sqrt_a * sqrt_a

    def eccentricity(self) -> float:
        return self.get_orbit_field_f64('e')

    def inclination_rad(self) -> float:
        return self.get_orbit_field_f64('i0')

    def longitude_ascending_node_rad(self) -> float:
        return self.get_orbit_field_f64('omega0')

    def mean_anomaly_rad(self) -> float:
        return self.get_orbit_field_f64('m0')

    def argument_of_perigee_rad(self) -> float:
        return self.get_orbit_field_f64('omega')

    def mean_motion_difference_rad(self) -> float:
        return self.get_orbit_field_f64('deltaN')

    def inclination_rate_of_change_rad_s(self) -> float:
        return self.get_orbit_field_f64('idot')

    def right_ascension_rate_of_change_rad_s(self) -> float:
        return self.get_orbit_field_f64('omegaDot')

    def harmonic_correction_usin_ucos(self) -> Tuple[float, float]:
        """(cus, cuc) in rad"""
        return self.get_orbit_field_f64('cus'), self.get_orbit_field_f64('cuc')

    def harmonic_correction_isin_icos(self) -> Tuple[float, float]:
        """(cis, cic) in rad"""
        return self.get_orbit_field_f64('cis'), self.get_orbit_field_f64('cic')

    def harmonic_correction_rsin_rcos(self) -> Tuple[float, float]:
        """(crs, crc) in m"""
        return self.get_orbit_field_f64('crs'), self.get_orbit_field_f64('crc')

    def week_number(self) -> int:
        return self._get_orbit_field_int('week')

    def week_seconds(self) -> float:
        """ToE as seconds of week"""
        return self.get_orbit_field_f64('toe')

    def total_group_delay(self) -> float:
        """TGD (s)"""
        return self.get_orbit_field_f64('tgd')

    def glonass_fdma_channel(self) -> int:
        return self._get_orbit_field_int('channel')

    def cnav_adot_m_s(self) -> float:
        """Semi-major axis rate of CNAV messages (m/s)"""
        return self.get_orbit_field_f64('adot')

    def geo_glonass_reference_pos_vel_km(self) -> np.ndarray:
        """Broadcast [x, y, z, vx, vy, vz] of GLONASS/SBAS messages (km, km/s)"""
        return np.array([
            self.get_orbit_field_f64(key)
            for key in ('posX', 'posY', 'posZ', 'velX', 'velY', 'velZ')
        ])

    def geo_glonass_reference_accel_km(self) -> np.ndarray:
        """Broadcast luni-solar acceleration of GLONASS/SBAS messages (km/s^2)"""
        return np.array([
            self.get_orbit_field_f64(key) for key in ('accelX', 'accelY', 'accelZ')
        ])

    def toe(self, sv) -> Epoch:
        """
        Time of ephemeris

        Raises
        ------
        BadOperationError
            GLONASS and SBAS messages have no ToE
        NotSupportedError
            Constellation without a week counter convention
        MissingDataError
            When ``week`` or ``toe`` is absent
        """
        constellation = sv.constellation
        if constellation == Constellation.Glonass or constellation.is_sbas():
            raise BadOperationError(f"{sv}: no time of ephemeris in Cartesian messages")
        time_scale = _TOE_TIMESCALES.get(constellation)
        if time_scale is None:
            raise NotSupportedError(constellation)
        return Epoch.from_time_of_week(self.week_number(), self.week_seconds(), time_scale)

    def to_keplerian(self, sv) -> Keplerian:
        return to_keplerian(self, sv)

    # Health

    def satellite_is_healthy(self) -> bool:
        """True when the broadcast health declares the satellite usable"""
        return is_healthy(self.orbits.get('health'), self.orbits.get('health2'))

    def satellite_under_test(self) -> bool:
        """True only for BeiDou B-CNAV satellites flagged as in test"""
        return is_under_test(self.orbits.get('health'))

    # Validity

    @staticmethod
    def validity_duration(constellation: Constellation) -> Optional[float]:
        return validity_duration(constellation)

    def is_valid(self, sv, toc: Epoch, epoch: Epoch) -> bool:
        """
        Check whether this message may be used for ``sv`` at ``epoch``

        GLONASS and SBAS are measured from the time of clock, every other
        constellation from the time of ephemeris.
        """
        max_dt = validity_duration(sv.constellation)
        if max_dt is None:
            logger.error(f"{epoch}({sv}) - constellation not supported")
            return False

        if sv.constellation == Constellation.Glonass or sv.constellation.is_sbas():
            return abs(epoch - toc) < max_dt

        try:
            toe = self.toe(sv)
        except EphemerisError as e:
            logger.debug(f"{epoch}({sv}) - invalid toe: {e}")
            return False
        return abs(epoch - toe) < max_dt

    # Resolution

    def clock_correction(self, sv, toc: Epoch, epoch: Epoch,
                         max_iter: int = DEFAULT_MAX_ITERATION) -> float:
        """Satellite clock offset (s), see :func:`pybrdc.satellite.clock.clock_correction`"""
        return clock.clock_correction(self, sv, toc, epoch, max_iter)

    def resolve_position_velocity_km(self, sv, toc: Epoch, epoch: Epoch,
                                     max_iteration: int = DEFAULT_MAX_ITERATION) -> np.ndarray:
        return satellite_position.resolve_position_velocity_km(self, sv, toc, epoch, max_iteration)

    def resolve_position_km(self, sv, toc: Epoch, epoch: Epoch,
                            max_iteration: int = DEFAULT_MAX_ITERATION) -> np.ndarray:
        return satellite_position.resolve_position_km(self, sv, toc, epoch, max_iteration)

    def resolve_orbital_state(self, sv, toc: Epoch, epoch: Epoch,
                              max_iteration: int = DEFAULT_MAX_ITERATION):
        return satellite_position.resolve_orbital_state(self, sv, toc, epoch, max_iteration)

    @staticmethod
    def elevation_azimuth_range(sv_position_km, rx_position_km) -> AzElRange:
        return elevation_azimuth_range(sv_position_km, rx_position_km)
