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

"""GNSS Constants, Constellations and Time Scales"""

from enum import Enum
from typing import Optional

import numpy as np

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# Carrier frequencies used to scale broadcast group delays
FREQ_L1 = 1.57542E9   # GPS L1 / Galileo E1 (Hz)
FREQ_L2 = 1.22760E9   # GPS L2 (Hz)
FREQ_L5 = 1.17645E9   # GPS L5 / Galileo E5a (Hz)
FREQ_E5b = 1.20714E9  # Galileo E5b (Hz)

# GNSS System IDs
SYS_NONE = 0x00   # invalid
SYS_GPS = 0x01    # GPS
SYS_GLO = 0x02    # GLONASS
SYS_GAL = 0x04    # Galileo
SYS_BDS = 0x08    # BeiDou
SYS_QZS = 0x10    # QZSS
SYS_SBS = 0x20    # SBAS
SYS_IRN = 0x40    # IRNSS

# Time System Parameters
WEEK_SECONDS = 604800.0        # seconds per week
DAY_SECONDS = 86400.0          # seconds per day
GST_WEEK_OFFSET = 1024         # GPS week - Galileo week
TAI_GPS_OFFSET = 19.0          # TAI - GPST (seconds)
GLONASS_UTC_OFFSET = 10800.0   # GLONASST - UTC (seconds, UTC+3h)

# Earth Parameters (WGS84)
RE_WGS84 = 6378137.0           # earth semimajor axis (m)
OMGE = 7.2921151467E-5         # earth angular velocity (rad/s)

# System-specific gravitational constants
MU_GPS = 3.9860050E14          # GPS gravitational constant
MU_GAL = 3.986004418E14        # Galileo gravitational constant
MU_GLO = 3.9860044E14          # GLONASS gravitational constant
MU_BDS = 3.986004418E14        # BeiDou gravitational constant

# System-specific earth angular velocities
OMGE_GAL = 7.2921151467E-5     # Galileo earth angular velocity
OMGE_GLO = 7.292115E-5         # GLONASS earth angular velocity
OMGE_BDS = 7.292115E-5         # BeiDou earth angular velocity

# Relativistic clock constant F = -2 sqrt(mu) / c^2 (s/sqrt(m))
FREL_GPS = -2.0 * np.sqrt(MU_GPS) / CLIGHT ** 2
FREL_BDS_GAL = -2.0 * np.sqrt(MU_BDS) / CLIGHT ** 2

# BeiDou GEO orbital frame inclination (rad)
BDS_GEO_INCLINATION = np.deg2rad(5.0)

# Kepler solver
KEPLER_TOLERANCE_RAD = 1E-10   # eccentric anomaly convergence threshold
DEFAULT_MAX_ITERATION = 10     # default iteration budget (solver and clock)


class TimeScale(Enum):
    """Time scales an Epoch can be expressed in"""
    GPST = "GPST"
    GST = "GST"
    BDT = "BDT"
    QZSST = "QZSST"
    IRNSST = "IRNSST"
    UTC = "UTC"
    GLONASST = "GLONASST"
    TAI = "TAI"

    def __str__(self):
        return self.value


class Constellation(Enum):
    """GNSS constellations, including the SBAS augmentation family"""
    GPS = "GPS"
    Glonass = "Glonass"
    Galileo = "Galileo"
    BeiDou = "BeiDou"
    QZSS = "QZSS"
    IRNSS = "IRNSS"
    SBAS = "SBAS"
    WAAS = "WAAS"
    EGNOS = "EGNOS"
    MSAS = "MSAS"
    GAGAN = "GAGAN"
    SDCM = "SDCM"
    BDSBAS = "BDSBAS"
    KASS = "KASS"
    Unknown = "Unknown"

    def is_sbas(self) -> bool:
        """True for the generic SBAS and every augmentation provider"""
        return self in _SBAS_FAMILY

    def timescale(self) -> Optional[TimeScale]:
        """Native time scale of the constellation, None if undefined"""
        if self.is_sbas():
            return TimeScale.GPST
        return _TIMESCALES.get(self)

    @property
    def sys(self) -> int:
        """System bitmask (SYS_GPS, SYS_GLO, ...)"""
        if self.is_sbas():
            return SYS_SBS
        return _SYS_IDS.get(self, SYS_NONE)

    @property
    def char(self) -> str:
        """Single letter identifier"""
        return sys2char(self.sys)

    @classmethod
    def from_char(cls, c: str) -> 'Constellation':
        """Constellation from its letter identifier ('G', 'R', ...)"""
        sys = char2sys(c)
        for constellation, sys_id in _SYS_IDS.items():
            if sys_id == sys:
                return constellation
        if sys == SYS_SBS:
            return cls.SBAS
        raise ValueError(f"Unknown constellation identifier: {c!r}")

    def __str__(self):
        return self.value


_SBAS_FAMILY = frozenset({
    Constellation.SBAS, Constellation.WAAS, Constellation.EGNOS,
    Constellation.MSAS, Constellation.GAGAN, Constellation.SDCM,
    Constellation.BDSBAS, Constellation.KASS,
})

_TIMESCALES = {
    Constellation.GPS: TimeScale.GPST,
    Constellation.Galileo: TimeScale.GST,
    Constellation.BeiDou: TimeScale.BDT,
    Constellation.QZSS: TimeScale.QZSST,
    Constellation.IRNSS: TimeScale.IRNSST,
    Constellation.Glonass: TimeScale.UTC,
}

_SYS_IDS = {
    Constellation.GPS: SYS_GPS,
    Constellation.Glonass: SYS_GLO,
    Constellation.Galileo: SYS_GAL,
    Constellation.BeiDou: SYS_BDS,
    Constellation.QZSS: SYS_QZS,
    Constellation.IRNSS: SYS_IRN,
}


def gravitational_constant(constellation: Constellation) -> float:
    """Gravitational constant mu used by the constellation's ICD (m^3/s^2)"""
    if constellation == Constellation.BeiDou:
        return MU_BDS
    if constellation == Constellation.Galileo:
        return MU_GAL
    if constellation == Constellation.Glonass:
        return MU_GLO
    return MU_GPS


def earth_rotation_rate(constellation: Constellation) -> float:
    """Earth angular velocity used by the constellation's ICD (rad/s)"""
    if constellation == Constellation.BeiDou:
        return OMGE_BDS
    if constellation == Constellation.Glonass:
        return OMGE_GLO
    if constellation == Constellation.Galileo:
        return OMGE_GAL
    return OMGE


def relativistic_constant(constellation: Constellation) -> float:
    """Relativistic clock constant F (s/sqrt(m))"""
    if constellation in (Constellation.BeiDou, Constellation.Galileo):
        return FREL_BDS_GAL
    return FREL_GPS


def sys2char(sys):
    """Convert system ID to character"""
    syschar = {
        SYS_GPS: 'G',
        SYS_GLO: 'R',
        SYS_GAL: 'E',
        SYS_BDS: 'C',
        SYS_QZS: 'J',
        SYS_SBS: 'S',
        SYS_IRN: 'I'
    }
    return syschar.get(sys, ' ')


def char2sys(c):
    """Convert character to system ID"""
    charmap = {
        'G': SYS_GPS,
        'R': SYS_GLO,
        'E': SYS_GAL,
        'C': SYS_BDS,
        'J': SYS_QZS,
        'S': SYS_SBS,
        'I': SYS_IRN
    }
    return charmap.get(c.upper(), SYS_NONE)
