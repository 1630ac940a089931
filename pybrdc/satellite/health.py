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

"""Satellite health flags

Decoders store the broadcast health word in the ``health`` orbit field as one
of the types below. A plain number carries no interpretation and is treated
as unhealthy.
"""

from enum import IntEnum, IntFlag
from typing import Optional, Union

from ..core.constants import Constellation
from ..core.data_structures import NavMessageType

__all__ = [
    'GpsQzssl1l2l5Health', 'GpsQzssl1cHealth', 'GlonassHealth', 'GlonassHealth2',
    'GeoHealth', 'BdsSatH1', 'BdsHealth', 'GalHealth', 'health_flag',
    'is_healthy', 'is_under_test',
]


class GpsQzssl1l2l5Health(IntFlag):
    """GPS/QZSS LNAV/CNAV SV health word, healthy only when zero"""
    L5 = 0x01
    L2 = 0x02
    L1 = 0x04
    SIGNAL = 0x08
    NAV_DATA = 0x20


class GpsQzssl1cHealth(IntFlag):
    """GPS/QZSS CNAV-2 (L1C) health"""
    UNHEALTHY = 0x01


class GlonassHealth(IntFlag):
    """GLONASS Bn word"""
    UNHEALTHY = 0x04


class GlonassHealth2(IntFlag):
    """GLONASS status flags (almanac health Cn)"""
    HEALTHY_ALMANAC = 0x01


class GeoHealth(IntFlag):
    """SBAS GEO health"""
    RANGING_OFF = 0x01
    CORRECTIONS_OFF = 0x02
    INTEGRITY_OFF = 0x04
    HEALTH_UNAVAILABLE = 0x100


class BdsSatH1(IntFlag):
    """BeiDou D1/D2 SatH1"""
    UNHEALTHY = 0x01


class BdsHealth(IntEnum):
    """BeiDou B-CNAV satellite health"""
    Healthy = 0
    UnhealthyOutOfService = 1
    UnhealthyTesting = 2


class GalHealth(IntFlag):
    """Galileo signal health and data validity, healthy only when zero"""
    E1B_DVS = 0x001
    E1B_HS0 = 0x002
    E1B_HS1 = 0x004
    E5A_DVS = 0x008
    E5A_HS0 = 0x010
    E5A_HS1 = 0x020
    E5B_DVS = 0x040
    E5B_HS0 = 0x080
    E5B_HS1 = 0x100


_GEO_UNHEALTHY = (GeoHealth.RANGING_OFF | GeoHealth.CORRECTIONS_OFF
                  | GeoHealth.INTEGRITY_OFF | GeoHealth.HEALTH_UNAVAILABLE)

_BDS_MODERN = (NavMessageType.CNV1, NavMessageType.CNV2, NavMessageType.CNV3)


def health_flag(constellation: Constellation,
                msgtype: NavMessageType,
                raw: float) -> Union[IntFlag, IntEnum, float]:
    """
    Wrap a raw broadcast health value into its typed flag

    Parameters
    ----------
    constellation : Constellation
        Broadcasting constellation
    msgtype : NavMessageType
        Radio message the value was decoded from
    raw : float
        Decoded health word

    Returns
    -------
    IntFlag, IntEnum or float
        Typed flag, or ``float(raw)`` when no decoder applies
    """
    value = int(round(float(raw)))
    if constellation.is_sbas():
        return GeoHealth(value)
    if constellation in (Constellation.GPS, Constellation.QZSS):
        if msgtype == NavMessageType.CNV2:
            return GpsQzssl1cHealth(value)
        return GpsQzssl1l2l5Health(value)
    if constellation == Constellation.IRNSS:
        return GpsQzssl1l2l5Health(value)
    if constellation == Constellation.Glonass:
        return GlonassHealth(value)
    if constellation == Constellation.Galileo:
        return GalHealth(value)
    if constellation == Constellation.BeiDou:
        if msgtype in _BDS_MODERN:
            try:
                return BdsHealth(value)
            except ValueError:
                return float(raw)
        return BdsSatH1(value)
    return float(raw)


def is_healthy(health, health2=None) -> bool:
    """Decide health from the typed ``health`` (and GLONASS ``health2``) fields"""
    if health is None:
        return False
    # BdsHealth first, IntEnum members are not IntFlag members
    if isinstance(health, BdsHealth):
        return health == BdsHealth.Healthy
    if isinstance(health, GpsQzssl1l2l5Health):
        return int(health) == 0
    if isinstance(health, GpsQzssl1cHealth):
        return not (health & GpsQzssl1cHealth.UNHEALTHY)
    if isinstance(health, GlonassHealth):
        if health & GlonassHealth.UNHEALTHY:
            return False
        if health2 is None:
            return True
        if isinstance(health2, GlonassHealth2):
            return bool(health2 & GlonassHealth2.HEALTHY_ALMANAC)
        return False
    if isinstance(health, GeoHealth):
        return not (health & _GEO_UNHEALTHY)
    if isinstance(health, BdsSatH1):
        return not (health & BdsSatH1.UNHEALTHY)
    if isinstance(health, GalHealth):
        return int(health) == 0
    return False


def is_under_test(health) -> bool:
    return isinstance(health, BdsHealth) and health == BdsHealth.UnhealthyTesting
