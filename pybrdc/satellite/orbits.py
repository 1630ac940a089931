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

"""Orbit parameter store and the broadcast field vocabulary

Field names are shared with the external decoders (RINEX, BINEX, RTCM, UBX
bridges) and must stay stable. Decoders own unit conversion, values stored
here are SI (radians, meters, seconds) except for the Cartesian GLONASS/SBAS
states which are broadcast in km, km/s and km/s^2.
"""

from collections.abc import Mapping
from enum import Enum, IntEnum, IntFlag
from typing import Dict, Iterator, Optional, Union

from ..core.constants import Constellation

__all__ = ['OrbitFamily', 'ORBIT_FIELDS', 'INTEGRAL_FIELDS', 'OrbitItems', 'orbit_family']

OrbitValue = Union[float, IntFlag, IntEnum]


class OrbitFamily(Enum):
    """Message families sharing one orbit field layout"""
    GPS_QZSS = "GPS/QZSS"
    GALILEO = "Galileo"
    BEIDOU_MEO = "BeiDou-MEO"
    BEIDOU_GEO = "BeiDou-GEO"
    IRNSS = "IRNSS"
    GLONASS = "Glonass"
    SBAS = "SBAS"


_KEPLERIAN_FIELDS = frozenset({
    'toe', 'week', 'sqrta', 'e', 'i0', 'omega', 'omega0', 'm0',
    'deltaN', 'idot', 'omegaDot',
    'cus', 'cuc', 'cis', 'cic', 'crs', 'crc',
    'health',
})

_CARTESIAN_FIELDS = frozenset({
    'posX', 'posY', 'posZ',
    'velX', 'velY', 'velZ',
    'accelX', 'accelY', 'accelZ',
    'health',
})

ORBIT_FIELDS = {
    OrbitFamily.GPS_QZSS: _KEPLERIAN_FIELDS | {
        'iode', 'iodc', 'tgd', 'isc', 'svAccuracy', 'l2Codes', 'l2pDataFlag',
        't_tm', 'fitInt', 'adot', 'deltaNdot', 'uraIndex',
    },
    OrbitFamily.GALILEO: _KEPLERIAN_FIELDS | {
        'iodnav', 'dataSrc', 'sisa', 'bgdE5aE1', 'bgdE5bE1', 't_tm',
    },
    OrbitFamily.BEIDOU_MEO: _KEPLERIAN_FIELDS | {
        'aode', 'aodc', 'tgd', 'tgd1b1b3', 'tgd2b2b3', 'svAccuracy', 't_tm',
        'adot', 'deltaNdot', 'satType',
    },
    OrbitFamily.BEIDOU_GEO: _KEPLERIAN_FIELDS | {
        'aode', 'aodc', 'tgd', 'tgd1b1b3', 'tgd2b2b3', 'svAccuracy', 't_tm',
        'adot', 'deltaNdot', 'satType',
    },
    OrbitFamily.IRNSS: _KEPLERIAN_FIELDS | {
        'iodec', 'tgd', 'uraIndex', 't_tm',
    },
    OrbitFamily.GLONASS: _CARTESIAN_FIELDS | {
        'channel', 'ageOp', 'health2', 'tauN', 'gammaN',
    },
    OrbitFamily.SBAS: _CARTESIAN_FIELDS | {
        'iodn', 'ura',
    },
}

# Stored as floats, read back as integers
INTEGRAL_FIELDS = frozenset({
    'week', 'iode', 'iodc', 'iodnav', 'iodec', 'iodn', 'aode', 'aodc',
    'channel', 'health', 'health2', 'l2Codes', 'l2pDataFlag', 'dataSrc',
    'satType', 'uraIndex', 'ageOp',
})


def orbit_family(sv) -> Optional[OrbitFamily]:
    """Field layout broadcast by ``sv``, None for unknown constellations"""
    constellation = sv.constellation
    if constellation.is_sbas():
        return OrbitFamily.SBAS
    if constellation in (Constellation.GPS, Constellation.QZSS):
        return OrbitFamily.GPS_QZSS
    if constellation == Constellation.Galileo:
        return OrbitFamily.GALILEO
    if constellation == Constellation.BeiDou:
        return OrbitFamily.BEIDOU_GEO if sv.is_beidou_geo() else OrbitFamily.BEIDOU_MEO
    if constellation == Constellation.IRNSS:
        return OrbitFamily.IRNSS
    if constellation == Constellation.Glonass:
        return OrbitFamily.GLONASS
    return None


def _normalize(value) -> OrbitValue:
    # Typed health flags are kept as is, they still behave as numbers
    if isinstance(value, (IntFlag, IntEnum)):
        return value
    return float(value)


class OrbitItems(Mapping):
    """
    Read-only mapping from broadcast field name to value

    Values are 64-bit floats, or typed health flags (``IntFlag``/``IntEnum``
    members, see :mod:`pybrdc.satellite.health`) which still convert with
    ``float()``. Updates go through :meth:`updated`, which returns a copy.

    Parameters
    ----------
    items : dict, optional
        Initial field values
    family : OrbitFamily, optional
        When given, every key must belong to ``ORBIT_FIELDS[family]``

    Examples
    --------
    >>> orbits = OrbitItems({'e': 0.01, 'sqrta': 5153.6})
    >>> orbits.get('e')
    0.01
    >>> orbits.get('crs') is None
    True
    """

    __slots__ = ('_items', 'family')

    def __init__(self, items: Optional[Dict[str, OrbitValue]] = None,
                 family: Optional[OrbitFamily] = None):
        self.family = family
        self._items = {}
        for key, value in (items or {}).items():
            self._check_key(key)
            self._items[key] = _normalize(value)

    def _check_key(self, key: str):
        if not isinstance(key, str):
            raise TypeError(f"orbit field names are strings, got {type(key)}")
        if self.family is not None and key not in ORBIT_FIELDS[self.family]:
            raise ValueError(f"'{key}' is not a {self.family.value} orbit field")

    def __getitem__(self, key: str) -> OrbitValue:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get_f64(self, key: str) -> Optional[float]:
        """Field as a plain float, None when absent"""
        value = self._items.get(key)
        return None if value is None else float(value)

    def get_int(self, key: str) -> Optional[int]:
        """Integral field, rounded"""
        value = self._items.get(key)
        return None if value is None else int(round(float(value)))

    def updated(self, key: str, value: OrbitValue) -> 'OrbitItems':
        """Copy of the store with ``key`` set to ``value``"""
        self._check_key(key)
        items = dict(self._items)
        items[key] = _normalize(value)
        return OrbitItems(items, self.family)

    def __eq__(self, other):
        if isinstance(other, OrbitItems):
            return self._items == other._items
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"OrbitItems({self._items!r})"
