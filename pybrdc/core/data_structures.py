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

"""Core data structures for broadcast navigation messages"""

from dataclasses import dataclass
from enum import Enum

from .constants import Constellation
from .time import Epoch

__all__ = ['SV', 'NavFrameType', 'NavMessageType', 'NavKey']


@dataclass(frozen=True)
class SV:
    """Space vehicle identifier.

    Attributes
    ----------
    constellation : Constellation
        Constellation the satellite belongs to
    prn : int
        PRN number within the constellation

    Notes
    -----
    BeiDou orbit classes follow the PRN allocation:
    GEO: C01-C05, C59 and above; IGSO: C06-C10, C13, C16, C18, C31,
    C38-C40, C56-C58; MEO: everything else. C18 is the experimental
    BDS-3 IGSO (I2-S).

    Examples
    --------
    >>> sv = SV.from_str("C03")
    >>> sv.is_beidou_geo()
    True
    >>> str(sv)
    'C03'
    """
    constellation: Constellation
    prn: int

    @classmethod
    def from_str(cls, text: str) -> 'SV':
        """Parse "G10", "R07", "C59", ... identifiers"""
        text = text.strip()
        if len(text) < 2:
            raise ValueError(f"Invalid satellite identifier: {text!r}")
        constellation = Constellation.from_char(text[0])
        try:
            prn = int(text[1:])
        except ValueError:
            raise ValueError(f"Invalid satellite identifier: {text!r}") from None
        return cls(constellation, prn)

    def is_beidou_geo(self) -> bool:
        return self.constellation == Constellation.BeiDou and (self.prn <= 5 or self.prn >= 59)

    def is_beidou_igso(self) -> bool:
        if self.constellation != Constellation.BeiDou:
            return False
        prn = self.prn
        return (6 <= prn <= 10 or prn in (13, 16, 18, 31)
                or 38 <= prn <= 40 or 56 <= prn <= 58)

    def is_beidou_meo(self) -> bool:
        return (self.constellation == Constellation.BeiDou
                and not self.is_beidou_geo() and not self.is_beidou_igso())

    def __str__(self):
        return f"{self.constellation.char}{self.prn:02d}"


class NavFrameType(Enum):
    """Navigation frame families"""
    Ephemeris = "EPH"
    SystemTimeOffset = "STO"
    EarthOrientation = "EOP"
    IonosphereModel = "ION"


class NavMessageType(Enum):
    """Radio message a frame was decoded from"""
    LNAV = "LNAV"
    CNAV = "CNAV"
    CNV1 = "CNV1"
    CNV2 = "CNV2"
    CNV3 = "CNV3"
    INAV = "INAV"
    FNAV = "FNAV"
    FDMA = "FDMA"
    SBAS = "SBAS"
    D1 = "D1"
    D2 = "D2"
    Unknown = "Unknown"


@dataclass(frozen=True)
class NavKey:
    """Key of a navigation frame in a pool.

    Attributes
    ----------
    epoch : Epoch
        Time of clock (ToC) of the message
    sv : SV
        Broadcasting satellite
    frmtype : NavFrameType
        Frame family
    msgtype : NavMessageType
        Radio message the frame was decoded from
    """
    epoch: Epoch
    sv: SV
    frmtype: NavFrameType = NavFrameType.Ephemeris
    msgtype: NavMessageType = NavMessageType.LNAV
