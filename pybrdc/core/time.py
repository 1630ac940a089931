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

"""GNSS Time Scales and timescale-tagged instants"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cssrlib.gnss import (bdt2gpst, bdt2time, epoch2time, gpst2bdt,
                          gpst2time, gpst2utc, gtime_t, time2bdt, time2epoch,
                          time2gpst, timeadd, timediff, utc2gpst)

from .constants import (GLONASS_UTC_OFFSET, GST_WEEK_OFFSET, TAI_GPS_OFFSET,
                        WEEK_SECONDS, TimeScale)

__all__ = ['TimeScale', 'Epoch', 'TimeOffset']

# Scales reading the same as GPST (only the week origin may differ)
_GPST_ALIGNED = (TimeScale.GPST, TimeScale.QZSST, TimeScale.IRNSST, TimeScale.GST)

_EPOCH_PATTERN = re.compile(
    r"^\s*(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2}):(\d{2}(?:\.\d*)?)\s*([A-Z]+)?\s*$"
)


def _shift(t: gtime_t, seconds: float) -> gtime_t:
    return timeadd(gtime_t(t.time, t.sec), seconds)


def _to_gpst_reading(t: gtime_t, scale: TimeScale) -> gtime_t:
    """Reading of GPST at the instant whose reading in ``scale`` is ``t``"""
    if scale in _GPST_ALIGNED:
        return gtime_t(t.time, t.sec)
    if scale == TimeScale.BDT:
        return bdt2gpst(gtime_t(t.time, t.sec))
    if scale == TimeScale.TAI:
        return _shift(t, -TAI_GPS_OFFSET)
    if scale == TimeScale.UTC:
        return utc2gpst(gtime_t(t.time, t.sec))
    if scale == TimeScale.GLONASST:
        return utc2gpst(_shift(t, -GLONASS_UTC_OFFSET))
    raise ValueError(f"Unsupported time scale: {scale}")


def _from_gpst_reading(t: gtime_t, scale: TimeScale) -> gtime_t:
    if scale in _GPST_ALIGNED:
        return gtime_t(t.time, t.sec)
    if scale == TimeScale.BDT:
        return gpst2bdt(gtime_t(t.time, t.sec))
    if scale == TimeScale.TAI:
        return _shift(t, TAI_GPS_OFFSET)
    if scale == TimeScale.UTC:
        return gpst2utc(gtime_t(t.time, t.sec))
    if scale == TimeScale.GLONASST:
        return _shift(gpst2utc(gtime_t(t.time, t.sec)), GLONASS_UTC_OFFSET)
    raise ValueError(f"Unsupported time scale: {scale}")


class Epoch:
    """Instant tagged with the time scale it is expressed in

    The reading is kept as a cssrlib ``gtime_t`` (integer seconds plus
    fraction), so sub-nanosecond differences survive multi-week spans.

    Subtraction between two epochs first transposes the right operand into
    the time scale of the left one and returns float seconds. Ordering
    comparisons refuse to mix time scales, transpose explicitly with
    ``to_time_scale`` instead.

    Examples
    --------
    >>> t = Epoch.from_str("2020-06-25T02:00:00 GPST")
    >>> t.to_time_scale(TimeScale.BDT) - t
    0.0
    >>> str(t.to_time_scale(TimeScale.BDT))
    '2020-06-25T01:59:46 BDT'
    """

    __slots__ = ('_time', 'time_scale')

    def __init__(self, time: gtime_t, time_scale: TimeScale = TimeScale.GPST):
        if not isinstance(time_scale, TimeScale):
            raise TypeError(f"time_scale must be a TimeScale, got {type(time_scale)}")
        self._time = gtime_t(int(time.time), float(time.sec))
        self.time_scale = time_scale

    @classmethod
    def from_calendar(cls, year: int, month: int, day: int,
                      hour: int = 0, minute: int = 0, second: float = 0.0,
                      time_scale: TimeScale = TimeScale.GPST) -> 'Epoch':
        """Create an Epoch from a calendar reading of ``time_scale``"""
        return cls(epoch2time([year, month, day, hour, minute, second]), time_scale)

    @classmethod
    def from_time_of_week(cls, week: int, tow: float,
                          time_scale: TimeScale = TimeScale.GPST) -> 'Epoch':
        """
        Create an Epoch from a week counter and seconds of week

        Parameters:
        -----------
        week : int
            Week number in the scale's own numbering (GST weeks start
            1999-08-22, BDT weeks start 2006-01-01, others follow GPS weeks)
        tow : float
            Seconds into the week
        time_scale : TimeScale
            Scale the reading belongs to
        """
        if time_scale == TimeScale.BDT:
            return cls(bdt2time(int(week), float(tow)), time_scale)
        if time_scale == TimeScale.GST:
            return cls(gpst2time(int(week) + GST_WEEK_OFFSET, float(tow)), time_scale)
        return cls(gpst2time(int(week), float(tow)), time_scale)

    @classmethod
    def from_str(cls, text: str) -> 'Epoch':
        """Parse ``"YYYY-MM-DDTHH:MM:SS[.fff] SCALE"``, GPST when no scale is given"""
        match = _EPOCH_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Invalid epoch: {text!r}")
        year, month, day, hour, minute = (int(v) for v in match.groups()[:5])
        second = float(match.group(6))
        scale = match.group(7)
        try:
            time_scale = TimeScale(scale) if scale else TimeScale.GPST
        except ValueError:
            raise ValueError(f"Unknown time scale {scale!r} in {text!r}") from None
        return cls.from_calendar(year, month, day, hour, minute, second, time_scale)

    @property
    def gtime(self) -> gtime_t:
        """Copy of the reading as a cssrlib ``gtime_t``"""
        return gtime_t(self._time.time, self._time.sec)

    def to_gpst(self) -> gtime_t:
        """GPST reading of this instant, for cssrlib routines"""
        return _to_gpst_reading(self._time, self.time_scale)

    def to_time_scale(self, time_scale: TimeScale) -> 'Epoch':
        """Same instant, read in another time scale"""
        if time_scale == self.time_scale:
            return Epoch(self._time, time_scale)
        gpst = _to_gpst_reading(self._time, self.time_scale)
        return Epoch(_from_gpst_reading(gpst, time_scale), time_scale)

    def to_time_of_week(self) -> Tuple[int, float]:
        """(week, seconds of week) in the scale's own week numbering"""
        if self.time_scale == TimeScale.BDT:
            week, tow = time2bdt(self.gtime)
        else:
            week, tow = time2gpst(self.gtime)
            if self.time_scale == TimeScale.GST:
                week -= GST_WEEK_OFFSET
        return int(week), float(tow)

    def to_calendar(self) -> list:
        """[year, month, day, hour, minute, second] reading"""
        return time2epoch(self.gtime)

    def __add__(self, seconds: float) -> 'Epoch':
        if isinstance(seconds, (int, float)):
            return Epoch(_shift(self._time, float(seconds)), self.time_scale)
        return NotImplemented

    def __radd__(self, seconds: float) -> 'Epoch':
        return self.__add__(seconds)

    def __sub__(self, other: Union['Epoch', float]) -> Union[float, 'Epoch']:
        """Seconds elapsed since ``other``, or a shifted Epoch"""
        if isinstance(other, Epoch):
            other = other.to_time_scale(self.time_scale)
            return timediff(self._time, other._time)
        if isinstance(other, (int, float)):
            return Epoch(_shift(self._time, -float(other)), self.time_scale)
        return NotImplemented

    def _check_scale(self, other: 'Epoch'):
        if self.time_scale != other.time_scale:
            raise ValueError(
                f"Cannot compare times with different scales: "
                f"{self.time_scale} and {other.time_scale}"
            )

    def _key(self):
        return (self._time.time, round(self._time.sec, 9))

    def __lt__(self, other: 'Epoch') -> bool:
        if not isinstance(other, Epoch):
            return NotImplemented
        self._check_scale(other)
        return self._key() < other._key()

    def __le__(self, other: 'Epoch') -> bool:
        if not isinstance(other, Epoch):
            return NotImplemented
        self._check_scale(other)
        return self._key() <= other._key()

    def __gt__(self, other: 'Epoch') -> bool:
        if not isinstance(other, Epoch):
            return NotImplemented
        self._check_scale(other)
        return self._key() > other._key()

    def __ge__(self, other: 'Epoch') -> bool:
        if not isinstance(other, Epoch):
            return NotImplemented
        self._check_scale(other)
        return self._key() >= other._key()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Epoch):
            return NotImplemented
        return self.time_scale == other.time_scale and self._key() == other._key()

    def __hash__(self):
        return hash((self.time_scale, self._key()))

    def __str__(self):
        year, month, day, hour, minute, second = self.to_calendar()
        whole = int(second)
        text = f"{int(year):04d}-{int(month):02d}-{int(day):02d}T{int(hour):02d}:{int(minute):02d}:{whole:02d}"
        fraction = round(second - whole, 9)
        if fraction > 0.0:
            text += f"{fraction:.9f}".rstrip('0')[1:]
        return f"{text} {self.time_scale}"

    def __repr__(self):
        return f"Epoch('{self}')"


@dataclass(frozen=True)
class TimeOffset:
    """
    Broadcast offset between two time scales (system time offset message)

    Parameters
    ----------
    lhs : TimeScale
        Scale the polynomial is referenced to
    rhs : TimeScale
        Scale the polynomial transposes into
    t_ref_week : int
        Reference week, in ``lhs`` week numbering
    t_ref_tow : float
        Reference seconds of week
    polynomial : tuple
        (a0 [s], a1 [s/s], a2 [s/s^2]) residual offset ``lhs - rhs`` on top
        of the nominal scale relationship
    utc : str, optional
        UTC provider identifier, when broadcast
    """
    lhs: TimeScale
    rhs: TimeScale
    t_ref_week: int
    t_ref_tow: float
    polynomial: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    utc: Optional[str] = None

    @classmethod
    def from_epoch(cls, t_ref: Epoch, lhs: TimeScale, rhs: TimeScale,
                   polynomial: Tuple[float, float, float]) -> 'TimeOffset':
        week, tow = t_ref.to_time_scale(lhs).to_time_of_week()
        return cls(lhs, rhs, week, tow, tuple(polynomial))

    def reference_epoch(self) -> Epoch:
        return Epoch.from_time_of_week(self.t_ref_week, self.t_ref_tow, self.lhs)

    def correction_seconds(self, t: Epoch) -> float:
        """a0 + a1 dt + a2 dt^2, dt counted from the reference epoch"""
        a0, a1, a2 = self.polynomial
        dt = t.to_time_scale(self.lhs) - self.reference_epoch()
        return a0 + a1 * dt + a2 * dt ** 2

    def epoch_time_correction(self, t: Epoch, target: TimeScale) -> Optional[Epoch]:
        """
        Transpose ``t`` into ``target`` using the broadcast polynomial

        Returns None when this offset does not link ``t.time_scale`` and
        ``target`` (indirect conversions are not attempted).
        """
        if t.time_scale == self.lhs and target == self.rhs:
            return t.to_time_scale(target) - self.correction_seconds(t)
        if t.time_scale == self.rhs and target == self.lhs:
            return t.to_time_scale(target) + self.correction_seconds(t)
        return None
