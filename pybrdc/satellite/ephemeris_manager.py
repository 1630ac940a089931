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

"""Ephemeris pool and per-satellite message selection"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..core.constants import DEFAULT_MAX_ITERATION, Constellation
from ..core.data_structures import SV, NavFrameType, NavKey
from ..core.errors import EphemerisError, FrameSelectionError
from ..core.time import Epoch
from ..gnss.geometry import AzElRange
from .ephemeris import Ephemeris, validity_duration

logger = logging.getLogger(__name__)

__all__ = ['EphemerisManager']


def _toc_sort_key(item):
    t = item[0].epoch.to_gpst()
    return (t.time, t.sec)


class EphemerisManager:
    """
    Pool of decoded broadcast messages and selection of the authoritative one.

    Frames are kept per satellite, ordered by time of clock. The pool is
    filled and read in separate phases, it holds no lock of its own.

    Examples
    --------
    >>> pool = EphemerisManager()
    >>> pool.add_ephemeris(NavKey(toc, SV.from_str("G10")), eph)
    >>> toc, toe, eph = pool.select(SV.from_str("G10"), t)
    """

    def __init__(self):
        self.ephemerides: Dict[SV, List[Tuple[NavKey, Ephemeris]]] = {}

    def __len__(self) -> int:
        return sum(len(frames) for frames in self.ephemerides.values())

    def __contains__(self, sv: SV) -> bool:
        return sv in self.ephemerides

    def satellites(self) -> List[SV]:
        return list(self.ephemerides.keys())

    def add_ephemeris(self, key: NavKey, eph: Ephemeris) -> bool:
        """
        Add a decoded frame to the pool

        Parameters
        ----------
        key : NavKey
            (ToC, SV, frame type, message type)
        eph : Ephemeris
            Decoded message

        Returns
        -------
        bool
            False when an identical key was already stored (the first copy
            is kept)
        """
        frames = self.ephemerides.setdefault(key.sv, [])
        if any(existing == key for existing, _ in frames):
            logger.debug(f"{key.sv} at {key.epoch}: duplicate frame skipped")
            return False

        frames.append((key, eph))
        frames.sort(key=_toc_sort_key)
        return True

    def frames_iter(self) -> Iterator[Tuple[NavKey, Ephemeris]]:
        """All stored frames, satellite by satellite"""
        for frames in self.ephemerides.values():
            yield from frames

    def satellite_frames_iter(self, sv: SV) -> Iterator[Tuple[NavKey, Ephemeris]]:
        yield from self.ephemerides.get(sv, [])

    def _ephemeris_frames(self, sv: SV):
        for key, eph in self.satellite_frames_iter(sv):
            if key.frmtype == NavFrameType.Ephemeris:
                yield key, eph

    def select(self, sv: SV, t: Epoch) -> Optional[Tuple[Epoch, Epoch, Ephemeris]]:
        """
        Select the message of ``sv`` to use at ``t``

        Parameters
        ----------
        sv : SV
            Satellite
        t : Epoch
            Time of interest

        Returns
        -------
        tuple or None
            (toc, toe, ephemeris); None if no valid message exists

        Notes
        -----
        SBAS: message with ToC closest to ``t``, ToE is taken equal to ToC.
        GLONASS: among messages valid at ``t``, the one with ToC closest
        to ``t``, ToE is again taken equal to ToC.
        Others: among messages valid at ``t`` with a computable ToE, the
        one with ToE closest to ``t``. Ties keep the first message in pool
        order.
        """
        best = None
        min_dt = float('inf')

        if sv.constellation.is_sbas():
            for key, eph in self._ephemeris_frames(sv):
                dt = abs(t - key.epoch)
                if dt < min_dt:
                    min_dt = dt
                    best = (key.epoch, key.epoch, eph)
            return best

        for key, eph in self._ephemeris_frames(sv):
            if not eph.is_valid(sv, key.epoch, t):
                continue
            if sv.constellation == Constellation.Glonass:
                toe = key.epoch
            else:
                try:
                    toe = eph.toe(sv)
                except EphemerisError as e:
                    logger.debug(f"{sv} at {key.epoch}: no toe ({e})")
                    continue

            dt = abs(t - toe)
            if dt < min_dt:
                min_dt = dt
                best = (key.epoch, toe, eph)

        return best

    def select_or_raise(self, sv: SV, t: Epoch) -> Tuple[Epoch, Epoch, Ephemeris]:
        """Same as :meth:`select`, raising :class:`FrameSelectionError` on failure"""
        selected = self.select(sv, t)
        if selected is None:
            raise FrameSelectionError(t, sv)
        return selected

    def drop_expired(self, epoch: Epoch) -> int:
        """
        Remove frames whose validity window ended before ``epoch``

        The age is counted from the time of clock. Satellites left without
        frames are forgotten.

        Returns
        -------
        int
            Number of frames removed
        """
        removed = 0
        for sv in list(self.ephemerides.keys()):
            max_age = validity_duration(sv.constellation)
            if max_age is None:
                continue
            kept = [
                (key, eph) for key, eph in self.ephemerides[sv]
                if epoch - key.epoch < max_age
            ]
            removed += len(self.ephemerides[sv]) - len(kept)
            if kept:
                self.ephemerides[sv] = kept
            else:
                del self.ephemerides[sv]
        if removed:
            logger.info(f"dropped {removed} expired frames at {epoch}")
        return removed

    # Resolution helpers

    def satellite_orbital_state(self, sv: SV, t: Epoch,
                                max_iteration: int = DEFAULT_MAX_ITERATION):
        toc, _, eph = self.select_or_raise(sv, t)
        return eph.resolve_orbital_state(sv, toc, t, max_iteration)

    def satellite_position_velocity_km(self, sv: SV, t: Epoch,
                                       max_iteration: int = DEFAULT_MAX_ITERATION) -> np.ndarray:
        toc, _, eph = self.select_or_raise(sv, t)
        return eph.resolve_position_velocity_km(sv, toc, t, max_iteration)

    def satellite_clock_correction(self, sv: SV, t: Epoch,
                                   max_iter: int = DEFAULT_MAX_ITERATION) -> float:
        toc, _, eph = self.select_or_raise(sv, t)
        return eph.clock_correction(sv, toc, t, max_iter)

    def satellite_azimuth_elevation_range(self, sv: SV, t: Epoch, rx_position_km,
                                          max_iteration: int = DEFAULT_MAX_ITERATION) -> AzElRange:
        """Look angles of ``sv`` at ``t`` from an ECEF receiver position (km)"""
        position_km = self.satellite_position_velocity_km(sv, t, max_iteration)[:3]
        return Ephemeris.elevation_azimuth_range(position_km, rx_position_km)
