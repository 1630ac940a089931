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

"""Satellite position and velocity resolution from broadcast ephemeris"""

import logging
from dataclasses import dataclass

import numpy as np

from ..core.constants import DEFAULT_MAX_ITERATION, Constellation
from ..core.errors import BeidouIgsoNotSupportedError
from ..core.time import Epoch
from . import solver
from .state_propagator import propagate_state_km

logger = logging.getLogger(__name__)

__all__ = [
    'OrbitalState', 'resolve_position_velocity_km', 'resolve_position_km',
    'resolve_orbital_state',
]


@dataclass(frozen=True)
class OrbitalState:
    """
    Earth-fixed state of a satellite at one epoch.

    Attributes
    ----------
    epoch : Epoch
        Instant the state refers to
    sv : SV
        Satellite
    position_km : np.ndarray
        ECEF position, shape (3,), km
    velocity_km_s : np.ndarray
        ECEF velocity, shape (3,), km/s
    """
    epoch: Epoch
    sv: object
    position_km: np.ndarray
    velocity_km_s: np.ndarray

    @property
    def radius_km(self) -> float:
        return float(np.linalg.norm(self.position_km))

    @property
    def speed_km_s(self) -> float:
        return float(np.linalg.norm(self.velocity_km_s))

    def to_cartesian_pos_vel(self) -> np.ndarray:
        """[x, y, z, vx, vy, vz] in km and km/s"""
        return np.concatenate([self.position_km, self.velocity_km_s])


def resolve_position_velocity_km(eph, sv, toc: Epoch, epoch: Epoch,
                                 max_iteration: int = DEFAULT_MAX_ITERATION) -> np.ndarray:
    """
    Resolve the ECEF state of ``sv`` at ``epoch`` from one broadcast message

    Parameters
    ----------
    eph : Ephemeris
        Selected broadcast message
    sv : SV
        Satellite
    toc : Epoch
        Time of clock of the message
    epoch : Epoch
        Target instant
    max_iteration : int
        Kepler iteration budget

    Returns
    -------
    np.ndarray, shape (6,)
        [x, y, z, vx, vy, vz] in km and km/s

    Raises
    ------
    MissingDataError, NotSupportedError, DivergedError
        Never returns a partial or zeroed state

    Examples
    --------
    >>> state = resolve_position_velocity_km(eph, SV.from_str("G10"), toc, toc)
    >>> radius_km = np.linalg.norm(state[:3])
    """
    constellation = sv.constellation
    if constellation == Constellation.Glonass or constellation.is_sbas():
        return propagate_state_km(eph, sv, toc, epoch)

    if sv.is_beidou_igso():
        raise BeidouIgsoNotSupportedError(sv)

    kep = eph.to_keplerian(sv)
    solution = solver.solve(kep, sv, epoch, max_iteration, eph.get('adot'))
    logger.debug(f"{sv} at {epoch}: dt={solution.dt:.1f} s, "
                 f"E converged in {solution.iterations} iterations")
    return solver.ecef_position_velocity_km(solution)


def resolve_position_km(eph, sv, toc: Epoch, epoch: Epoch,
                        max_iteration: int = DEFAULT_MAX_ITERATION) -> np.ndarray:
    """ECEF position (km), shape (3,)"""
    return resolve_position_velocity_km(eph, sv, toc, epoch, max_iteration)[:3]


def resolve_orbital_state(eph, sv, toc: Epoch, epoch: Epoch,
                          max_iteration: int = DEFAULT_MAX_ITERATION) -> OrbitalState:
    """Resolve the state of ``sv`` and package it with its epoch"""
    state = resolve_position_velocity_km(eph, sv, toc, epoch, max_iteration)
    return OrbitalState(epoch=epoch, sv=sv, position_km=state[:3], velocity_km_s=state[3:])
