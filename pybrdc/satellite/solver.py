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

"""Kepler solver: broadcast elements to ECEF position and velocity

Implements the user algorithm of the GPS/QZSS, Galileo and BeiDou interface
control documents with the constellation's own mu, earth rotation rate and
relativistic constant. Velocities are obtained analytically.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..core.constants import (BDS_GEO_INCLINATION, DEFAULT_MAX_ITERATION,
                              KEPLER_TOLERANCE_RAD, Constellation,
                              earth_rotation_rate, gravitational_constant,
                              relativistic_constant)
from ..core.errors import (BadOperationError, BeidouIgsoNotSupportedError,
                           DivergedError, NotSupportedError)
from ..core.time import Epoch
from ..logger import LogLevel
from .kepler import Keplerian

logger = logging.getLogger(__name__)

__all__ = [
    'KeplerSolution', 'solve_kepler', 'solve', 'meo_rotation',
    'beidou_geo_rotation', 'ecef_position_velocity_m', 'ecef_position_velocity_km',
]

# Constellations using the single node/inclination rotation
_SINGLE_ROTATION = (Constellation.GPS, Constellation.QZSS, Constellation.Galileo,
                    Constellation.BeiDou, Constellation.IRNSS)


def solve_kepler(ma_rad: float, ecc: float,
                 max_iteration: int = DEFAULT_MAX_ITERATION,
                 tolerance: float = KEPLER_TOLERANCE_RAD) -> Tuple[float, int]:
    """
    Solve Kepler's equation E - e sin(E) = M

    Parameters:
    -----------
    ma_rad : float
        Mean anomaly (rad), any range
    ecc : float
        Eccentricity, 0 <= e < 1
    max_iteration : int
        Iteration budget
    tolerance : float
        Convergence threshold on the correction |E_k - E_k-1| (rad)

    Returns:
    --------
    ea_rad : float
        Eccentric anomaly (rad), same branch as M wrapped to [-pi, pi)
    iterations : int
        Number of iterations used

    Raises:
    -------
    DivergedError
        When the budget is exhausted before convergence

    Notes:
    ------
    Newton steps started from Danby's guess E0 = M + 0.85 e sign(sin M),
    which converge in a handful of iterations for every e < 1.
    """
    ma = (ma_rad + np.pi) % (2.0 * np.pi) - np.pi
    ea = ma + 0.85 * ecc * np.sign(np.sin(ma))
    delta = np.inf

    for iteration in range(1, max_iteration + 1):
        delta = (ea - ecc * np.sin(ea) - ma) / (1.0 - ecc * np.cos(ea))
        ea -= delta
        logger.log(LogLevel.TRACE.value, f"kepler iteration {iteration}: E={ea:.15f} dE={delta:.3e}")
        if abs(delta) < tolerance:
            return float(ea), iteration

    raise DivergedError(max_iteration, float(abs(delta)))


@dataclass(frozen=True)
class KeplerSolution:
    """Intermediate terms of the broadcast orbit at one epoch.

    Angles in radians, distances in meters, rates per second.
    ``longan_dot_rad_s`` is the node rate driving the first rotation stage;
    ``fd_omega_k`` is the Earth-fixed node rate Omega_dot - Omega_e.
    ``ma_rad`` is wrapped to [-pi, pi), the branch ``ea_rad`` is solved on.
    """
    sv: object
    epoch: Epoch
    dt: float
    sma_m: float
    ecc: float
    ma_rad: float
    ea_rad: float
    ea_dot_rad_s: float
    ta_rad: float
    ta_dot_rad_s: float
    u_rad: float
    r_m: float
    i_rad: float
    longan_rad: float
    u_dot_rad_s: float
    r_dot_m_s: float
    i_dot_rad_s: float
    longan_dot_rad_s: float
    fd_omega_k: float
    earth_rotation_rad_s: float
    dtr_s: float
    dtr_dot_s_s: float
    iterations: int

    def orbital_plane(self) -> Tuple[float, float, float, float]:
        """(x, y, x_dot, y_dot) in the orbital plane"""
        cos_u, sin_u = np.cos(self.u_rad), np.sin(self.u_rad)
        x = self.r_m * cos_u
        y = self.r_m * sin_u
        x_dot = self.r_dot_m_s * cos_u - self.r_m * self.u_dot_rad_s * sin_u
        y_dot = self.r_dot_m_s * sin_u + self.r_m * self.u_dot_rad_s * cos_u
        return x, y, x_dot, y_dot


def solve(kep: Keplerian, sv, epoch: Epoch,
          max_iteration: int = DEFAULT_MAX_ITERATION,
          adot_m_s: Optional[float] = None) -> KeplerSolution:
    """
    Evaluate the broadcast orbit of ``sv`` at ``epoch``

    Parameters:
    -----------
    kep : Keplerian
        Elements referenced to ToE
    sv : SV
        Satellite, selects mu, earth rotation rate and node model
    epoch : Epoch
        Target instant, any time scale
    max_iteration : int
        Kepler iteration budget
    adot_m_s : float, optional
        CNAV semi-major axis rate (m/s)

    Returns:
    --------
    KeplerSolution
    """
    constellation = sv.constellation
    mu = gravitational_constant(constellation)
    omge = earth_rotation_rate(constellation)
    frel = relativistic_constant(constellation)

    dt = kep.dt(epoch)
    adot = adot_m_s or 0.0
    a = kep.sma_m + adot * dt
    e = kep.ecc

    n0 = np.sqrt(mu / a ** 3)
    n = n0 + kep.dn_rad
    ma = (kep.ma_rad + n * dt + np.pi) % (2.0 * np.pi) - np.pi
    # d(n0)/dt through the drifting axis
    ma_dot = n - 1.5 * n0 * adot / a * dt

    ea, iterations = solve_kepler(ma, e, max_iteration)
    sin_e, cos_e = np.sin(ea), np.cos(ea)
    one_minus_ecos = 1.0 - e * cos_e
    sqrt_1me2 = np.sqrt(1.0 - e * e)

    ea_dot = ma_dot / one_minus_ecos
    ta = np.arctan2(sqrt_1me2 * sin_e, cos_e - e)
    ta_dot = sqrt_1me2 * ea_dot / one_minus_ecos

    phi = ta + kep.aop_rad
    sin_2phi, cos_2phi = np.sin(2.0 * phi), np.cos(2.0 * phi)

    du = kep.cus_rad * sin_2phi + kep.cuc_rad * cos_2phi
    dr = kep.crs_m * sin_2phi + kep.crc_m * cos_2phi
    di = kep.cis_rad * sin_2phi + kep.cic_rad * cos_2phi

    du_dot = 2.0 * ta_dot * (kep.cus_rad * cos_2phi - kep.cuc_rad * sin_2phi)
    dr_dot = 2.0 * ta_dot * (kep.crs_m * cos_2phi - kep.crc_m * sin_2phi)
    di_dot = 2.0 * ta_dot * (kep.cis_rad * cos_2phi - kep.cic_rad * sin_2phi)

    u = phi + du
    r = a * one_minus_ecos + dr
    i = kep.inc_rad + di + kep.i_dot_rad_s * dt

    u_dot = ta_dot + du_dot
    r_dot = a * e * sin_e * ea_dot + adot * one_minus_ecos + dr_dot
    i_dot = kep.i_dot_rad_s + di_dot

    toe_seconds = kep.toe_seconds
    fd_omega_k = kep.omega_dot_rad_s - omge
    if sv.is_beidou_geo():
        # Earth rotation enters through the second rotation stage
        longan = kep.longan_rad + kep.omega_dot_rad_s * dt - omge * toe_seconds
        longan_dot = kep.omega_dot_rad_s
    else:
        longan = kep.longan_rad + fd_omega_k * dt - omge * toe_seconds
        longan_dot = fd_omega_k

    sqrt_a = np.sqrt(a)
    dtr = frel * e * sqrt_a * sin_e
    dtr_dot = frel * e * sqrt_a * cos_e * ea_dot

    return KeplerSolution(
        sv=sv, epoch=epoch, dt=dt, sma_m=a, ecc=e,
        ma_rad=float(ma), ea_rad=ea, ea_dot_rad_s=float(ea_dot),
        ta_rad=float(ta), ta_dot_rad_s=float(ta_dot),
        u_rad=float(u), r_m=float(r), i_rad=float(i), longan_rad=float(longan),
        u_dot_rad_s=float(u_dot), r_dot_m_s=float(r_dot), i_dot_rad_s=float(i_dot),
        longan_dot_rad_s=float(longan_dot), fd_omega_k=float(fd_omega_k),
        earth_rotation_rad_s=omge,
        dtr_s=float(dtr), dtr_dot_s_s=float(dtr_dot),
        iterations=iterations,
    )


def meo_rotation(solution: KeplerSolution) -> Tuple[np.ndarray, np.ndarray]:
    """
    Rotate the orbital plane state by R_z(Omega_k) R_x(i)

    Returns:
    --------
    pos : np.ndarray, shape (3,)
        Position (m)
    vel : np.ndarray, shape (3,)
        Velocity (m/s), closed-form derivative of the rotation
    """
    x, y, x_dot, y_dot = solution.orbital_plane()
    sin_o, cos_o = np.sin(solution.longan_rad), np.cos(solution.longan_rad)
    sin_i, cos_i = np.sin(solution.i_rad), np.cos(solution.i_rad)
    o_dot = solution.longan_dot_rad_s
    i_dot = solution.i_dot_rad_s

    px = x * cos_o - y * cos_i * sin_o
    py = x * sin_o + y * cos_i * cos_o
    pz = y * sin_i

    vx = x_dot * cos_o - y_dot * cos_i * sin_o + y * sin_i * sin_o * i_dot - py * o_dot
    vy = x_dot * sin_o + y_dot * cos_i * cos_o - y * sin_i * cos_o * i_dot + px * o_dot
    vz = y_dot * sin_i + y * cos_i * i_dot

    return np.array([px, py, pz]), np.array([vx, vy, vz])


def _rot_x(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _rot_z(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rot_z_derivative(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[-s, -c, 0.0], [c, -s, 0.0], [0.0, 0.0, 0.0]])


def beidou_geo_rotation(solution: KeplerSolution) -> Tuple[np.ndarray, np.ndarray]:
    """
    BeiDou GEO two-stage rotation

    The inertial-like state from :func:`meo_rotation` (node advanced by
    Omega_dot only) is tilted by +5 deg about X, then rotated by
    -Omega_e dt about Z. Velocity follows the product rule across both
    stages.
    """
    q, q_dot = meo_rotation(solution)
    angle = -solution.earth_rotation_rad_s * solution.dt

    tilt = _rot_x(BDS_GEO_INCLINATION)
    w = tilt @ q
    w_dot = tilt @ q_dot

    pos = _rot_z(angle) @ w
    vel = _rot_z(angle) @ w_dot - solution.earth_rotation_rad_s * (_rot_z_derivative(angle) @ w)
    return pos, vel


def ecef_position_velocity_m(solution: KeplerSolution) -> Tuple[np.ndarray, np.ndarray]:
    """Dispatch to the rotation modeled for the satellite class"""
    sv = solution.sv
    constellation = sv.constellation
    if constellation == Constellation.Glonass or constellation.is_sbas():
        raise BadOperationError(f"{sv}: Cartesian broadcast, use the state propagator")
    if sv.is_beidou_igso():
        raise BeidouIgsoNotSupportedError(sv)
    if sv.is_beidou_geo():
        return beidou_geo_rotation(solution)
    if constellation in _SINGLE_ROTATION:
        return meo_rotation(solution)
    raise NotSupportedError(constellation)


def ecef_position_velocity_km(solution: KeplerSolution) -> np.ndarray:
    """ECEF [x, y, z, vx, vy, vz] in km and km/s"""
    pos, vel = ecef_position_velocity_m(solution)
    return np.concatenate([pos, vel]) / 1000.0
