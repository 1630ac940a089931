#!/usr/bin/env python3
"""Test suite for the Kepler solver and ECEF rotations"""

import dataclasses
import logging
import unittest
from unittest import mock

import numpy as np
import pytest

from pybrdc.core.constants import OMGE, OMGE_BDS, Constellation
from pybrdc.core.data_structures import SV
from pybrdc.core.errors import (BadOperationError, BeidouIgsoNotSupportedError,
                                DivergedError, NotSupportedError)
from pybrdc.core.time import Epoch, TimeScale
from pybrdc.satellite import solver
from pybrdc.satellite.ephemeris import Ephemeris
from pybrdc.satellite.solver import solve, solve_kepler

from conftest import (BDS_GEO_ORBITS, BDS_MEO_ORBITS, GPS_G01_CLOCK,
                      GPS_G01_ORBITS)


def _wrap(angle):
    return (angle + np.pi) % (2.0 * np.pi) - np.pi


def _textbook_orbit_plane(orbits, tk, mu):
    """Orbit plane terms computed with a plain fixed-point Kepler iteration"""
    a = orbits['sqrta'] ** 2
    e = orbits['e']
    n = np.sqrt(mu / a ** 3) + orbits['deltaN']
    m = orbits['m0'] + n * tk
    ea = m
    for _ in range(50):
        ea = m + e * np.sin(ea)
    nu = np.arctan2(np.sqrt(1.0 - e * e) * np.sin(ea), np.cos(ea) - e)
    phi = nu + orbits['omega']
    u = phi + orbits['cus'] * np.sin(2 * phi) + orbits['cuc'] * np.cos(2 * phi)
    r = a * (1.0 - e * np.cos(ea)) + orbits['crs'] * np.sin(2 * phi) + orbits['crc'] * np.cos(2 * phi)
    i = (orbits['i0'] + orbits['idot'] * tk
         + orbits['cis'] * np.sin(2 * phi) + orbits['cic'] * np.cos(2 * phi))
    return r * np.cos(u), r * np.sin(u), i


def _textbook_gps_position_km(orbits, tk):
    """User algorithm of IS-GPS-200, table 20-IV"""
    mu, omge = 3.986005e14, 7.2921151467e-5
    xp, yp, i = _textbook_orbit_plane(orbits, tk, mu)
    node = orbits['omega0'] + (orbits['omegaDot'] - omge) * tk - omge * orbits['toe']
    return np.array([
        xp * np.cos(node) - yp * np.cos(i) * np.sin(node),
        xp * np.sin(node) + yp * np.cos(i) * np.cos(node),
        yp * np.sin(i),
    ]) / 1000.0


def _textbook_bds_geo_position_km(orbits, tk):
    """BeiDou ICD GEO algorithm: R_Z(omega_e tk) R_X(-5 deg) applied to the GK frame"""
    mu, omge = 3.986004418e14, 7.292115e-5
    xp, yp, i = _textbook_orbit_plane(orbits, tk, mu)
    node = orbits['omega0'] + orbits['omegaDot'] * tk - omge * orbits['toe']
    gk = np.array([
        xp * np.cos(node) - yp * np.cos(i) * np.sin(node),
        xp * np.sin(node) + yp * np.cos(i) * np.cos(node),
        yp * np.sin(i),
    ])
    phi = np.deg2rad(-5.0)
    r_x = np.array([[1.0, 0.0, 0.0],
                    [0.0, np.cos(phi), np.sin(phi)],
                    [0.0, -np.sin(phi), np.cos(phi)]])
    z = omge * tk
    r_z = np.array([[np.cos(z), np.sin(z), 0.0],
                    [-np.sin(z), np.cos(z), 0.0],
                    [0.0, 0.0, 1.0]])
    return r_z @ r_x @ gk / 1000.0


class TestSolveKepler(unittest.TestCase):
    """Test the eccentric anomaly iteration"""

    def test_convergence_grid(self):
        for ecc in np.linspace(0.0, 0.9, 10):
            for ma in np.linspace(-10.0, 10.0, 41):
                ea, iterations = solve_kepler(ma, ecc, 15)
                residual = _wrap(ea - ecc * np.sin(ea) - ma)
                self.assertLess(abs(residual), 1e-9, f"e={ecc} M={ma}")
                self.assertLessEqual(iterations, 15)

    def test_circular_orbit(self):
        ea, iterations = solve_kepler(1.0, 0.0)
        self.assertAlmostEqual(ea, 1.0, places=12)
        self.assertEqual(iterations, 1)

    def test_wrapped_branch(self):
        ea, _ = solve_kepler(2.0 * np.pi + 0.5, 0.01)
        self.assertTrue(-np.pi <= ea < np.pi)
        ea_ref, _ = solve_kepler(0.5, 0.01)
        self.assertAlmostEqual(ea, ea_ref, places=12)

    def test_diverged(self):
        with self.assertRaises(DivergedError) as ctx:
            solve_kepler(1.0, 0.1, 0)
        self.assertEqual(ctx.exception.max_iteration, 0)

    def test_trace_logging(self):
        with self.assertLogs('pybrdc.satellite.solver', level=5) as logs:
            solve_kepler(1.0, 0.1)
        self.assertTrue(all(record.levelname == 'TRACE' for record in logs.records))
        self.assertIn('kepler iteration 1', logs.output[0])


class TestSolveGps(unittest.TestCase):
    """Test the MEO path against a textbook computation"""

    def setUp(self):
        self.sv = SV.from_str("G01")
        self.eph = Ephemeris(*GPS_G01_CLOCK, dict(GPS_G01_ORBITS))
        self.toc = Epoch.from_str("2026-02-09T00:00:00 GPST")

    def test_position_matches_textbook(self):
        for tk in (-3600.0, 0.0, 1800.0, 7000.0):
            state = self.eph.resolve_position_velocity_km(self.sv, self.toc, self.toc + tk)
            expected = _textbook_gps_position_km(GPS_G01_ORBITS, tk)
            np.testing.assert_allclose(state[:3], expected, rtol=0.0, atol=1e-6)

    def test_radius_and_speed(self):
        state = self.eph.resolve_orbital_state(self.sv, self.toc, self.toc + 900.0)
        self.assertTrue(26400.0 < state.radius_km < 26700.0)
        self.assertTrue(2.5 < state.speed_km_s < 4.5)

    def test_velocity_matches_finite_difference(self):
        t = self.toc + 1800.0
        state = self.eph.resolve_position_velocity_km(self.sv, self.toc, t)
        plus = self.eph.resolve_position_km(self.sv, self.toc, t + 0.5)
        minus = self.eph.resolve_position_km(self.sv, self.toc, t - 0.5)
        np.testing.assert_allclose(state[3:], plus - minus, rtol=0.0, atol=1e-6)

    def test_velocity_with_axis_rate(self):
        eph = self.eph.with_orbit('adot', 0.05)
        t = self.toc + 3600.0
        state = eph.resolve_position_velocity_km(self.sv, self.toc, t)
        plus = eph.resolve_position_km(self.sv, self.toc, t + 0.5)
        minus = eph.resolve_position_km(self.sv, self.toc, t - 0.5)
        np.testing.assert_allclose(state[3:], plus - minus, rtol=0.0, atol=1e-6)
        self.assertFalse(np.allclose(state[:3], self.eph.resolve_position_km(self.sv, self.toc, t),
                                     rtol=0.0, atol=1e-4))

    def test_time_scale_of_target(self):
        t = self.toc + 1234.5
        ref = self.eph.resolve_position_velocity_km(self.sv, self.toc, t)
        for scale in (TimeScale.UTC, TimeScale.BDT, TimeScale.TAI):
            other = self.eph.resolve_position_velocity_km(self.sv, self.toc, t.to_time_scale(scale))
            np.testing.assert_allclose(other, ref, rtol=0.0, atol=1e-9)

    def test_solution_terms(self):
        kep = self.eph.to_keplerian(self.sv)
        solution = solve(kep, self.sv, self.toc + 60.0)
        self.assertEqual(solution.dt, 60.0)
        self.assertEqual(solution.earth_rotation_rad_s, OMGE)
        self.assertAlmostEqual(solution.fd_omega_k, kep.omega_dot_rad_s - OMGE, places=15)
        self.assertEqual(solution.longan_dot_rad_s, solution.fd_omega_k)
        self.assertGreaterEqual(solution.iterations, 1)

    def test_mean_anomaly_on_solved_branch(self):
        kep = self.eph.to_keplerian(self.sv)
        for tk in (-5400.0, 7200.0, 43200.0):
            solution = solve(kep, self.sv, self.toc + tk)
            self.assertTrue(-np.pi <= solution.ma_rad < np.pi)
            residual = solution.ea_rad - solution.ecc * np.sin(solution.ea_rad) - solution.ma_rad
            self.assertLess(abs(residual), 1e-9)

    def test_diverged_propagates(self):
        with self.assertRaises(DivergedError):
            self.eph.resolve_position_velocity_km(self.sv, self.toc, self.toc, max_iteration=0)


class TestSolveBeidouGeo(unittest.TestCase):
    """Test the BeiDou GEO two-stage rotation"""

    def setUp(self):
        self.sv = SV.from_str("C03")
        self.eph = Ephemeris(2.0E-04, 1.0E-11, 0.0, dict(BDS_GEO_ORBITS))
        self.toe = Epoch.from_time_of_week(1049, 86400.0, TimeScale.BDT)

    def test_position_matches_textbook(self):
        for tk in (0.0, 1800.0, -5400.0):
            pos = self.eph.resolve_position_km(self.sv, self.toe, self.toe + tk)
            expected = _textbook_bds_geo_position_km(BDS_GEO_ORBITS, tk)
            np.testing.assert_allclose(pos, expected, rtol=0.0, atol=1e-6)

    def test_geostationary_radius(self):
        state = self.eph.resolve_orbital_state(self.sv, self.toe, self.toe + 600.0)
        self.assertTrue(42100.0 < state.radius_km < 42250.0)
        # nearly fixed over the Earth, inertial speed would be ~3 km/s
        self.assertLess(state.speed_km_s, 1.0)

    def test_velocity_matches_finite_difference(self):
        t = self.toe + 1800.0
        state = self.eph.resolve_position_velocity_km(self.sv, self.toe, t)
        plus = self.eph.resolve_position_km(self.sv, self.toe, t + 0.5)
        minus = self.eph.resolve_position_km(self.sv, self.toe, t - 0.5)
        np.testing.assert_allclose(state[3:], plus - minus, rtol=0.0, atol=1e-6)

    def test_first_stage_rate(self):
        kep = self.eph.to_keplerian(self.sv)
        solution = solve(kep, self.sv, self.toe + 60.0)
        self.assertEqual(solution.earth_rotation_rad_s, OMGE_BDS)
        self.assertEqual(solution.longan_dot_rad_s, kep.omega_dot_rad_s)


class TestRotationDispatch(unittest.TestCase):
    """Test which rotation model applies to which satellite"""

    def setUp(self):
        sv = SV.from_str("G01")
        eph = Ephemeris(*GPS_G01_CLOCK, dict(GPS_G01_ORBITS))
        toe = Epoch.from_str("2026-02-09T00:00:00 GPST")
        self.solution = solve(eph.to_keplerian(sv), sv, toe)
        self.result = (np.zeros(3), np.zeros(3))

    def _dispatch(self, sv):
        solution = dataclasses.replace(self.solution, sv=sv)
        with mock.patch.object(solver, 'meo_rotation', return_value=self.result) as meo, \
                mock.patch.object(solver, 'beidou_geo_rotation', return_value=self.result) as geo:
            solver.ecef_position_velocity_m(solution)
        return meo, geo

    def test_single_rotation(self):
        for text in ("G01", "J03", "E11", "C20", "I05"):
            meo, geo = self._dispatch(SV.from_str(text))
            meo.assert_called_once()
            geo.assert_not_called()

    def test_beidou_geo(self):
        for text in ("C01", "C05", "C59", "C62"):
            meo, geo = self._dispatch(SV.from_str(text))
            geo.assert_called_once()
            meo.assert_not_called()

    def test_beidou_igso(self):
        with self.assertRaises(BeidouIgsoNotSupportedError):
            self._dispatch(SV.from_str("C08"))

    def test_cartesian(self):
        with self.assertRaises(BadOperationError):
            self._dispatch(SV.from_str("R07"))
        with self.assertRaises(BadOperationError):
            self._dispatch(SV(Constellation.KASS, 44))

    def test_unknown(self):
        with self.assertRaises(NotSupportedError):
            self._dispatch(SV(Constellation.Unknown, 1))

    def test_km_output(self):
        pos, vel = solver.ecef_position_velocity_m(self.solution)
        state = solver.ecef_position_velocity_km(self.solution)
        np.testing.assert_allclose(state, np.concatenate([pos, vel]) / 1000.0)


@pytest.mark.parametrize("text", ["C06", "C13", "C38", "C56"])
def test_igso_resolution_refused(text):
    eph = Ephemeris(2.0E-04, 1.0E-11, 0.0, dict(BDS_GEO_ORBITS))
    toe = Epoch.from_time_of_week(1049, 86400.0, TimeScale.BDT)
    with pytest.raises(BeidouIgsoNotSupportedError):
        eph.resolve_position_velocity_km(SV.from_str(text), toe, toe)


@pytest.mark.parametrize("text", ["C11", "C12", "C14", "C32", "C34", "C37"])
def test_beidou_meo_resolution(text):
    eph = Ephemeris(-4.0E-04, 2.0E-11, 0.0, dict(BDS_MEO_ORBITS))
    toe = Epoch.from_time_of_week(1049, 86400.0, TimeScale.BDT)
    t = toe + 600.0
    state = eph.resolve_position_velocity_km(SV.from_str(text), toe, t)
    # MEO PRNs share the single-rotation path
    expected = eph.resolve_position_velocity_km(SV.from_str("C20"), toe, t)
    np.testing.assert_array_equal(state, expected)
    assert 25000.0 < np.linalg.norm(state[:3]) < 30000.0


def test_unknown_constellation_refused():
    eph = Ephemeris(*GPS_G01_CLOCK, dict(GPS_G01_ORBITS))
    toc = Epoch.from_str("2026-02-09T00:00:00 GPST")
    with pytest.raises(NotSupportedError):
        eph.resolve_position_velocity_km(SV(Constellation.Unknown, 1), toc, toc)


def test_solver_debug_log(caplog):
    eph = Ephemeris(*GPS_G01_CLOCK, dict(GPS_G01_ORBITS))
    toc = Epoch.from_str("2026-02-09T00:00:00 GPST")
    with caplog.at_level(logging.DEBUG, logger='pybrdc.satellite.satellite_position'):
        eph.resolve_position_km(SV.from_str("G01"), toc, toc + 60.0)
    assert any('G01' in message for message in caplog.messages)


if __name__ == '__main__':
    unittest.main()
