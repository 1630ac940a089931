#!/usr/bin/env python3
"""Test suite for the ephemeris pool and message selection"""

import unittest

import numpy as np

from pybrdc.core.constants import Constellation
from pybrdc.core.data_structures import SV, NavFrameType, NavKey
from pybrdc.core.errors import FrameSelectionError
from pybrdc.core.time import Epoch, TimeScale
from pybrdc.gnss.geometry import AzElRange
from pybrdc.satellite.ephemeris import Ephemeris
from pybrdc.satellite.ephemeris_manager import EphemerisManager

from conftest import (BDS_MEO_ORBITS, GLONASS_R07_ORBITS, GPS_G01_CLOCK,
                      GPS_G01_ORBITS, SBAS_S28_ORBITS)


def _gps_pool(reverse=False):
    """G01 with two consecutive messages, ToC = ToE at 00:00 and 02:00"""
    sv = SV.from_str("G01")
    toc1 = Epoch.from_str("2026-02-09T00:00:00 GPST")
    toc2 = Epoch.from_str("2026-02-09T02:00:00 GPST")
    eph1 = Ephemeris(*GPS_G01_CLOCK, dict(GPS_G01_ORBITS))
    eph2 = eph1.with_orbit('toe', 93600.0).with_orbit('iode', 30.0)
    frames = [(NavKey(toc1, sv), eph1), (NavKey(toc2, sv), eph2)]
    if reverse:
        frames.reverse()
    pool = EphemerisManager()
    for key, eph in frames:
        pool.add_ephemeris(key, eph)
    return pool, sv, (toc1, eph1), (toc2, eph2)


class TestPool(unittest.TestCase):
    """Test pool bookkeeping"""

    def test_add_and_iterate(self):
        pool, sv, (toc1, _), (toc2, _) = _gps_pool(reverse=True)
        self.assertEqual(len(pool), 2)
        self.assertIn(sv, pool)
        self.assertEqual(pool.satellites(), [sv])
        # kept in ToC order whatever the insertion order
        self.assertEqual([key.epoch for key, _ in pool.satellite_frames_iter(sv)], [toc1, toc2])
        self.assertEqual(len(list(pool.frames_iter())), 2)
        self.assertEqual(list(pool.satellite_frames_iter(SV.from_str("G02"))), [])

    def test_duplicate_skipped(self):
        pool, sv, (toc1, eph1), _ = _gps_pool()
        replacement = eph1.with_orbit('iode', 99.0)
        self.assertFalse(pool.add_ephemeris(NavKey(toc1, sv), replacement))
        self.assertEqual(len(pool), 2)
        _, _, selected = pool.select(sv, toc1)
        self.assertIs(selected, eph1)

    def test_drop_expired(self):
        pool, sv, _, (toc2, _) = _gps_pool()
        unknown = SV(Constellation.Unknown, 1)
        pool.add_ephemeris(NavKey(Epoch.from_str("2020-01-01T00:00:00 GPST"), unknown),
                           Ephemeris(0.0, 0.0, 0.0, {}))

        removed = pool.drop_expired(Epoch.from_str("2026-02-09T03:00:00 GPST"))
        self.assertEqual(removed, 1)
        self.assertEqual([key.epoch for key, _ in pool.satellite_frames_iter(sv)], [toc2])
        self.assertIn(unknown, pool)

        removed = pool.drop_expired(Epoch.from_str("2026-02-09T04:00:00 UTC"))
        self.assertEqual(removed, 1)
        self.assertNotIn(sv, pool)
        self.assertEqual(len(pool), 1)


class TestKeplerianSelection(unittest.TestCase):
    """Test selection by closest ToE among valid messages"""

    def setUp(self):
        self.pool, self.sv, (self.toc1, self.eph1), (self.toc2, self.eph2) = _gps_pool()

    def test_closest_toe(self):
        toc, toe, eph = self.pool.select(self.sv, Epoch.from_str("2026-02-09T00:30:00 GPST"))
        self.assertEqual(toc, self.toc1)
        self.assertEqual(toe, self.toc1)
        self.assertIs(eph, self.eph1)

        toc, toe, eph = self.pool.select(self.sv, Epoch.from_str("2026-02-09T01:30:00 GPST"))
        self.assertEqual(toc, self.toc2)
        self.assertEqual(toe, Epoch.from_str("2026-02-09T02:00:00 GPST"))
        self.assertIs(eph, self.eph2)

    def test_insertion_order_irrelevant(self):
        pool, sv, _, _ = _gps_pool(reverse=True)
        for text in ("2026-02-09T00:30:00", "2026-02-09T01:00:00", "2026-02-09T01:30:00"):
            t = Epoch.from_str(text)
            self.assertEqual(pool.select(sv, t)[0], self.pool.select(self.sv, t)[0])

    def test_tie_keeps_first(self):
        toc, _, _ = self.pool.select(self.sv, Epoch.from_str("2026-02-09T01:00:00 GPST"))
        self.assertEqual(toc, self.toc1)

    def test_query_in_another_time_scale(self):
        t = Epoch.from_str("2026-02-09T01:30:00 GPST").to_time_scale(TimeScale.BDT)
        toc, _, _ = self.pool.select(self.sv, t)
        self.assertEqual(toc, self.toc2)

    def test_outside_windows(self):
        self.assertIsNone(self.pool.select(self.sv, Epoch.from_str("2026-02-09T04:00:00 GPST")))
        self.assertIsNone(self.pool.select(self.sv, Epoch.from_str("2026-02-08T22:00:00 GPST")))
        self.assertIsNotNone(self.pool.select(self.sv, Epoch.from_str("2026-02-09T03:59:59 GPST")))

    def test_unknown_satellite(self):
        t = Epoch.from_str("2026-02-09T00:30:00 GPST")
        self.assertIsNone(self.pool.select(SV.from_str("G02"), t))
        with self.assertRaises(FrameSelectionError) as ctx:
            self.pool.select_or_raise(SV.from_str("G02"), t)
        self.assertEqual(ctx.exception.sv, SV.from_str("G02"))

    def test_message_without_toe_skipped(self):
        pool = EphemerisManager()
        orbits = dict(GPS_G01_ORBITS)
        del orbits['week']
        toc = Epoch.from_str("2026-02-09T00:00:00 GPST")
        pool.add_ephemeris(NavKey(toc, self.sv), Ephemeris(*GPS_G01_CLOCK, orbits))
        self.assertIsNone(pool.select(self.sv, toc))

    def test_other_frames_ignored(self):
        pool = EphemerisManager()
        toc = Epoch.from_str("2026-02-09T00:00:00 GPST")
        key = NavKey(toc, self.sv, frmtype=NavFrameType.SystemTimeOffset)
        pool.add_ephemeris(key, self.eph1)
        self.assertEqual(len(pool), 1)
        self.assertIsNone(pool.select(self.sv, toc))

    def test_beidou(self):
        pool = EphemerisManager()
        sv = SV.from_str("C20")
        toc = Epoch.from_time_of_week(1049, 86400.0, TimeScale.BDT)
        eph = Ephemeris(-4.0E-04, 2.0E-11, 0.0, dict(BDS_MEO_ORBITS))
        pool.add_ephemeris(NavKey(toc, sv), eph)

        selected = pool.select(sv, Epoch.from_str("2026-02-09T05:00:00 GPST"))
        self.assertIsNotNone(selected)
        self.assertEqual(selected[1].time_scale, TimeScale.BDT)
        self.assertIsNone(pool.select(sv, Epoch.from_str("2026-02-09T07:00:00 GPST")))


class TestCartesianSelection(unittest.TestCase):
    """Test selection for GLONASS and SBAS"""

    def test_sbas_closest_toc(self):
        pool = EphemerisManager()
        sv = SV.from_str("S28")
        eph = Ephemeris(1.0E-08, 0.0, 0.0, dict(SBAS_S28_ORBITS))
        toc1 = Epoch.from_str("2026-02-09T00:00:00 GPST")
        toc2 = Epoch.from_str("2026-02-09T06:00:00 GPST")
        pool.add_ephemeris(NavKey(toc1, sv), eph)
        pool.add_ephemeris(NavKey(toc2, sv), eph.with_orbit('posZ', 1.0))

        toc, toe, _ = pool.select(sv, Epoch.from_str("2026-02-09T02:00:00 GPST"))
        self.assertEqual(toc, toc1)
        self.assertEqual(toe, toc)
        toc, toe, selected = pool.select(sv, Epoch.from_str("2026-02-09T04:00:00 GPST"))
        self.assertEqual(toc, toc2)
        self.assertEqual(selected.get('posZ'), 1.0)
        # no validity filter for GEO messages
        self.assertIsNotNone(pool.select(sv, Epoch.from_str("2026-03-01T00:00:00 GPST")))

    def test_glonass(self):
        pool = EphemerisManager()
        sv = SV.from_str("R07")
        eph = Ephemeris(-5.1E-05, 9.1E-13, 0.0, dict(GLONASS_R07_ORBITS))
        toc1 = Epoch.from_str("2026-02-09T00:15:00 UTC")
        toc2 = Epoch.from_str("2026-02-09T00:45:00 UTC")
        pool.add_ephemeris(NavKey(toc1, sv), eph)
        pool.add_ephemeris(NavKey(toc2, sv), eph)

        toc, toe, _ = pool.select(sv, Epoch.from_str("2026-02-09T00:40:00 UTC"))
        self.assertEqual(toc, toc2)
        self.assertEqual(toe, toc2)
        toc, _, _ = pool.select(sv, Epoch.from_str("2026-02-09T00:20:18 GPST"))
        self.assertEqual(toc, toc1)
        self.assertIsNone(pool.select(sv, Epoch.from_str("2026-02-09T02:00:00 UTC")))


class TestPoolResolution(unittest.TestCase):
    """Test resolution through the pool"""

    def setUp(self):
        self.pool, self.sv, (self.toc1, self.eph1), _ = _gps_pool()
        self.t = Epoch.from_str("2026-02-09T00:20:00 GPST")

    def test_position_velocity(self):
        state = self.pool.satellite_position_velocity_km(self.sv, self.t)
        expected = self.eph1.resolve_position_velocity_km(self.sv, self.toc1, self.t)
        np.testing.assert_array_equal(state, expected)

        orbital = self.pool.satellite_orbital_state(self.sv, self.t)
        np.testing.assert_array_equal(orbital.to_cartesian_pos_vel(), expected)

    def test_clock(self):
        self.assertEqual(self.pool.satellite_clock_correction(self.sv, self.t),
                         self.eph1.clock_correction(self.sv, self.toc1, self.t))

    def test_look_angles(self):
        position_km = self.eph1.resolve_position_km(self.sv, self.toc1, self.t)
        # observer right below the satellite
        rx_km = position_km / np.linalg.norm(position_km) * 6371.0
        result = self.pool.satellite_azimuth_elevation_range(self.sv, self.t, rx_km)
        self.assertIsInstance(result, AzElRange)
        self.assertGreater(result.elevation_deg, 80.0)
        self.assertAlmostEqual(result.range_km, np.linalg.norm(position_km) - 6371.0, places=6)

    def test_no_frame(self):
        with self.assertRaises(FrameSelectionError):
            self.pool.satellite_position_velocity_km(self.sv, Epoch.from_str("2026-02-10T00:00:00 GPST"))


if __name__ == '__main__':
    unittest.main()
