#!/usr/bin/env python3
"""
Broadcast Orbit Resolution Example
==================================

This example fills an ephemeris pool with decoded broadcast messages and
resolves satellite states, clock offsets and look angles over one hour.

Key concepts:
- Selection: the pool picks, per satellite, the message valid at the epoch
- Keplerian satellites (GPS here) go through the Kepler solver
- GLONASS states are extrapolated from the broadcast Cartesian state
"""

import numpy as np

from pybrdc.core.constants import RE_WGS84
from pybrdc.core.data_structures import SV, NavKey
from pybrdc.core.errors import EphemerisError
from pybrdc.core.time import Epoch, TimeScale
from pybrdc.logger import setup_logger
from pybrdc.satellite.ephemeris import Ephemeris
from pybrdc.satellite.ephemeris_manager import EphemerisManager
from pybrdc.satellite.health import GlonassHealth, GpsQzssl1l2l5Health

logger = setup_logger("pybrdc", "INFO")


def build_pool() -> EphemerisManager:
    """Pool with one GPS and one GLONASS message"""
    pool = EphemerisManager()

    g01 = Ephemeris(
        3.345320001245E-04, -5.002220859751E-12, 0.0,
        {
            'week': 2405, 'toe': 86400.0, 'health': GpsQzssl1l2l5Health(0),
            'sqrta': 5.153630035400E+03, 'e': 1.488578156568E-03,
            'i0': 9.584031772936E-01, 'omega0': -2.769294893459E+00,
            'omega': 3.752528970751E-02, 'm0': -2.685675915079E+00,
            'deltaN': 4.651622330170E-09, 'idot': -1.357199389945E-10,
            'omegaDot': -8.224628303067E-09,
            'cus': 5.397945642471E-06, 'cuc': -1.467764377594E-06,
            'cis': 1.490116119385E-08, 'cic': -5.401670932770E-08,
            'crs': -2.831250000000E+01, 'crc': 2.753437500000E+02,
            'tgd': -8.847564458847E-09,
        },
    )
    pool.add_ephemeris(NavKey(Epoch.from_str("2026-02-09T00:00:00 GPST"), SV.from_str("G01")), g01)

    r07 = Ephemeris(
        -5.1E-05, 9.1E-13, 0.0,
        {
            'posX': 1.2000876E+04, 'posY': -1.5411234E+04, 'posZ': 1.7023005E+04,
            'velX': 1.5123456, 'velY': 1.9876543, 'velZ': 0.7654321,
            'accelX': 1.862645149231E-09, 'accelY': -2.793967723846E-09,
            'accelZ': -3.725290298462E-09,
            'health': GlonassHealth(0), 'channel': 5,
        },
    )
    pool.add_ephemeris(NavKey(Epoch.from_str("2026-02-09T00:15:00 UTC"), SV.from_str("R07")), r07)
    return pool


def main():
    pool = build_pool()
    logger.info(f"Pool holds {len(pool)} messages for {len(pool.satellites())} satellites")

    # Observer on the equator, prime meridian (km)
    rx_km = np.array([RE_WGS84 / 1e3, 0.0, 0.0])
    start = Epoch.from_str("2026-02-09T00:00:00 GPST")

    for minute in range(0, 60, 15):
        t = start + 60.0 * minute
        for sv in pool.satellites():
            try:
                toc, _, eph = pool.select_or_raise(sv, t)
                state = eph.resolve_orbital_state(sv, toc, t)
                dts = eph.clock_correction(sv, toc, t)
                look = pool.satellite_azimuth_elevation_range(sv, t, rx_km)
            except EphemerisError as e:
                logger.warning(f"{sv} at {t}: {e}")
                continue

            logger.info(
                f"{t.to_time_scale(TimeScale.UTC)} {sv}: "
                f"|r|={state.radius_km:.3f} km |v|={state.speed_km_s:.4f} km/s "
                f"dts={dts * 1e6:.3f} us "
                f"az={look.azimuth_deg:.1f} el={look.elevation_deg:.1f} "
                f"healthy={eph.satellite_is_healthy()}"
            )


if __name__ == "__main__":
    main()
