#!/usr/bin/env python3
"""Shared broadcast messages for the test suite"""

import pytest

from pybrdc.core.constants import Constellation
from pybrdc.core.data_structures import SV
from pybrdc.core.time import Epoch
from pybrdc.satellite.ephemeris import Ephemeris
from pybrdc.satellite.health import BdsSatH1, GlonassHealth, GpsQzssl1l2l5Health, GeoHealth

# G01 LNAV, 2026-02-09 00:00:00 GPST (RINEX 2 broadcast record)
GPS_G01_CLOCK = (3.345320001245E-04, -5.002220859751E-12, 0.0)
GPS_G01_ORBITS = {
    'iode': 29.0,
    'crs': -2.831250000000E+01,
    'deltaN': 4.651622330170E-09,
    'm0': -2.685675915079E+00,
    'cuc': -1.467764377594E-06,
    'e': 1.488578156568E-03,
    'cus': 5.397945642471E-06,
    'sqrta': 5.153630035400E+03,
    'toe': 8.640000000000E+04,
    'cic': -5.401670932770E-08,
    'omega0': -2.769294893459E+00,
    'cis': 1.490116119385E-08,
    'i0': 9.584031772936E-01,
    'crc': 2.753437500000E+02,
    'omega': 3.752528970751E-02,
    'omegaDot': -8.224628303067E-09,
    'idot': -1.357199389945E-10,
    'l2Codes': 1.0,
    'week': 2405.0,
    'l2pDataFlag': 0.0,
    'svAccuracy': 2.0,
    'health': GpsQzssl1l2l5Health(0),
    'tgd': -8.847564458847E-09,
    'iodc': 541.0,
    't_tm': 79206.0,
    'fitInt': 4.0,
}

# Geostationary-like BeiDou elements (C03), BDT week 1049
BDS_GEO_ORBITS = {
    'aode': 1.0,
    'crs': 2.5E+01,
    'deltaN': 1.2E-09,
    'm0': 1.1,
    'cuc': 4.0E-07,
    'e': 6.0E-04,
    'cus': -3.0E-06,
    'sqrta': 6.4934E+03,
    'toe': 8.640000000000E+04,
    'cic': 2.0E-08,
    'omega0': 2.9,
    'cis': -1.5E-08,
    'i0': 8.0E-02,
    'crc': -3.2E+02,
    'omega': 0.4,
    'omegaDot': -3.0E-09,
    'idot': 1.0E-10,
    'week': 1049.0,
    'health': BdsSatH1(0),
    'tgd1b1b3': -2.0E-09,
    'tgd2b2b3': 3.0E-09,
}

# MEO BeiDou elements (C20)
BDS_MEO_ORBITS = dict(BDS_GEO_ORBITS, **{
    'sqrta': 5.282623E+03,
    'e': 8.0E-04,
    'i0': 9.6E-01,
    'omegaDot': -6.9E-09,
})

# GLONASS R07 FDMA state, km, km/s, km/s^2
GLONASS_R07_ORBITS = {
    'posX': 1.2000876E+04,
    'posY': -1.5411234E+04,
    'posZ': 1.7023005E+04,
    'velX': 1.5123456,
    'velY': 1.9876543,
    'velZ': 0.7654321,
    'accelX': 1.862645149231E-09,
    'accelY': -2.793967723846E-09,
    'accelZ': -3.725290298462E-09,
    'health': GlonassHealth(0),
    'channel': 5.0,
}

# SBAS S28 GEO state
SBAS_S28_ORBITS = {
    'posX': 3.3650000E+04,
    'posY': 2.4440000E+04,
    'posZ': 0.0,
    'velX': 1.0E-04,
    'velY': -2.0E-04,
    'velZ': 3.0E-04,
    'health': GeoHealth(0),
}


@pytest.fixture
def gps_sv():
    return SV(Constellation.GPS, 1)


@pytest.fixture
def gps_toc():
    return Epoch.from_str("2026-02-09T00:00:00 GPST")


@pytest.fixture
def gps_ephemeris():
    return Ephemeris(*GPS_G01_CLOCK, dict(GPS_G01_ORBITS))


@pytest.fixture
def glonass_sv():
    return SV(Constellation.Glonass, 7)


@pytest.fixture
def glonass_toc():
    return Epoch.from_str("2026-02-09T00:15:00 UTC")


@pytest.fixture
def glonass_ephemeris():
    return Ephemeris(-5.1E-05, 9.1E-13, 0.0, dict(GLONASS_R07_ORBITS))


@pytest.fixture
def sbas_sv():
    return SV(Constellation.SBAS, 28)


@pytest.fixture
def sbas_ephemeris():
    return Ephemeris(1.0E-08, 0.0, 0.0, dict(SBAS_S28_ORBITS))
