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

"""Ephemeris resolution errors"""

__all__ = [
    'EphemerisError', 'MissingDataError', 'NotSupportedError',
    'BeidouIgsoNotSupportedError', 'BadOperationError', 'DivergedError',
    'AlmanacError', 'FrameSelectionError',
]


class EphemerisError(Exception):
    """Base class of every error raised while resolving broadcast ephemerides"""


class MissingDataError(EphemerisError):
    """A required orbit field is absent from the message"""

    def __init__(self, field: str = None, message: str = None):
        self.field = field
        if message is None:
            message = f"missing orbit field: {field}" if field else "missing data"
        super().__init__(message)


class NotSupportedError(EphemerisError):
    """Constellation or satellite class not handled"""

    def __init__(self, constellation=None, message: str = None):
        self.constellation = constellation
        if message is None:
            message = f"{constellation} is not supported"
        super().__init__(message)


class BeidouIgsoNotSupportedError(NotSupportedError):
    """BeiDou IGSO orbits are not resolved"""

    def __init__(self, sv=None):
        self.sv = sv
        super().__init__(getattr(sv, 'constellation', None),
                         f"BeiDou IGSO orbit not supported ({sv})")


class BadOperationError(EphemerisError):
    """Operation meaningless for this message family"""


class DivergedError(EphemerisError):
    """Kepler equation did not converge within the iteration budget"""

    def __init__(self, max_iteration: int, residual: float = float('nan')):
        self.max_iteration = max_iteration
        self.residual = residual
        super().__init__(
            f"Kepler solver diverged after {max_iteration} iterations "
            f"(last correction {residual:.3e} rad)"
        )


class AlmanacError(EphemerisError):
    """Observer frame or reference-frame data unusable"""


class FrameSelectionError(EphemerisError):
    """No ephemeris valid for the satellite at the requested epoch"""

    def __init__(self, epoch, sv):
        self.epoch = epoch
        self.sv = sv
        super().__init__(f"no valid ephemeris for {sv} at {epoch}")
