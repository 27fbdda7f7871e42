"""miiovac - client-side model of Mi Robot Vacuums over the miIO protocol."""

from .devices import MiioDevice, VacuumDevice
from .exceptions import CommandRejected, DeviceCommunicationError, MiioError, UnknownProperty

__version__ = "0.1.0"
__all__ = [
    "MiioDevice",
    "VacuumDevice",
    "MiioError",
    "DeviceCommunicationError",
    "CommandRejected",
    "UnknownProperty",
]
