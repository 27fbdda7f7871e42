"""Device models for miIO appliances."""

from .base import MiioDevice, check_result
from .vacuum import VacuumDevice

__all__ = ["MiioDevice", "VacuumDevice", "check_result"]
