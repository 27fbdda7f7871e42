"""Exceptions raised by the miiovac device model."""

from typing import Any


class MiioError(Exception):
    """Base class for all miiovac errors."""


class DeviceCommunicationError(MiioError):
    """A remote call failed at the transport level or timed out."""

    def __init__(self, method: str, message: str = ""):
        self.method = method
        super().__init__(f"Call to {method} failed" + (f": {message}" if message else ""))


class CommandRejected(MiioError):
    """The device answered a command with neither success encoding."""

    def __init__(self, method: str, response: Any):
        self.method = method
        self.response = response
        super().__init__(f"Could not complete call to device: {method} returned {response!r}")


class UnknownProperty(MiioError, KeyError):
    """A property name was never declared in the schema."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown property: {self.name}"
