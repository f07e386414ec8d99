"""Exception hierarchy for wsm_serial_bridge."""


class WsmError(Exception):
    """Base exception for all speedometer errors."""


class LinkOpenError(WsmError):
    """The serial port could not be opened."""

    def __init__(self, message: str, port: str = ""):
        self.port = port
        super().__init__(message)


class AlreadyMeasuringError(WsmError):
    """A long-term speed measurement is already running."""


class NoSpeedDataError(WsmError):
    """No fresh speed data, a long-term measurement cannot start."""
