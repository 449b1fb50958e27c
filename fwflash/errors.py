"""Error types raised while preparing and running a flash session."""


class FlashError(Exception):
    """Base class for all fwflash errors."""


class ConfigError(FlashError):
    """Missing environment variable or required path."""


class SerialIoError(FlashError):
    """Serial port could not be written."""


class PortOpenError(SerialIoError):
    """Serial port could not be opened."""


class GpioIoError(FlashError):
    """GPIO line could not be opened or written."""


class ProcessLaunchError(FlashError):
    """External flasher could not be started."""


class ProcessExecutionFailure(FlashError):
    """External flasher ran but exited non-zero."""

    def __init__(self, returncode: int, message: str = ''):
        self.returncode = returncode
        super().__init__(message or f"flasher exited with status {returncode}")
