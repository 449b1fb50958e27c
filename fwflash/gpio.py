"""Sysfs-style GPIO line control."""

import logging
from pathlib import Path
from typing import Union

from .errors import GpioIoError

log = logging.getLogger(__name__)

HIGH = b'1'
LOW = b'0'


def value_path(base: Union[str, Path]) -> Path:
    """Resolve a sysfs GPIO base directory to its value file.

    Args:
        base: GPIO directory (e.g. /sys/class/gpio/gpio17)

    Returns:
        Path to <base>/value
    """
    return Path(base) / 'value'


class GpioController:
    """Writes logical levels to GPIO value files.

    Each write opens the line, writes one ASCII character, rewinds and
    closes it again, so a line file never accumulates more than one level.
    """

    def assert_line(self, line: Path) -> None:
        """Drive a line high."""
        self._write(line, HIGH)

    def deassert_line(self, line: Path) -> None:
        """Drive a line low."""
        self._write(line, LOW)

    def _write(self, line: Path, level: bytes) -> None:
        log.debug(f"GPIO {line} <- {level.decode()}")
        try:
            with open(line, 'wb') as f:
                f.write(level)
                f.seek(0)
        except OSError as e:
            raise GpioIoError(f"Failed to write GPIO {line}: {e}") from e
