"""Flash job configuration and transport selection."""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import ConfigError
from .gpio import value_path

log = logging.getLogger(__name__)

BAUDRATE = 115200

# Environment variables holding sysfs GPIO base directories
ENV_DIRECTION = 'FWFLASH_GPIO_DIRECTION'
ENV_BOOT0 = 'FWFLASH_GPIO_BOOT0'
ENV_BOOT1 = 'FWFLASH_GPIO_BOOT1'
ENV_RESET = 'FWFLASH_GPIO_RESET'
ENV_FLASHER = 'FWFLASH_FLASHER'

DEFAULT_FLASHER = 'stm32flash'


class Transport(Enum):
    """Physical link to the target."""
    DIRECT = 'rs232'
    RS485 = 'rs485'


@dataclass(frozen=True)
class DirectWiring:
    """GPIO lines wired straight to the target's reset and boot pins."""
    reset: Path
    boot0: Path
    boot1: Path


@dataclass(frozen=True)
class Rs485Wiring:
    """Transceiver direction line for a shared RS-485 bus."""
    direction: Path


Wiring = Union[DirectWiring, Rs485Wiring]


@dataclass(frozen=True)
class FlashJob:
    """Everything needed for one flash session."""
    port: str
    hex_file: Path
    wiring: Wiring
    baudrate: int = BAUDRATE
    flasher: str = DEFAULT_FLASHER

    @property
    def transport(self) -> Transport:
        if isinstance(self.wiring, Rs485Wiring):
            return Transport.RS485
        return Transport.DIRECT


def select_transport(rs485: bool = False, direction_path: Optional[str] = None) -> Transport:
    """Pick the transport from the CLI flag or an explicit direction line.

    Args:
        rs485: --rs485 flag
        direction_path: Explicit direction-control GPIO path, if given

    Returns:
        Selected transport
    """
    if rs485 or direction_path:
        return Transport.RS485
    return Transport.DIRECT


def _require_env(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if not value:
        raise ConfigError(f"Environment variable {name} is not set")
    return value


def load_job(port: str,
             hex_file: Union[str, Path],
             gpio_path: Optional[str] = None,
             rs485: bool = False,
             environ: Optional[Mapping[str, str]] = None,
             flasher: Optional[str] = None) -> FlashJob:
    """Build a FlashJob from arguments and the environment.

    An explicit gpio_path is the direction line's value file and is used
    as-is. Lines taken from the environment are sysfs base directories.

    Raises:
        ConfigError: required variable or file missing
    """
    if environ is None:
        environ = os.environ

    if not port:
        raise ConfigError("Serial port name is required")

    hex_path = Path(hex_file)
    if not hex_path.is_file():
        raise ConfigError(f"Hex file not found: {hex_path}")

    transport = select_transport(rs485, gpio_path)

    if transport is Transport.RS485:
        if gpio_path:
            direction = Path(gpio_path)
        else:
            direction = value_path(_require_env(environ, ENV_DIRECTION))
        wiring: Wiring = Rs485Wiring(direction=direction)
    else:
        wiring = DirectWiring(
            reset=value_path(_require_env(environ, ENV_RESET)),
            boot0=value_path(_require_env(environ, ENV_BOOT0)),
            boot1=value_path(_require_env(environ, ENV_BOOT1)),
        )

    job = FlashJob(
        port=port,
        hex_file=hex_path,
        wiring=wiring,
        flasher=flasher or environ.get(ENV_FLASHER) or DEFAULT_FLASHER,
    )
    log.debug(f"Loaded flash job: {job}")
    return job
