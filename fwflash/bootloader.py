"""Bootloader entry sequencing for direct and RS-485 wiring.

The target gives no handshake when it enters its bootloader, so the fixed
delays below are part of the protocol. Do not shorten them.
"""

import time
import logging
from enum import Enum
from typing import Callable, Optional

import serial  # pyserial

from .config import DirectWiring, FlashJob, Rs485Wiring, Transport
from .errors import PortOpenError, SerialIoError
from .gpio import GpioController

log = logging.getLogger(__name__)

# Command recognised by the target firmware as "reboot into bootloader"
FORCE_BOOTLOADER_FRAME = bytes([
    0x32, 0x47, 0x20, 0x0C, 0x00, 0x06, 0xDF, 0x02, 0x00, 0x00, 0x00, 0x00,
    0x00, 0x01, 0x0C, 0x26, 0x44,
])

BITS_PER_BYTE = 10  # start + 8 data + stop

PIN_SETTLE = 0.5          # seconds, boot pins held before releasing reset
BOOTLOADER_INIT = 0.5     # seconds, after reset release
RS485_RESET_SETTLE = 2.0  # seconds, target reboot after the frame


class EntryState(Enum):
    """Bootloader entry progress."""
    IDLE = 'idle'
    # Direct
    HOLD_RESET_WITH_BOOT_SELECT = 'hold-reset-with-boot-select'
    RELEASED_INTO_BOOTLOADER = 'released-into-bootloader'
    BOOT_SELECT_CLEARED = 'boot-select-cleared'
    # RS-485
    DIRECTION_ASSERTED = 'direction-asserted'
    FRAME_SENT = 'frame-sent'
    FRAME_FLUSH_WAIT = 'frame-flush-wait'
    DIRECTION_DEASSERTED = 'direction-deasserted'
    DEVICE_RESET_WAIT = 'device-reset-wait'
    READY = 'ready'


def frame_flush_delay(frame_length: int, baudrate: int) -> float:
    """Seconds needed for a frame to leave the wire.

    Args:
        frame_length: Frame size in bytes
        baudrate: Line rate in baud

    Returns:
        Transmit time in seconds, counting start and stop bits
    """
    return frame_length * BITS_PER_BYTE / baudrate


class BootloaderEntrySequencer:
    """Forces the target into its bootloader."""

    def __init__(self,
                 gpio: Optional[GpioController] = None,
                 serial_factory: Callable[..., serial.Serial] = serial.Serial,
                 sleep: Callable[[float], None] = time.sleep):
        self.gpio = gpio or GpioController()
        self.serial_factory = serial_factory
        self.sleep = sleep
        self.state = EntryState.IDLE

    def _advance(self, state: EntryState) -> None:
        log.debug(f"Bootloader entry: {self.state.value} -> {state.value}")
        self.state = state

    def enter(self, job: FlashJob) -> None:
        """Run the entry sequence for the job's transport."""
        self.state = EntryState.IDLE
        log.info("Setting the system into bootloader mode.")

        if job.transport is Transport.RS485:
            self.enter_rs485(job.port, job.wiring, job.baudrate)
        else:
            self.enter_direct(job.wiring)

        self._advance(EntryState.READY)
        log.info("[OK] Target should now be in bootloader mode")

    def enter_direct(self, wiring: DirectWiring) -> None:
        """Hold reset with boot-select pins set, then release reset."""
        self.gpio.assert_line(wiring.boot0)
        self.gpio.deassert_line(wiring.boot1)
        self.gpio.deassert_line(wiring.reset)
        self._advance(EntryState.HOLD_RESET_WITH_BOOT_SELECT)
        self.sleep(PIN_SETTLE)

        self.gpio.assert_line(wiring.reset)
        self._advance(EntryState.RELEASED_INTO_BOOTLOADER)
        self.sleep(BOOTLOADER_INIT)

    def enter_rs485(self, port: str, wiring: Rs485Wiring, baudrate: int) -> None:
        """Send the force-bootloader frame over the shared bus.

        Raises:
            PortOpenError: port could not be opened
            SerialIoError: frame could not be written
            GpioIoError: direction line could not be driven
        """
        try:
            ser = self.serial_factory(port, baudrate)
        except (serial.SerialException, ValueError) as e:
            raise PortOpenError(f"Failed to open serial port {port}: {e}") from e

        with ser:
            self.gpio.assert_line(wiring.direction)
            self._advance(EntryState.DIRECTION_ASSERTED)
            try:
                self._send_frame(ser, port)
                self._advance(EntryState.FRAME_FLUSH_WAIT)
                self.sleep(frame_flush_delay(len(FORCE_BOOTLOADER_FRAME), baudrate))
            finally:
                self.gpio.deassert_line(wiring.direction)
            self._advance(EntryState.DIRECTION_DEASSERTED)

        self._advance(EntryState.DEVICE_RESET_WAIT)
        self.sleep(RS485_RESET_SETTLE)

    def _send_frame(self, ser: serial.Serial, port: str) -> None:
        try:
            written = ser.write(FORCE_BOOTLOADER_FRAME)
        except serial.SerialException as e:
            raise SerialIoError(f"Failed to write bootloader frame to {port}: {e}") from e

        if written is not None and written != len(FORCE_BOOTLOADER_FRAME):
            raise SerialIoError(
                f"Short write to {port}: {written}/{len(FORCE_BOOTLOADER_FRAME)} bytes"
            )
        self._advance(EntryState.FRAME_SENT)

    def restore_idle(self, wiring: DirectWiring) -> None:
        """Clear boot-select pins and release reset so the application runs."""
        self.gpio.deassert_line(wiring.boot0)
        self.gpio.deassert_line(wiring.boot1)
        self._advance(EntryState.BOOT_SELECT_CLEARED)
        self.gpio.assert_line(wiring.reset)
        self._advance(EntryState.IDLE)
        log.info("[OK] Boot pins cleared, target released into application")
