"""stm32flash integration."""

import sys
import shutil
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional

from ..config import FlashJob, Transport
from ..errors import FlashError, ProcessExecutionFailure, ProcessLaunchError

log = logging.getLogger(__name__)

# Page window written over RS-485; the pages outside it hold the bootloader
RS485_START_PAGE = 5
RS485_END_PAGE = 7

COMMON_LOCATIONS = [
    Path('/usr/local/bin'),
    Path('/usr/bin'),
    Path('/opt/fwflash/bin'),
]


@dataclass
class ProcessResult:
    """Outcome of one flasher run."""
    success: bool
    returncode: Optional[int] = None
    stdout: bytes = b''
    stderr: bytes = b''
    error: Optional[FlashError] = None


def find_flasher(name: str = 'stm32flash') -> str:
    """Locate the flasher executable.

    Args:
        name: Executable name or path

    Returns:
        Resolved path, or name unchanged if nothing was found
    """
    candidate = Path(name)
    if candidate.parent != Path('.') and candidate.exists():
        return str(candidate)

    path = shutil.which(name)
    if path:
        log.debug(f"Found flasher at: {path}")
        return path

    for base_path in COMMON_LOCATIONS:
        exe = base_path / name
        if exe.exists():
            log.debug(f"Found flasher at: {exe}")
            return str(exe)

    log.debug(f"Flasher {name} not found, relying on PATH at launch")
    return name


def build_args(job: FlashJob) -> List[str]:
    """Build the flasher argument list for a job."""
    args: List[str] = []

    if job.transport is Transport.RS485:
        args += ['-R', '-s', str(RS485_START_PAGE), '-e', str(RS485_END_PAGE)]

    args += ['-w', str(job.hex_file), '-v', job.port]

    if job.transport is Transport.RS485:
        # The flasher drives the transceiver direction itself while talking
        args += ['-d', str(job.wiring.direction)]

    args += ['-b', str(job.baudrate)]
    return args


class Stm32Flasher:
    """Runs stm32flash against a target already in its bootloader."""

    def __init__(self,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 stdout: Optional[BinaryIO] = None,
                 stderr: Optional[BinaryIO] = None):
        self.runner = runner
        self.stdout = stdout
        self.stderr = stderr

    def run(self, job: FlashJob) -> ProcessResult:
        """Flash the job's hex file.

        Launch and exit failures are logged and reported in the result,
        not raised.
        """
        cmd = [find_flasher(job.flasher)] + build_args(job)
        log.info(f"Running flasher: {' '.join(cmd)}")

        try:
            # No timeout: a flash has no upper bound we can rely on
            completed = self.runner(cmd, capture_output=True)
        except OSError as e:
            error = ProcessLaunchError(f"Failed to launch {cmd[0]}: {e}")
            log.error(f"[FAIL] {error}")
            return ProcessResult(success=False, error=error)

        self._forward(completed.stdout, self.stdout or sys.stdout.buffer)
        self._forward(completed.stderr, self.stderr or sys.stderr.buffer)

        if completed.returncode != 0:
            error = ProcessExecutionFailure(completed.returncode)
            log.error(f"[FAIL] Flash failed: {error}")
            return ProcessResult(
                success=False,
                returncode=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
                error=error,
            )

        log.info("[OK] Flash completed")
        return ProcessResult(
            success=True,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    @staticmethod
    def _forward(data: Optional[bytes], stream: BinaryIO) -> None:
        if data:
            stream.write(data)
            stream.flush()
