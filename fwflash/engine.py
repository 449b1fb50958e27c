"""End-to-end flash session orchestration."""

import logging
from typing import Optional

from .bootloader import BootloaderEntrySequencer
from .config import FlashJob, Transport
from .flash.stm32flash import ProcessResult, Stm32Flasher

log = logging.getLogger(__name__)


class FlashEngine:
    """Puts the target in its bootloader, flashes it, then lets it run."""

    def __init__(self,
                 sequencer: Optional[BootloaderEntrySequencer] = None,
                 flasher: Optional[Stm32Flasher] = None):
        self.sequencer = sequencer or BootloaderEntrySequencer()
        self.flasher = flasher or Stm32Flasher()

    def run(self, job: FlashJob) -> ProcessResult:
        """Run one flash session.

        Errors from bootloader entry propagate. Flasher failures are
        reported in the returned result.
        """
        log.info(f"Flashing {job.hex_file} to {job.port} over {job.transport.value}")

        self.sequencer.enter(job)

        try:
            result = self.flasher.run(job)
        finally:
            if job.transport is Transport.DIRECT:
                self.sequencer.restore_idle(job.wiring)

        if result.success:
            log.info("[OK] Flash session completed successfully")
        else:
            log.error("[FAIL] Flash session finished with flasher errors")

        return result
