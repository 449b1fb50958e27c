"""Command-line interface for fwflash."""

import sys
import argparse
import logging
from typing import List, Optional

from . import __version__
from .config import load_job
from .engine import FlashEngine
from .errors import FlashError


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    fmt = '%(levelname)-8s %(message)s' if not verbose else '%(asctime)s [%(name)s] %(levelname)s: %(message)s'

    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fwflash',
        description='Flash microcontrollers through RS-232 or RS-485 serial ports',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Direct wiring, boot/reset lines from FWFLASH_GPIO_BOOT0/BOOT1/RESET
  fwflash /dev/ttyS1 firmware.hex

  # RS-485 with an explicit direction-control line
  fwflash /dev/ttyS2 firmware.hex /sys/class/gpio/gpio42/value

  # RS-485 with the direction line from FWFLASH_GPIO_DIRECTION
  fwflash /dev/ttyS2 firmware.hex --rs485
        """
    )

    parser.add_argument('port_name', help='Name of the serial port')
    parser.add_argument('hex_file', help='Hex file to load')
    parser.add_argument('gpio_path', nargs='?', help='Direction-control GPIO to toggle for RS-485')
    parser.add_argument('--rs485', action='store_true', help='Use the RS-485 shared bus')
    parser.add_argument('--flasher', metavar='PATH', help='stm32flash executable (default: $FWFLASH_FLASHER or stm32flash)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)

    try:
        job = load_job(
            args.port_name,
            args.hex_file,
            gpio_path=args.gpio_path,
            rs485=args.rs485,
            flasher=args.flasher,
        )
        result = FlashEngine().run(job)
    except FlashError as e:
        logging.error(f"✗ {e}")
        return 1

    if not result.success:
        logging.error("✗ Flash operation failed")
        return 1

    logging.info("✓ Flash operation completed successfully!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
