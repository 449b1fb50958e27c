"""fwflash - bootloader entry and flashing for serial-attached microcontrollers."""

__version__ = '1.0.0'
__author__ = 'fwflash contributors'
__license__ = 'MIT'
