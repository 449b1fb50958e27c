"""External flasher integration."""

from .stm32flash import ProcessResult, Stm32Flasher, build_args, find_flasher

__all__ = [
    'ProcessResult',
    'Stm32Flasher',
    'build_args',
    'find_flasher',
]
