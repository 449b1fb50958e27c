import subprocess
from pathlib import Path

import pytest

from fwflash.config import DirectWiring, FlashJob, Rs485Wiring
from fwflash.gpio import GpioController


class RecordingGpio(GpioController):
    """Records every level written; optionally also writes the files."""

    def __init__(self, events, passthrough=False):
        self.events = events
        self.passthrough = passthrough

    def _write(self, line, level):
        self.events.append(('gpio', Path(line).parent.name or str(line), level.decode()))
        if self.passthrough:
            super()._write(line, level)


class FakeSerial:
    def __init__(self, events, written=None):
        self.events = events
        self.written = written
        self.closed = False

    def write(self, data):
        self.events.append(('write', bytes(data)))
        return len(data) if self.written is None else self.written

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class StubRunner:
    def __init__(self, returncode=0, stdout=b'', stderr=b'', exc=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.exc = exc
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.exc:
            raise self.exc
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def events():
    return []


@pytest.fixture
def sleep(events):
    def _sleep(seconds):
        events.append(('sleep', seconds))
    return _sleep


@pytest.fixture
def hex_file(tmp_path):
    path = tmp_path / 'firmware.hex'
    path.write_text(':00000001FF\n')
    return path


@pytest.fixture
def gpio_root(tmp_path):
    """Sysfs-like GPIO directories with a value file each."""
    root = tmp_path / 'gpio'
    for name in ('direction', 'boot0', 'boot1', 'reset'):
        line = root / name
        line.mkdir(parents=True)
        (line / 'value').write_text('0')
    return root


@pytest.fixture
def direct_job(hex_file, gpio_root):
    return FlashJob(
        port='/dev/ttyS1',
        hex_file=hex_file,
        wiring=DirectWiring(
            reset=gpio_root / 'reset' / 'value',
            boot0=gpio_root / 'boot0' / 'value',
            boot1=gpio_root / 'boot1' / 'value',
        ),
    )


@pytest.fixture
def rs485_job(hex_file, gpio_root):
    return FlashJob(
        port='/dev/ttyS2',
        hex_file=hex_file,
        wiring=Rs485Wiring(direction=gpio_root / 'direction' / 'value'),
    )
