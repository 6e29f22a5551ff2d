"""Kernel block device statistics from ``/sys/block/<dev>/stat``.

See Documentation/block/stat.rst in the kernel sources for the fields. Newer
kernels append discard and flush counters, only the first eleven are used.
"""
import os
from dataclasses import dataclass, fields

from mmprom.errors import MmError, StatError
from mmprom.util import parse_int

SYS_BLOCK = '/sys/block'
SECTOR_SIZE = 512


@dataclass(frozen=True)
class Stat:
    """Block device counters, times are in milliseconds."""
    read_ios: int = 0
    read_merges: int = 0
    read_sectors: int = 0
    read_ticks: int = 0
    write_ios: int = 0
    write_merges: int = 0
    write_sectors: int = 0
    write_ticks: int = 0
    in_flight: int = 0
    io_ticks: int = 0
    time_in_queue: int = 0

    @property
    def read_bytes(self):
        return self.read_sectors * SECTOR_SIZE

    @property
    def write_bytes(self):
        return self.write_sectors * SECTOR_SIZE

    def __add__(self, other):
        if not isinstance(other, Stat):
            return NotImplemented
        return Stat(*(getattr(self, f.name) + getattr(other, f.name) for f in fields(self)))

    @classmethod
    def parse(cls, text):
        tokens = text.split()
        names = [f.name for f in fields(cls)]
        if len(tokens) < len(names):
            raise StatError('expected %d values, got %d' % (len(names), len(tokens)))
        return cls(*(parse_int(name, token) for name, token in zip(names, tokens)))


def stat(device, root=None):
    path = os.path.join(root or SYS_BLOCK, device, 'stat')
    try:
        with open(path) as f:
            text = f.read()
    except OSError as err:
        raise StatError('reading stat file: %s' % path) from err
    try:
        return Stat.parse(text)
    except MmError as err:
        raise StatError('parsing stat file: %s' % path) from err


def stat_all(root=None):
    """Return the statistics of every block device, keyed by device name."""
    root = root or SYS_BLOCK
    try:
        devices = sorted(os.listdir(root))
    except OSError as err:
        raise StatError('listing block devices in %s' % root) from err
    return {device: stat(device, root) for device in devices}
