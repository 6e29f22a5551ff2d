"""`mmlspool` parsing.

``mmlspool`` has no ``-Y`` mode, its output is a table::

    Storage pools in file system at '/gpfs1':
    Name       Id   BlkSize Data Meta Total Data in (KB)   Free Data in (KB)   Total Meta in (KB)    Free Meta in (KB)
    system      0      1 MB   no  yes              0              0 (  0%)    25004867584     9798959104 ( 39%)
    nvme    65537     16 MB  yes   no   162531639296   114505474048 ( 70%)              0              0 (  0%)

The free data percentage is printed as ``( 70%)`` or ``(100%)``, so the
position of the metadata columns depends on whether the ``(`` stands alone.
This is only verified against the layout above.
"""
from dataclasses import dataclass
from typing import List, Optional

from mmprom import command
from mmprom.decoder import as_lines
from mmprom.errors import DecodeError, EmptyPoolError, MmError, StructuralError
from mmprom.util import parse_bool, parse_int

HEADER_LINES = 2


@dataclass(frozen=True)
class PoolSize:
    total_kb: int
    free_kb: int

    @property
    def used_percent(self):
        if self.total_kb == 0:
            raise EmptyPoolError('used percentage of a pool with zero total size')
        return (self.total_kb - self.free_kb) * 100 // self.total_kb


@dataclass(frozen=True)
class Pool:
    name: str
    data: Optional[PoolSize]
    meta: Optional[PoolSize]

    @classmethod
    def from_line(cls, line):
        tokens = line.split()
        if len(tokens) < 9:
            raise StructuralError('expected at least 9 columns, got %d' % len(tokens))
        name = tokens[0]

        data = None
        if parse_bool('data', tokens[4]):
            data = _size(tokens, 'data', 6, 7)

        meta = None
        if parse_bool('meta', tokens[5]):
            if tokens[8] == '(':
                meta = _size(tokens, 'meta', 10, 11)
            else:
                meta = _size(tokens, 'meta', 9, 10)

        if data is None and meta is None:
            raise StructuralError('pool %s contains neither data nor metadata' % name)
        return cls(name, data, meta)


def _size(tokens, kind, total, free):
    try:
        return PoolSize(
            total_kb=parse_int('%s total KB' % kind, tokens[total]),
            free_kb=parse_int('%s free KB' % kind, tokens[free]),
        )
    except IndexError:
        raise StructuralError('no %s size columns' % kind) from None


@dataclass
class Filesystem:
    name: str
    pools: List[Pool]

    def pool(self, name):
        for pool in self.pools:
            if pool.name == name:
                return pool
        return None


def parse(stream, source='mmlspool'):
    pools = []
    lineno = 0
    try:
        for lineno, line in enumerate(as_lines(stream), 1):
            if lineno <= HEADER_LINES or not line.strip():
                continue
            try:
                pools.append(Pool.from_line(line))
            except MmError as err:
                raise DecodeError('parsing %s line %d: %s' % (source, lineno, line)) from err
    except UnicodeDecodeError as err:
        raise DecodeError('%s line %d is not UTF-8' % (source, lineno + 1)) from err
    return pools


def run(fs):
    return Filesystem(fs, parse(command.run('mmlspool', fs), source='mmlspool %s' % fs))


def run_all(names):
    return [run(fs) for fs in names]
