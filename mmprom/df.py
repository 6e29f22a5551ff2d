"""`mmdf` parsing.

``mmdf -Y`` interleaves several record types in one stream, each with its own
header: ``nsd`` rows per disk, ``poolTotal`` rows per pool and a single
``fsTotal`` row. Sizes are in kilobytes.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from mmprom import command
from mmprom.decoder import decode_many


def _free_space(tokens, index):
    return dict(
        free_blocks=index.integer(tokens, 'freeBlocks'),
        free_blocks_percent=index.integer(tokens, 'freeBlocksPct'),
        free_fragments=index.integer(tokens, 'freeFragments'),
        free_fragments_percent=index.integer(tokens, 'freeFragmentsPct'),
    )


@dataclass(frozen=True)
class Nsd:
    name: str
    pool: str
    size: int
    holds_metadata: bool
    holds_objectdata: bool
    free_blocks: int
    free_blocks_percent: int
    free_fragments: int
    free_fragments_percent: int

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            name=index.text(tokens, 'nsdName'),
            pool=index.text(tokens, 'storagePool'),
            size=index.integer(tokens, 'diskSize'),
            holds_metadata=index.boolean(tokens, 'metadata'),
            holds_objectdata=index.boolean(tokens, 'data'),
            **_free_space(tokens, index)
        )


@dataclass(frozen=True)
class PoolTotal:
    name: str
    size: int
    free_blocks: int
    free_blocks_percent: int
    free_fragments: int
    free_fragments_percent: int

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            name=index.text(tokens, 'poolName'),
            size=index.integer(tokens, 'poolSize'),
            **_free_space(tokens, index)
        )


@dataclass(frozen=True)
class FilesystemTotal:
    size: int
    free_blocks: int
    free_blocks_percent: int
    free_fragments: int
    free_fragments_percent: int

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(size=index.integer(tokens, 'fsSize'), **_free_space(tokens, index))


@dataclass
class DfData:
    fs: str
    nsds: List[Nsd] = field(default_factory=list)
    pools: List[PoolTotal] = field(default_factory=list)
    total: Optional[FilesystemTotal] = None


def parse(fs, stream):
    records = decode_many(stream, {
        'nsd': Nsd,
        'poolTotal': PoolTotal,
        'fsTotal': FilesystemTotal,
    }, source='mmdf %s' % fs)
    totals = records['fsTotal']
    return DfData(fs, records['nsd'], records['poolTotal'], totals[-1] if totals else None)


def run(fs):
    return parse(fs, command.run('mmdf', fs, '-Y'))
