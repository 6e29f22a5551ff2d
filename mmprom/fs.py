"""`mmlsfs` parsing."""
from dataclasses import dataclass

from mmprom import command
from mmprom.decoder import decode


@dataclass(frozen=True)
class Filesystem:
    name: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(index.text(tokens, 'deviceName'))


def parse(stream):
    return decode(stream, Filesystem, source='mmlsfs')


def names():
    """Return the names of all file systems of the cluster."""
    out = command.run('mmlsfs', 'all', '-Y', '-B')
    seen = []
    for fs in parse(out):
        if fs.name not in seen:
            seen.append(fs.name)
    return seen
