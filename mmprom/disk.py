"""`mmlsdisk` parsing."""
from dataclasses import dataclass

from mmprom import command
from mmprom.decoder import decode
from mmprom.util import Availability


@dataclass(frozen=True)
class Disk:
    nsd_name: str
    is_metadata: bool
    is_objectdata: bool
    availability: Availability
    pool: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            nsd_name=index.text(tokens, 'nsdName'),
            is_metadata=index.boolean(tokens, 'metadata', digits=True),
            is_objectdata=index.boolean(tokens, 'data', digits=True),
            availability=Availability(index.text(tokens, 'availability')),
            pool=index.text(tokens, 'storagePool'),
        )


def parse(stream):
    return decode(stream, Disk, source='mmlsdisk')


def disks(fs):
    """Return the disks of file system ``fs``."""
    return parse(command.run('mmlsdisk', fs, '-Y'))
