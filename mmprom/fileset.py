"""`mmlsfileset` parsing."""
from dataclasses import dataclass

from mmprom import command
from mmprom.decoder import decode
from mmprom.errors import NotFoundError
from mmprom.util import percent_decode


@dataclass(frozen=True)
class Fileset:
    filesystem_name: str
    fileset_name: str
    max_inodes: int
    alloc_inodes: int
    id: str = ''
    status: str = ''
    path: str = ''
    comment: str = ''

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            filesystem_name=index.text(tokens, 'filesystemName'),
            fileset_name=percent_decode(index.text(tokens, 'filesetName')),
            max_inodes=index.integer(tokens, 'maxInodes'),
            alloc_inodes=index.integer(tokens, 'allocInodes'),
            id=index.optional_text(tokens, 'id', ''),
            status=index.optional_text(tokens, 'status', ''),
            path=index.decoded(tokens, 'path'),
            comment=index.decoded(tokens, 'comment'),
        )


def parse(stream):
    return decode(stream, Fileset, source='mmlsfileset')


def filesets(fs):
    """Return all filesets of file system ``fs``."""
    return parse(command.run('mmlsfileset', fs, '-Y'))


def fileset(fs, name):
    """Return fileset ``name`` of file system ``fs``.

    ``mmlsfileset fs name -Y`` may in theory list several filesets, only the
    first one is returned.
    """
    found = parse(command.run('mmlsfileset', fs, name, '-Y'))
    if not found:
        raise NotFoundError('no fileset %s in %s' % (name, fs))
    return found[0]
