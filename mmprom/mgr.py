"""`mmlsmgr` parsing."""
from dataclasses import dataclass, field
from typing import List, Optional

from mmprom import command
from mmprom.decoder import decode_many


@dataclass(frozen=True)
class ClusterManager:
    name: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(index.text(tokens, 'manager'))


@dataclass(frozen=True)
class FilesystemManager:
    fs: str
    name: str
    ip: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            fs=index.text(tokens, 'filesystem'),
            name=index.text(tokens, 'manager'),
            ip=index.text(tokens, 'managerIP'),
        )


@dataclass
class Managers:
    cluster: Optional[ClusterManager] = None
    filesystems: List[FilesystemManager] = field(default_factory=list)


def parse(stream):
    records = decode_many(stream, {
        'clusterManager': ClusterManager,
        'filesystemManager': FilesystemManager,
    }, source='mmlsmgr')
    clusters = records['clusterManager']
    # there is only one cluster manager, the last row wins
    return Managers(clusters[-1] if clusters else None, records['filesystemManager'])


def get():
    return parse(command.run('mmlsmgr', '-Y'))
