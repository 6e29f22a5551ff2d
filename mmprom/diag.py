"""`mmdiag --deadlock` parsing."""
from dataclasses import dataclass, field
from typing import List

from mmprom import command
from mmprom.decoder import decode_many


@dataclass(frozen=True)
class DeadlockNode:
    name: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(index.text(tokens, 'nodeList'))


@dataclass
class DeadlockInfo:
    nodes: List[str] = field(default_factory=list)


def parse(stream):
    records = decode_many(stream, {'deadlockNodes': DeadlockNode}, source='mmdiag')
    return DeadlockInfo([node.name for node in records['deadlockNodes']])


def deadlock():
    return parse(command.run('mmdiag', '--deadlock', '-Y'))
