"""`mmgetstate` parsing."""
from dataclasses import dataclass

from mmprom import command
from mmprom.decoder import decode
from mmprom.errors import NotFoundError


@dataclass(frozen=True)
class NodeState:
    name: str
    state: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(index.text(tokens, 'nodeName'), index.text(tokens, 'state'))


def parse(stream):
    return decode(stream, NodeState, source='mmgetstate')


def local_node_name():
    """Return the GPFS node name of this host."""
    states = parse(command.run('mmgetstate', '-Y'))
    if not states:
        raise NotFoundError('mmgetstate returned no local state')
    return states[0].name
