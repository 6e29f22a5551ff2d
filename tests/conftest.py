import os

import pytest

from mmprom import command

DATA = os.path.join(os.path.dirname(__file__), 'data')


def read_data(name):
    with open(os.path.join(DATA, name), 'rb') as f:
        return f.read()


@pytest.fixture
def data():
    return read_data


class FakeCommands:
    """Replaces command.run with canned outputs keyed by the command line."""

    def __init__(self):
        self.outputs = {}
        self.calls = []

    def add(self, output, name, *args):
        self.outputs[(name,) + tuple(str(a) for a in args)] = output

    def __call__(self, name, *args, stdin=None, discard_output=False):
        key = (name,) + tuple(str(a) for a in args)
        self.calls.append(key)
        try:
            return self.outputs[key]
        except KeyError:
            raise AssertionError('unexpected command: %s' % ' '.join(key)) from None


@pytest.fixture
def commands(monkeypatch):
    fake = FakeCommands()
    monkeypatch.setattr(command, 'run', fake)
    return fake
