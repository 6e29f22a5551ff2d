import pytest

from mmprom import command
from mmprom.errors import CommandError, error_chain


def test_run():
    assert command.run('sh', '-c', 'echo hello') == b'hello\n'


def test_run_stdin():
    assert command.run('cat', stdin=b'_fs_io_s_\n') == b'_fs_io_s_\n'


def test_run_failure():
    with pytest.raises(CommandError) as info:
        command.run('sh', '-c', 'echo first >&2; echo broken >&2; exit 3')
    assert info.value.returncode == 3
    assert 'exit code 3' in str(info.value)
    assert str(info.value).endswith(': broken')


def test_run_missing_command():
    with pytest.raises(CommandError) as info:
        command.run('mmprom-no-such-command')
    assert info.value.returncode is None
    assert isinstance(info.value.__cause__, OSError)
    assert 'mmprom-no-such-command' in error_chain(info.value)


def test_command_path(tmp_path, monkeypatch):
    tool = tmp_path / 'mmlsfs'
    tool.write_text('#!/bin/sh\n')
    tool.chmod(0o755)
    monkeypatch.setattr(command, 'MMFS_BIN', str(tmp_path))
    assert command.command_path('mmlsfs') == str(tool)
    assert command.command_path('mmdf') == 'mmdf'


def test_run_discard_output():
    assert command.run('sh', '-c', 'echo hello', discard_output=True) == b''


def test_run_discard_output_failure():
    with pytest.raises(CommandError) as info:
        command.run('sh', '-c', 'echo out; echo failed >&2; exit 1', discard_output=True)
    assert str(info.value).endswith(': failed')
