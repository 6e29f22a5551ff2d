"""Invocation of the Spectrum Scale admin commands."""
import logging
import os
from subprocess import DEVNULL, PIPE, Popen

from mmprom.errors import CommandError

log = logging.getLogger(__name__)

MMFS_BIN = os.environ.get('MMFS_BIN', '/usr/lpp/mmfs/bin')


def command_path(name):
    path = os.path.join(MMFS_BIN, name)
    if os.access(path, os.X_OK):
        return path
    return name


def run(name, *args, stdin=None, discard_output=False):
    """Run an admin command and return its standard output as bytes.

    With ``discard_output`` standard output goes to /dev/null and ``b''`` is
    returned.

    Raises :class:`CommandError` if the command can't be started or exits
    with a non-zero code.
    """
    cmd = [command_path(name)] + [str(arg) for arg in args]
    log.debug('running: %s', ' '.join(cmd))
    try:
        process = Popen(cmd, stdout=DEVNULL if discard_output else PIPE, stderr=PIPE,
                        stdin=PIPE if stdin is not None else None)
    except OSError as err:
        raise CommandError(cmd) from err
    try:
        out, err = process.communicate(stdin)
    except BaseException:
        process.kill()
        process.wait()
        raise
    if process.returncode:
        raise CommandError(cmd, process.returncode, err)
    return out or b''
