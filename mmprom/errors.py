"""Exceptions raised by mmprom.

Every error is surfaced to the caller with the failing operation attached;
lower level errors are chained with ``raise ... from err``.
"""


class MmError(Exception):
    pass


class MissingColumnError(MmError):
    """A required field has no column in the current header."""

    def __init__(self, field):
        super().__init__('no %s column (missing HEADER row or changed output format)' % field)
        self.field = field


class CoercionError(MmError):
    """A token could not be converted to the type of its field."""

    def __init__(self, field, value, kind):
        super().__init__('invalid %s field: %r is not %s' % (field, value, kind))
        self.field = field
        self.value = value


class BoolError(CoercionError):
    def __init__(self, field, value):
        MmError.__init__(self, 'invalid %s field: unknown boolean value: %s' % (field, value))
        self.field = field
        self.value = value


class StructuralError(MmError):
    pass


class DecodeError(MmError):
    pass


class CommandError(MmError):
    def __init__(self, cmd, returncode=None, stderr=b''):
        line = ' '.join(cmd)
        if returncode is None:
            msg = 'error running: %s' % line
        else:
            msg = 'error running: %s (exit code %d)' % (line, returncode)
            stderr = stderr.decode(errors='replace').strip()
            if stderr:
                msg += ': %s' % stderr.splitlines()[-1]
        super().__init__(msg)
        self.cmd = cmd
        self.returncode = returncode


class CacheError(MmError):
    pass


class StatError(MmError):
    pass


class DeviceNameError(MmError):
    def __init__(self, device):
        super().__init__('unable to get file name for device %s' % device)
        self.device = device


class EmptyPoolError(MmError):
    pass


class NotFoundError(MmError):
    pass


def error_chain(err):
    """Return ``err`` and its causes joined into one line."""
    messages = []
    while err is not None:
        messages.append(str(err) or err.__class__.__name__)
        err = err.__cause__
    return ': '.join(messages)
