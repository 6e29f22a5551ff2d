"""Per user file distribution of a storage pool via ``mmapplypolicy``.

A LIST rule writes one line per file of the pool, with a payload of
``USER_ID:FILE_SIZE:KB_ALLOCATED``. The lines are summed per user.
"""
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Dict

from mmprom import command, user
from mmprom.errors import DecodeError, MmError, StructuralError
from mmprom.util import parse_int

log = logging.getLogger(__name__)

LIST_NAME = 'users'
PREFIX = 'pool-scanner'


@dataclass
class Summary:
    files: int = 0
    file_size: int = 0
    kb_allocated: int = 0

    def __iadd__(self, other):
        self.files += other.files
        self.file_size += other.file_size
        self.kb_allocated += other.kb_allocated
        return self


@dataclass
class Distribution:
    device_or_dir: str
    pool: str
    users: Dict[str, Summary] = field(default_factory=dict)


def policy_text(pool, fileset=None):
    rule = ["RULE EXTERNAL LIST '%s' EXEC ''" % LIST_NAME,
            '',
            'RULE',
            "  LIST '%s'" % LIST_NAME,
            "    FROM POOL '%s'" % pool]
    if fileset:
        rule.append("    FOR FILESET ('%s')" % fileset)
    rule.append('    WEIGHT(0)')
    rule.append("    SHOW(VARCHAR(USER_ID) || ':' || VARCHAR(FILE_SIZE) || ':' || VARCHAR(KB_ALLOCATED))")
    return '\n'.join(rule) + '\n'


def parse_line(line):
    # "inode gen snapid  payload -- path", the path may contain anything
    fields = line.split(b' ', 5)
    if len(fields) < 5:
        raise StructuralError('no payload field')
    try:
        payload = fields[4].decode('utf-8')
    except UnicodeDecodeError as err:
        raise DecodeError('payload is not UTF-8: %r' % fields[4]) from err
    parts = payload.split(':', 2)
    if len(parts) != 3:
        raise StructuralError('expected USER_ID:FILE_SIZE:KB_ALLOCATED, got %r' % payload)
    uid, size, allocated = parts
    return uid, Summary(1, parse_int('FILE_SIZE', size), parse_int('KB_ALLOCATED', allocated))


def summarize(stream):
    """Sum a policy list file per user id."""
    users = {}
    for lineno, line in enumerate(stream, 1):
        line = line.rstrip(b'\r\n')
        if not line:
            continue
        try:
            uid, summary = parse_line(line)
        except MmError as err:
            raise DecodeError('parsing policy list line %d' % lineno) from err
        users.setdefault(uid, Summary())
        users[uid] += summary
    return users


def run(device_or_dir, pool, fileset=None, nodes=None, local_work_dir=None,
        global_work_dir=None, scope=None):
    with tempfile.TemporaryDirectory(dir=local_work_dir) as tmp:
        policy = os.path.join(tmp, '.policy')
        prefix = os.path.join(tmp, PREFIX)
        with open(policy, 'w') as f:
            f.write(policy_text(pool, fileset))

        args = [device_or_dir, '-P', policy, '-f', prefix,
                '--choice-algorithm', 'fast', '-I', 'defer', '-L', '0']
        if nodes:
            args += ['-N', nodes]
        if local_work_dir:
            args += ['-s', local_work_dir]
        if global_work_dir:
            args += ['-g', global_work_dir]
        if scope:
            args += ['--scope', scope]
        command.run('mmapplypolicy', *args, discard_output=True)

        listing = '%s.list.%s' % (prefix, LIST_NAME)
        try:
            with open(listing, 'rb') as f:
                raw = summarize(f)
        except OSError as err:
            raise MmError('failed to open policy output: %s' % listing) from err

    log.debug('%d users in pool %s of %s', len(raw), pool, device_or_dir)
    named = {}
    for uid, summary in raw.items():
        name = user.by_uid(uid)
        named.setdefault(name, Summary())
        named[name] += summary
    return Distribution(device_or_dir, pool, named)
