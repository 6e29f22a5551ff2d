"""Disk groups for ``nmon``.

Each line is a ``{fs}-{pool}`` group followed by the local block devices of
that pool, suitable for ``nmon -g``.
"""
import logging

from mmprom import nsd
from mmprom.errors import CacheError, MmError

log = logging.getLogger(__name__)

DEFAULT_NMON_CACHE = '/run/mmlocal-nmon-cache'


def by_pool(grouped):
    lines = []
    for key in sorted(grouped):
        devices = ' '.join(n.device_name for n in grouped[key])
        lines.append('%s-%s %s' % (key.fs, key.pool, devices))
    return lines


def by_pool_cached(device_cache, force, output):
    """Write the disk groups of the local NSDs to the file ``output``."""
    try:
        grouped = nsd.group_by_pool(device_cache, force)
    except MmError as err:
        raise MmError('fetching local NSD devices') from err
    lines = by_pool(grouped)
    try:
        with open(output, 'w') as f:
            for line in lines:
                f.write(line + '\n')
    except OSError as err:
        raise CacheError('writing nmon cache: %s' % output) from err
    log.info('wrote %d nmon disk groups to %s', len(lines), output)
    return lines
