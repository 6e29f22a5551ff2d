"""`mmlsnsd` parsing, local NSD device cache and grouping by pool.

Finding out which NSDs are served by this node needs ``mmlsnsd -X``, which is
expensive. The result is cached in a flat file of ``nsd:device`` lines. The
cache doesn't record server lists, every entry read back is taken to be local,
so a cache file is only valid on the node that wrote it.
"""
import logging
import os
import tempfile
from collections import namedtuple
from dataclasses import dataclass
from typing import Tuple

from mmprom import blockdev, command, disk, fs, state
from mmprom.decoder import as_lines, decode
from mmprom.errors import CacheError, DeviceNameError, MmError, StatError

log = logging.getLogger(__name__)

DEFAULT_LOCAL_DEVICE_CACHE = '/run/mmlocal-nsd-device-cache'

FsPoolKey = namedtuple('FsPoolKey', ['fs', 'pool'])


@dataclass(frozen=True)
class Nsd:
    name: str
    server_list: Tuple[str, ...]
    device: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            name=index.text(tokens, 'diskName'),
            server_list=tuple(index.text(tokens, 'serverList').split(',')),
            device=index.text(tokens, 'localDiskName'),
        )

    @property
    def device_name(self):
        """Return the bare device name, e.g. ``dm-1`` for ``/dev/dm-1``."""
        name = os.path.basename(self.device.rstrip('/'))
        if not name or name in ('.', '..'):
            raise DeviceNameError(self.device)
        return name


def parse(stream):
    return decode(stream, Nsd, source='mmlsnsd')


def all_nsds():
    return parse(command.run('mmlsnsd', '-X', '-Y'))


def local():
    """Return the NSDs served by this node.

    This runs ``mmlsnsd -X``, use :func:`local_cached` where possible.
    """
    try:
        node = state.local_node_name()
    except MmError as err:
        raise MmError('determining local node name') from err
    return [nsd for nsd in all_nsds() if node in nsd.server_list]


def read_cache(path, node):
    nsds = []
    try:
        with open(path, 'rb') as f:
            for lineno, line in enumerate(as_lines(f), 1):
                if not line:
                    continue
                name, sep, device = line.partition(':')
                if not sep:
                    raise CacheError('%s line %d: no device token' % (path, lineno))
                nsds.append(Nsd(name, (node,), device))
    except (OSError, UnicodeDecodeError) as err:
        raise CacheError('reading cache file: %s' % path) from err
    return nsds


def write_cache(path, nsds):
    """Replace the cache at ``path``, a failed write leaves the old one intact."""
    tmp = None
    try:
        with tempfile.NamedTemporaryFile('w', dir=os.path.dirname(path) or '.',
                                         prefix='.' + os.path.basename(path),
                                         delete=False) as f:
            tmp = f.name
            for nsd in nsds:
                f.write('%s:%s\n' % (nsd.name, nsd.device))
        os.replace(tmp, path)
    except OSError as err:
        if tmp is not None and os.path.exists(tmp):
            os.unlink(tmp)
        raise CacheError('writing cache file: %s' % path) from err


def local_cached(path=DEFAULT_LOCAL_DEVICE_CACHE, force=False):
    """Return the local NSDs, from the cache at ``path`` if it exists.

    The cache is rebuilt if it doesn't exist or if ``force`` is set.
    """
    if force or not os.path.exists(path):
        log.info('rebuilding local NSD device cache %s', path)
        try:
            nsds = local()
        except MmError as err:
            raise MmError('fetching local NSD devices') from err
        write_cache(path, nsds)
        return nsds
    log.debug('reading local NSD device cache %s', path)
    try:
        node = state.local_node_name()
    except MmError as err:
        raise MmError('determining local node name') from err
    return read_cache(path, node)


def group(nsds, disks_by_fs):
    """Group ``nsds`` by file system and pool.

    ``disks_by_fs`` maps file system names to their disks, which carry the
    pool of each NSD. NSDs without a disk in a file system are left out of
    that file system.
    """
    grouped = {}
    for fs_name, disks in disks_by_fs.items():
        pools = {}
        for d in disks:
            pools.setdefault(d.nsd_name, d.pool)
        for nsd in nsds:
            if nsd.name in pools:
                grouped.setdefault(FsPoolKey(fs_name, pools[nsd.name]), []).append(nsd)
    return grouped


def group_by_pool(cache_path=DEFAULT_LOCAL_DEVICE_CACHE, force_refresh=False):
    """Return the local NSDs grouped by :class:`FsPoolKey`."""
    nsds = local_cached(cache_path, force_refresh)
    disks_by_fs = {}
    for fs_name in fs.names():
        try:
            disks_by_fs[fs_name] = disk.disks(fs_name)
        except MmError as err:
            raise MmError('fetching disks for file system %s' % fs_name) from err
    return group(nsds, disks_by_fs)


def sum_stats(grouped, stats):
    """Sum the block device statistics of every group."""
    sums = {}
    for key, nsds in grouped.items():
        total = blockdev.Stat()
        for nsd in nsds:
            try:
                total += stats[nsd.device_name]
            except KeyError:
                raise StatError('no block device stat for device: %s' % nsd.device) from None
        sums[key] = total
    return sums


def pool_block_metrics(cache_path=DEFAULT_LOCAL_DEVICE_CACHE, force_refresh=False, root=None):
    """Return the summed block device statistics per file system pool."""
    grouped = group_by_pool(cache_path, force_refresh)
    return sum_stats(grouped, blockdev.stat_all(root))
