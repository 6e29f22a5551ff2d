"""Command line interface."""
import argparse
import logging
import sys

from mmprom import (__version__, df, diag, disk, fileset, fs, mgr, mmpmon, nmon, nsd,
                    policy, pool, prom, quota)
from mmprom.errors import EmptyPoolError, MmError, NotFoundError, error_chain

log = logging.getLogger('mmprom')

CACHE_HELP = ("The local NSD block device association needs to be figured out with "
              "`mmlsnsd -X`, which is an expensive operation. That's why this caching "
              "command exists.")


def emit(args, lines):
    """Write ``lines`` to ``--output`` or standard output."""
    if args.output:
        try:
            with open(args.output, 'w') as f:
                prom.write_lines(f, lines)
        except OSError as err:
            raise MmError('writing output file: %s' % args.output) from err
    else:
        prom.write_lines(sys.stdout, lines)


def run_cache_nmon(args):
    nmon.by_pool_cached(args.device_cache, args.force, args.output)


def run_cache_nsds(args):
    nsd.local_cached(args.output, args.force)


def run_list_filesystems(args):
    emit(args, fs.names())


def run_list_mgr_cluster(args):
    managers = mgr.get()
    if managers.cluster is None:
        raise NotFoundError('mmlsmgr returned no cluster manager')
    emit(args, [managers.cluster.name])


def run_list_mgr_filesystem(args):
    emit(args, ['%s %s %s' % (m.fs, m.name, m.ip) for m in mgr.get().filesystems])


def run_pool_percent(args):
    filesystem = pool.run(args.filesystem)
    found = filesystem.pool(args.pool)
    if found is None:
        raise NotFoundError('pool %s not found' % args.pool)
    if found.data is None:
        raise NotFoundError('pool %s is not object data' % args.pool)
    try:
        used = found.data.used_percent
    except EmptyPoolError as err:
        raise MmError('pool %s' % args.pool) from err
    emit(args, [str(used)])


def run_prom_df(args):
    emit(args, prom.df_lines([df.run(name) for name in fs.names()]))


def run_prom_disk(args):
    disks_by_fs = {}
    for name in fs.names():
        try:
            disks_by_fs[name] = disk.disks(name)
        except MmError as err:
            raise MmError('fetching disks for file system %s' % name) from err
    emit(args, prom.disk_lines(disks_by_fs))


def run_prom_fileset(args):
    filesets = []
    for name in fs.names():
        filesets.extend(fileset.filesets(name))
    emit(args, prom.fileset_lines(filesets))


def run_prom_quota(args):
    entries = quota.parse(sys.stdin.buffer)
    emit(args, prom.quota_lines(entries))


def run_prom_deadlock(args):
    emit(args, prom.deadlock_lines(diag.deadlock()))


def run_prom_fsio(args):
    emit(args, prom.fs_io_lines(mmpmon.fs_io_stats()))


def run_prom_pool_block(args):
    metrics = nsd.pool_block_metrics(args.device_cache, args.force)
    emit(args, prom.pool_block_lines(metrics))


def run_prom_pool_usage(args):
    try:
        filesystems = pool.run_all(fs.names())
    except MmError as err:
        raise MmError('gathering pool usage') from err
    emit(args, prom.pool_usage_lines(filesystems))


def run_prom_pool_user_distribution(args):
    distribution = policy.run(
        args.device_or_dir,
        args.pool,
        fileset=args.fileset,
        nodes=args.nodes,
        local_work_dir=args.local_work_dir,
        global_work_dir=args.global_work_dir,
        scope=args.scope,
    )
    emit(args, prom.user_distribution_lines(distribution))


def add_output(parser, default=None):
    parser.add_argument('-o', '--output', default=default, help='output file')


def add_device_cache(parser):
    parser.add_argument('--device-cache', default=nsd.DEFAULT_LOCAL_DEVICE_CACHE,
                        help='cache for local NSD block device associations')
    add_force(parser)


def add_force(parser):
    parser.add_argument('-f', '--force', action='store_true', help='force cache recreation')


def build_parser():
    parser = argparse.ArgumentParser(prog='mmprom', description='Spectrum Scale companion tool.')
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
    parser.add_argument('-v', '--verbose', action='store_true', help='log debug messages')
    commands = parser.add_subparsers(dest='command', metavar='COMMAND')
    commands.required = True

    # cache
    cache = commands.add_parser('cache', help='cache results for later use')
    caches = cache.add_subparsers(dest='cache', metavar='CACHE')
    caches.required = True
    p = caches.add_parser('nmon', help='cache local NSD block devices for use with nmon',
                          description=CACHE_HELP)
    add_device_cache(p)
    add_output(p, nmon.DEFAULT_NMON_CACHE)
    p.set_defaults(func=run_cache_nmon)
    p = caches.add_parser('nsds', help='cache local NSD block device association',
                          description=CACHE_HELP)
    add_force(p)
    add_output(p, nsd.DEFAULT_LOCAL_DEVICE_CACHE)
    p.set_defaults(func=run_cache_nsds)

    # list
    lists = commands.add_parser('list', help='list commands')
    listing = lists.add_subparsers(dest='list', metavar='WHAT')
    listing.required = True
    p = listing.add_parser('filesystems', aliases=['fs'], help='list file system names')
    add_output(p)
    p.set_defaults(func=run_list_filesystems)
    manager = listing.add_parser('manager', help='list managers')
    managers = manager.add_subparsers(dest='manager', metavar='MANAGER')
    managers.required = True
    p = managers.add_parser('cluster', help='show the cluster manager')
    add_output(p)
    p.set_defaults(func=run_list_mgr_cluster)
    p = managers.add_parser('filesystem', help='show the file system managers')
    add_output(p)
    p.set_defaults(func=run_list_mgr_filesystem)

    # pool-percent
    p = commands.add_parser('pool-percent', help='show pool used in percent')
    p.add_argument('filesystem', help='file system')
    p.add_argument('pool', help='pool name')
    add_output(p)
    p.set_defaults(func=run_pool_percent)

    # prometheus
    prometheus = commands.add_parser('prometheus', aliases=['prom'], help='prometheus metrics')
    metrics = prometheus.add_subparsers(dest='metrics', metavar='METRICS')
    metrics.required = True
    for name, func, text in (
            ('df', run_prom_df, 'mmdf NSD, pool and file system metrics'),
            ('disk', run_prom_disk, 'disk availability metrics'),
            ('fileset', run_prom_fileset, 'fileset inode metrics'),
            ('quota', run_prom_quota, 'quota metrics, reads mmrepquota -Y from stdin'),
            ('deadlock', run_prom_deadlock, 'deadlock metrics'),
            ('fsio', run_prom_fsio, 'mmpmon file system I/O metrics')):
        p = metrics.add_parser(name, help=text)
        add_output(p)
        p.set_defaults(func=func)

    pools = metrics.add_parser('pool', help='pool metrics')
    pool_metrics = pools.add_subparsers(dest='pool_metrics', metavar='METRICS')
    pool_metrics.required = True
    p = pool_metrics.add_parser('block', help='block device metrics grouped by pool',
                                description='Run locally on every file server.')
    add_device_cache(p)
    add_output(p)
    p.set_defaults(func=run_prom_pool_block)
    p = pool_metrics.add_parser('usage', help='pool usage metrics',
                                description='Run on cluster manager only.')
    add_output(p)
    p.set_defaults(func=run_prom_pool_usage)
    p = pool_metrics.add_parser('user-distribution', help='pool usage per user')
    p.add_argument('device_or_dir', metavar='DEVICE_OR_DIR', help='file system device or directory')
    p.add_argument('pool', help='pool name')
    p.add_argument('--fileset', help='only scan this fileset')
    p.add_argument('-N', '--nodes', help='nodes running mmapplypolicy')
    p.add_argument('-s', '--local-work-dir', help='local work directory')
    p.add_argument('-g', '--global-work-dir', help='global work directory')
    p.add_argument('--scope', help='mmapplypolicy scan scope')
    add_output(p)
    p.set_defaults(func=run_prom_pool_user_distribution)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(name)s: %(levelname)s: %(message)s',
        stream=sys.stderr,
    )
    try:
        args.func(args)
    except (MmError, OSError) as err:
        log.error('%s', error_chain(err))
        return 1
    return 0
