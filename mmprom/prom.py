"""Prometheus text exposition of the parsed data.

Each metric family is described by a mapping from the record attribute to
its name, help text and type. The line builders only format, the data comes
fully resolved from the parsers.
"""
from operator import attrgetter

disk_mapping = {
  'availability': {
    'name': 'gpfs_disk_availability',
    'description': 'GPFS disk availability, 0 if up',
    'type': 'gauge'
  },
}

df_nsd_mapping = {
  'size': {
    'name': 'gpfs_df_nsd_size',
    'description': 'GPFS mmdf NSD size in kilobytes',
    'type': 'gauge'
  },
  'free_blocks': {
    'name': 'gpfs_df_nsd_free_blocks',
    'description': 'GPFS mmdf NSD free blocks in kilobytes',
    'type': 'gauge'
  },
  'free_blocks_percent': {
    'name': 'gpfs_df_nsd_free_blocks_percent',
    'description': 'GPFS mmdf NSD free blocks percent',
    'type': 'gauge'
  },
  'free_fragments': {
    'name': 'gpfs_df_nsd_free_fragments',
    'description': 'GPFS mmdf NSD free fragments in kilobytes',
    'type': 'gauge'
  },
  'free_fragments_percent': {
    'name': 'gpfs_df_nsd_free_fragments_percent',
    'description': 'GPFS mmdf NSD free fragments percent',
    'type': 'gauge'
  },
}

df_pool_mapping = {
  'size': {
    'name': 'gpfs_df_pool_size',
    'description': 'GPFS mmdf pool size in kilobytes',
    'type': 'gauge'
  },
  'free_blocks': {
    'name': 'gpfs_df_pool_free_blocks',
    'description': 'GPFS mmdf pool free blocks in kilobytes',
    'type': 'gauge'
  },
  'free_blocks_percent': {
    'name': 'gpfs_df_pool_free_blocks_percent',
    'description': 'GPFS mmdf pool free blocks percent',
    'type': 'gauge'
  },
  'free_fragments': {
    'name': 'gpfs_df_pool_free_fragments',
    'description': 'GPFS mmdf pool free fragments in kilobytes',
    'type': 'gauge'
  },
  'free_fragments_percent': {
    'name': 'gpfs_df_pool_free_fragments_percent',
    'description': 'GPFS mmdf pool free fragments percent',
    'type': 'gauge'
  },
}

df_fs_mapping = {
  'size': {
    'name': 'gpfs_df_fs_size',
    'description': 'GPFS mmdf file system size in kilobytes',
    'type': 'gauge'
  },
  'free_blocks': {
    'name': 'gpfs_df_fs_free_blocks',
    'description': 'GPFS mmdf file system free blocks in kilobytes',
    'type': 'gauge'
  },
  'free_blocks_percent': {
    'name': 'gpfs_df_fs_free_blocks_percent',
    'description': 'GPFS mmdf file system free blocks percent',
    'type': 'gauge'
  },
  'free_fragments': {
    'name': 'gpfs_df_fs_free_fragments',
    'description': 'GPFS mmdf file system free fragments in kilobytes',
    'type': 'gauge'
  },
  'free_fragments_percent': {
    'name': 'gpfs_df_fs_free_fragments_percent',
    'description': 'GPFS mmdf file system free fragments percent',
    'type': 'gauge'
  },
}

fileset_mapping = {
  'max_inodes': {
    'name': 'gpfs_fileset_max_inodes',
    'description': 'GPFS fileset maximum inodes',
    'type': 'gauge'
  },
  'alloc_inodes': {
    'name': 'gpfs_fileset_alloc_inodes',
    'description': 'GPFS fileset allocated inodes',
    'type': 'gauge'
  },
}

pool_usage_mapping = {
  'total_kb': {
    'name': 'gpfs_fs_pool_total_kbytes',
    'description': 'GPFS pool size in kilobytes',
    'type': 'gauge'
  },
  'free_kb': {
    'name': 'gpfs_fs_pool_free_kbytes',
    'description': 'GPFS pool free kilobytes',
    'type': 'gauge'
  },
}

pool_block_mapping = {
  'read_ios': {
    'name': 'gpfs_pool_read_ios',
    'description': 'GPFS pool processed read I/Os',
    'type': 'counter'
  },
  'read_bytes': {
    'name': 'gpfs_pool_read_bytes',
    'description': 'GPFS pool read bytes',
    'type': 'counter'
  },
  'write_ios': {
    'name': 'gpfs_pool_write_ios',
    'description': 'GPFS pool processed write I/Os',
    'type': 'counter'
  },
  'write_bytes': {
    'name': 'gpfs_pool_write_bytes',
    'description': 'GPFS pool written bytes',
    'type': 'counter'
  },
}

quota_mapping = {
  'block.usage': {
    'name': 'gpfs_quota_block_usage_kbytes',
    'description': 'GPFS quota block usage in kilobytes',
    'type': 'gauge'
  },
  'block.quota': {
    'name': 'gpfs_quota_block_quota_kbytes',
    'description': 'GPFS quota block soft limit in kilobytes',
    'type': 'gauge'
  },
  'block.limit': {
    'name': 'gpfs_quota_block_limit_kbytes',
    'description': 'GPFS quota block hard limit in kilobytes',
    'type': 'gauge'
  },
  'block.in_doubt': {
    'name': 'gpfs_quota_block_in_doubt_kbytes',
    'description': 'GPFS quota block usage in doubt in kilobytes',
    'type': 'gauge'
  },
  'files.usage': {
    'name': 'gpfs_quota_files_usage',
    'description': 'GPFS quota number of files usage',
    'type': 'gauge'
  },
  'files.quota': {
    'name': 'gpfs_quota_files_quota',
    'description': 'GPFS quota number of files soft limit',
    'type': 'gauge'
  },
  'files.limit': {
    'name': 'gpfs_quota_files_limit',
    'description': 'GPFS quota number of files hard limit',
    'type': 'gauge'
  },
  'files.in_doubt': {
    'name': 'gpfs_quota_files_in_doubt',
    'description': 'GPFS quota number of files usage in doubt',
    'type': 'gauge'
  },
}

quota_grace_mapping = {
  'block': {
    'name': 'gpfs_quota_block_grace_seconds',
    'description': 'GPFS block quota grace in seconds with 0=ok, 1=expired or seconds+1',
    'type': 'gauge'
  },
  'files': {
    'name': 'gpfs_quota_files_grace_seconds',
    'description': 'GPFS files quota grace in seconds with 0=ok, 1=expired or seconds+1',
    'type': 'gauge'
  },
}

deadlock_mapping = {
  'nodes': {
    'name': 'gpfs_diag_deadlocks',
    'description': 'GPFS deadlock nodes',
    'type': 'gauge'
  },
}

user_distribution_mapping = {
  'files': {
    'name': 'gpfs_pool_user_distribution_files',
    'description': 'GPFS pool files per user',
    'type': 'gauge'
  },
  'file_size': {
    'name': 'gpfs_pool_user_distribution_file_size',
    'description': 'GPFS pool file size per user in bytes',
    'type': 'gauge'
  },
  'kb_allocated': {
    'name': 'gpfs_pool_user_distribution_allocated',
    'description': 'GPFS pool allocated storage per user in kilobytes',
    'type': 'gauge'
  },
}

fs_io_mapping = {
  'bytes_read': {
    'name': 'gpfs_bytes_read',
    'description': 'GPFS bytes read',
    'type': 'counter'
  },
  'bytes_written': {
    'name': 'gpfs_bytes_write',
    'description': 'GPFS bytes written',
    'type': 'counter'
  },
  'opens': {
    'name': 'gpfs_requests_open',
    'description': 'GPFS open call requests including create',
    'type': 'counter'
  },
  'closes': {
    'name': 'gpfs_requests_close',
    'description': 'GPFS close call requests',
    'type': 'counter'
  },
  'reads': {
    'name': 'gpfs_requests_read',
    'description': 'GPFS number of read requests',
    'type': 'counter'
  },
  'writes': {
    'name': 'gpfs_requests_write',
    'description': 'GPFS number of write requests',
    'type': 'counter'
  },
  'readdirs': {
    'name': 'gpfs_requests_readdir',
    'description': 'GPFS number of readdir requests',
    'type': 'counter'
  },
  'inode_updates': {
    'name': 'gpfs_inode_updates',
    'description': 'GPFS number of inode updates to disk',
    'type': 'counter'
  },
}


def append_descriptions(lines, family):
    lines.append("# HELP %s %s" % (family['name'], family['description']))
    lines.append("# TYPE %s %s" % (family['name'], family['type']))


def format_labels(labels):
    if not labels:
        return ''
    return '{%s}' % ', '.join('%s="%s"' % (k, v) for k, v in labels)


def family_lines(mapping, samples):
    """Render every family of ``mapping`` for ``samples``.

    ``samples`` is a list of ``(labels, record)`` pairs, where ``labels`` is
    a list of ``(name, value)`` pairs.
    """
    lines = []
    for attr, family in mapping.items():
        get = attrgetter(attr)
        append_descriptions(lines, family)
        for labels, record in samples:
            lines.append('%s%s %s' % (family['name'], format_labels(labels), get(record)))
    return lines


def _flag(value):
    return 'true' if value else 'false'


def disk_lines(disks_by_fs):
    family = disk_mapping['availability']
    lines = []
    append_descriptions(lines, family)
    for fs in sorted(disks_by_fs):
        for d in disks_by_fs[fs]:
            labels = [('name', d.nsd_name), ('fs', fs), ('pool', d.pool),
                      ('availability', d.availability)]
            lines.append('%s%s %d' % (family['name'], format_labels(labels),
                                      0 if d.availability.is_up else 1))
    return lines


def df_lines(df_data):
    """Render NSD, pool and total metrics of a list of ``DfData``."""
    nsds = []
    pools = []
    totals = []
    for data in sorted(df_data, key=attrgetter('fs')):
        for nsd in data.nsds:
            nsds.append(([('name', nsd.name), ('fs', data.fs), ('pool', nsd.pool),
                          ('metadata', _flag(nsd.holds_metadata)),
                          ('data', _flag(nsd.holds_objectdata))], nsd))
        for pool in data.pools:
            pools.append(([('name', pool.name), ('fs', data.fs)], pool))
        if data.total is not None:
            totals.append(([('name', data.fs)], data.total))
    return (family_lines(df_nsd_mapping, nsds) +
            family_lines(df_pool_mapping, pools) +
            family_lines(df_fs_mapping, totals))


def fileset_lines(filesets):
    samples = [([('fs', f.filesystem_name), ('fileset', f.fileset_name)], f) for f in filesets]
    return family_lines(fileset_mapping, samples)


def pool_usage_lines(filesystems):
    samples = []
    for fs in filesystems:
        for pool in fs.pools:
            if pool.data is not None:
                samples.append(([('fs', fs.name), ('pool', pool.name), ('type', 'data')], pool.data))
            if pool.meta is not None:
                samples.append(([('fs', fs.name), ('pool', pool.name), ('type', 'meta')], pool.meta))
    return family_lines(pool_usage_mapping, samples)


def pool_block_lines(metrics):
    samples = [([('fs', key.fs), ('pool', key.pool)], metrics[key]) for key in sorted(metrics)]
    return family_lines(pool_block_mapping, samples)


def _quota_labels(entry):
    return [('fs', entry.fs_name), ('type', entry.quota_type), ('id', entry.id),
            ('name', entry.name), ('fileset', entry.fileset_name)]


def quota_lines(entries):
    if not entries:
        return []
    samples = [(_quota_labels(e), e) for e in entries]
    lines = family_lines(quota_mapping, samples)
    for attr, family in quota_grace_mapping.items():
        graced = [(labels, getattr(e, attr).grace_seconds()) for labels, e in samples
                  if getattr(e, attr).grace is not None]
        if not graced:
            continue
        append_descriptions(lines, family)
        for labels, seconds in graced:
            lines.append('%s%s %d' % (family['name'], format_labels(labels), seconds))
    return lines


def deadlock_lines(deadlock):
    family = deadlock_mapping['nodes']
    lines = []
    append_descriptions(lines, family)
    lines.append('%s %d' % (family['name'], len(deadlock.nodes)))
    return lines


def user_distribution_lines(distribution):
    samples = [([('device_or_dir', distribution.device_or_dir), ('pool', distribution.pool),
                 ('user', name)], distribution.users[name])
               for name in sorted(distribution.users)]
    return family_lines(user_distribution_mapping, samples)


def fs_io_lines(stats):
    lines = []
    for attr, family in fs_io_mapping.items():
        append_descriptions(lines, family)
        for s in sorted(stats, key=attrgetter('node', 'fs')):
            labels = [('fs', s.fs), ('host', s.node)]
            lines.append('%s%s %s %s' % (family['name'], format_labels(labels),
                                         getattr(s, attr), s.timestamp_ms))
    return lines


def write_lines(output, lines):
    for line in lines:
        output.write(line + '\n')
