import io

from mmprom import df, prom, quota
from mmprom.blockdev import Stat
from mmprom.diag import DeadlockInfo
from mmprom.disk import Disk
from mmprom.fileset import Fileset
from mmprom.mmpmon import FsIoStat
from mmprom.nsd import FsPoolKey
from mmprom.policy import Distribution, Summary
from mmprom.pool import Filesystem, Pool, PoolSize
from mmprom.util import Availability


def test_format_labels():
    assert prom.format_labels([]) == ''
    assert prom.format_labels([('fs', 'gpfs1'), ('pool', 'nvme')]) == '{fs="gpfs1", pool="nvme"}'


def test_disk_lines():
    lines = prom.disk_lines({'gpfs1': [
        Disk('disk1', True, False, Availability.UP, 'system'),
        Disk('disk2', False, True, Availability.DOWN, 'nvme'),
    ]})
    assert lines == [
        '# HELP gpfs_disk_availability GPFS disk availability, 0 if up',
        '# TYPE gpfs_disk_availability gauge',
        'gpfs_disk_availability{name="disk1", fs="gpfs1", pool="system", availability="up"} 0',
        'gpfs_disk_availability{name="disk2", fs="gpfs1", pool="nvme", availability="down"} 1',
    ]


def test_df_lines(data):
    lines = prom.df_lines([df.parse('gpfs1', data('df.in'))])
    assert ('gpfs_df_nsd_size{name="filer3_nvme02", fs="gpfs1", pool="nvme", '
            'metadata="false", data="true"} 6251223376') in lines
    assert 'gpfs_df_pool_free_blocks_percent{name="system", fs="gpfs1"} 68' in lines
    assert 'gpfs_df_fs_size{name="gpfs1"} 5055008965696' in lines
    assert lines.count('# TYPE gpfs_df_fs_size gauge') == 1


def test_df_lines_without_total():
    lines = prom.df_lines([df.DfData('gpfs1')])
    assert '# HELP gpfs_df_fs_size GPFS mmdf file system size in kilobytes' in lines
    assert not [line for line in lines if not line.startswith('#')]


def test_fileset_lines():
    lines = prom.fileset_lines([Fileset('gpfs1', 'work', 100, 50)])
    assert lines == [
        '# HELP gpfs_fileset_max_inodes GPFS fileset maximum inodes',
        '# TYPE gpfs_fileset_max_inodes gauge',
        'gpfs_fileset_max_inodes{fs="gpfs1", fileset="work"} 100',
        '# HELP gpfs_fileset_alloc_inodes GPFS fileset allocated inodes',
        '# TYPE gpfs_fileset_alloc_inodes gauge',
        'gpfs_fileset_alloc_inodes{fs="gpfs1", fileset="work"} 50',
    ]


def test_pool_usage_lines():
    lines = prom.pool_usage_lines([Filesystem('gpfs1', [
        Pool('system', None, PoolSize(100, 40)),
        Pool('nvme', PoolSize(1000, 700), None),
    ])])
    assert 'gpfs_fs_pool_total_kbytes{fs="gpfs1", pool="system", type="meta"} 100' in lines
    assert 'gpfs_fs_pool_free_kbytes{fs="gpfs1", pool="nvme", type="data"} 700' in lines
    assert not [line for line in lines if 'system' in line and 'type="data"' in line]


def test_pool_block_lines():
    lines = prom.pool_block_lines({
        FsPoolKey('gpfs1', 'system'): Stat(read_ios=5),
        FsPoolKey('gpfs1', 'nvme'): Stat(read_ios=11, read_sectors=2, write_ios=3, write_sectors=4),
    })
    assert lines[:4] == [
        '# HELP gpfs_pool_read_ios GPFS pool processed read I/Os',
        '# TYPE gpfs_pool_read_ios counter',
        'gpfs_pool_read_ios{fs="gpfs1", pool="nvme"} 11',
        'gpfs_pool_read_ios{fs="gpfs1", pool="system"} 5',
    ]
    assert 'gpfs_pool_read_bytes{fs="gpfs1", pool="nvme"} 1024' in lines
    assert 'gpfs_pool_write_bytes{fs="gpfs1", pool="nvme"} 2048' in lines


def test_quota_lines(data):
    lines = prom.quota_lines(quota.parse(data('quota.in')))
    assert ('gpfs_quota_block_usage_kbytes{fs="gpfs1", type="FILESET", id="1", name="name1", '
            'fileset=""} 950235440') in lines
    assert ('gpfs_quota_files_limit{fs="gpfs1", type="USR", id="62347", name="62347", '
            'fileset="fileset1"} 0') in lines
    assert ('gpfs_quota_block_grace_seconds{fs="gpfs1", type="USR", id="62347", name="62347", '
            'fileset="fileset1"} 0') in lines


def test_quota_lines_empty():
    assert prom.quota_lines([]) == []


def test_deadlock_lines():
    assert prom.deadlock_lines(DeadlockInfo(['filer3']))[-1] == 'gpfs_diag_deadlocks 1'
    assert prom.deadlock_lines(DeadlockInfo())[-1] == 'gpfs_diag_deadlocks 0'


def test_user_distribution_lines():
    lines = prom.user_distribution_lines(
        Distribution('gpfs1', 'nvme', {'bob': Summary(1, 2, 3), 'alice': Summary(4, 5, 6)}))
    assert lines[2:4] == [
        'gpfs_pool_user_distribution_files{device_or_dir="gpfs1", pool="nvme", user="alice"} 4',
        'gpfs_pool_user_distribution_files{device_or_dir="gpfs1", pool="nvme", user="bob"} 1',
    ]


def test_fs_io_lines():
    stat = FsIoStat('filer1', 'cluster1', 'gpfs1', 1536005985350, 10, 20, 1, 2, 3, 4, 5, 6)
    lines = prom.fs_io_lines([stat])
    assert 'gpfs_bytes_read{fs="gpfs1", host="filer1"} 10 1536005985350' in lines
    assert 'gpfs_inode_updates{fs="gpfs1", host="filer1"} 6 1536005985350' in lines
    assert '# TYPE gpfs_bytes_write counter' in lines


def test_write_lines():
    output = io.StringIO()
    prom.write_lines(output, ['a', 'b'])
    assert output.getvalue() == 'a\nb\n'
