"""File system I/O counters from ``mmpmon``.

``mmpmon -p`` answers ``fs_io_s`` with one line of key/value pairs per
mounted file system, e.g.::

    _fs_io_s_ _n_ 10.10.21.1 _nn_ filer1 _rc_ 0 _t_ 1536005985 _tu_ 350611 _cl_ cluster1 _fs_ gpfs1 _d_ 32 _br_ 3401130516933 _bw_ 525742920053 _oc_ 14848149 _cc_ 10894911 _rdc_ 1776360 _wc_ 5527815 _dir_ 37573 _iu_ 11739978
"""
import logging
from dataclasses import dataclass

from mmprom import command
from mmprom.decoder import as_lines
from mmprom.errors import DecodeError, MissingColumnError, MmError
from mmprom.util import parse_int

log = logging.getLogger(__name__)

# mmpmon needs an input script, it is given on stdin
REQUEST = b"""
once nlist add *
fs_io_s
"""

COUNTERS = {
    '_br_': 'bytes_read',
    '_bw_': 'bytes_written',
    '_oc_': 'opens',
    '_cc_': 'closes',
    '_rdc_': 'reads',
    '_wc_': 'writes',
    '_dir_': 'readdirs',
    '_iu_': 'inode_updates',
}


@dataclass(frozen=True)
class FsIoStat:
    node: str
    cluster: str
    fs: str
    timestamp_ms: int
    bytes_read: int
    bytes_written: int
    opens: int
    closes: int
    reads: int
    writes: int
    readdirs: int
    inode_updates: int

    @classmethod
    def from_line(cls, line):
        d = pairs(line)

        def value(key):
            try:
                return d[key]
            except KeyError:
                raise MissingColumnError(key) from None

        counters = {name: parse_int(key, value(key)) for key, name in COUNTERS.items()}
        seconds = parse_int('_t_', value('_t_'))
        micros = parse_int('_tu_', value('_tu_'))
        return cls(
            node=d.get('_nn_') or value('_n_'),
            cluster=d.get('_cl_', ''),
            fs=value('_fs_'),
            timestamp_ms=seconds * 1000 + micros // 1000,
            **counters
        )


def pairs(line):
    tokens = line.split()[1:]
    return dict(zip(*[iter(tokens)] * 2))


def parse(stream):
    stats = []
    lineno = 0
    try:
        for lineno, line in enumerate(as_lines(stream), 1):
            if not line.startswith('_fs_io_s_'):
                continue
            d = pairs(line)
            # a node without mounted file systems answers with rc 1 and no counters
            if d.get('_rc_', '0') != '0' or d.get('_fs_') == '-':
                log.debug('mmpmon line %d: no file system data, rc %s', lineno, d.get('_rc_'))
                continue
            try:
                stats.append(FsIoStat.from_line(line))
            except MmError as err:
                raise DecodeError('parsing mmpmon line %d' % lineno) from err
    except UnicodeDecodeError as err:
        raise DecodeError('mmpmon line %d is not UTF-8' % (lineno + 1)) from err
    return stats


def fs_io_stats():
    return parse(command.run('mmpmon', '-p', stdin=REQUEST))
