"""`mmrepquota` parsing.

The report is read from standard input, e.g.::

    mmrepquota -Y -a | mmprom prometheus quota
"""
import re
from dataclasses import dataclass
from typing import Optional

from mmprom.decoder import decode
from mmprom.errors import CoercionError
from mmprom.util import QuotaType

_grace = re.compile(r'^(?P<amount>[0-9]+)\s*(?P<unit>day|hour|minute|second)s?$')
_grace_units = {'day': 86400, 'hour': 3600, 'minute': 60, 'second': 1}


@dataclass(frozen=True)
class QuotaMetrics:
    """Block quotas are in kilobytes, files quotas in number of files."""
    usage: int
    quota: int
    limit: int
    in_doubt: int
    grace: Optional[str] = None

    def grace_seconds(self):
        """Return the grace period: 0 if none, 1 if expired, seconds + 1 else."""
        if self.grace is None:
            return None
        return grace_seconds(self.grace)


@dataclass(frozen=True)
class QuotaEntry:
    fs_name: str
    quota_type: QuotaType
    id: int
    name: str
    block: QuotaMetrics
    files: QuotaMetrics
    fileset_name: str

    @classmethod
    def from_tokens(cls, tokens, index):
        return cls(
            fs_name=index.text(tokens, 'filesystemName'),
            quota_type=QuotaType(index.text(tokens, 'quotaType')),
            id=index.integer(tokens, 'id'),
            name=index.text(tokens, 'name'),
            block=_metrics(tokens, index, 'block'),
            files=_metrics(tokens, index, 'files'),
            fileset_name=index.text(tokens, 'filesetname'),
        )


def _metrics(tokens, index, prefix):
    return QuotaMetrics(
        usage=index.integer(tokens, prefix + 'Usage', signed=True),
        quota=index.integer(tokens, prefix + 'Quota'),
        limit=index.integer(tokens, prefix + 'Limit'),
        in_doubt=index.integer(tokens, prefix + 'InDoubt'),
        grace=index.optional_text(tokens, prefix + 'Grace'),
    )


def grace_seconds(value):
    value = value.strip()
    if value == 'none':
        return 0
    if value == 'expired':
        return 1
    match = _grace.match(value)
    if not match:
        raise CoercionError('grace', value, 'a grace period')
    return int(match.group('amount')) * _grace_units[match.group('unit')] + 1


def parse(stream):
    return decode(stream, QuotaEntry, source='mmrepquota', skip_comments=True)
