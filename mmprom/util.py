"""Field coercion shared by the `mm* -Y` parsers."""
import re
from dataclasses import dataclass
from urllib.parse import unquote

from mmprom.errors import BoolError, CoercionError

U64_MAX = 2 ** 64 - 1

_unsigned = re.compile(r'^[0-9]+$')
_signed = re.compile(r'^-?[0-9]+$')

_bools = {'yes': True, 'no': False}
_digit_bools = {'yes': True, 'no': False, '1': True, '0': False}


def parse_bool(field, value, digits=False):
    """Convert the file system's ``yes``/``no`` convention to a bool.

    With ``digits``, ``1`` and ``0`` are accepted as well.
    """
    table = _digit_bools if digits else _bools
    try:
        return table[value.lower()]
    except KeyError:
        raise BoolError(field, value) from None


def parse_int(field, value, signed=False):
    if signed:
        if not _signed.match(value):
            raise CoercionError(field, value, 'a signed integer')
        return int(value)
    if not _unsigned.match(value):
        raise CoercionError(field, value, 'an unsigned integer')
    number = int(value)
    if number > U64_MAX:
        raise CoercionError(field, value, 'a 64 bit unsigned integer')
    return number


def percent_decode(value):
    # mmlsfileset encodes ':' as %3A and '/' as %2F in free text fields
    return unquote(value)


@dataclass(frozen=True)
class Literal:
    """A value from a small set of known literals.

    Unknown literals are kept as they are instead of failing, so newer
    releases of the admin commands don't break parsing.
    """
    value: str

    KNOWN = ()

    @property
    def known(self):
        return self.value in self.KNOWN

    def __str__(self):
        return self.value


class Availability(Literal):
    """Disk availability as reported by ``mmlsdisk``."""

    KNOWN = ('up', 'down', 'recovering', 'unrecovered')

    @property
    def is_up(self):
        return self.value == 'up'


Availability.UP = Availability('up')
Availability.DOWN = Availability('down')
Availability.RECOVERING = Availability('recovering')
Availability.UNRECOVERED = Availability('unrecovered')


class QuotaType(Literal):
    KNOWN = ('FILESET', 'GRP', 'USR')


QuotaType.FILESET = QuotaType('FILESET')
QuotaType.GROUP = QuotaType('GRP')
QuotaType.USER = QuotaType('USR')
