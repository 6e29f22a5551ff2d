import pytest

from mmprom.errors import BoolError, CoercionError, error_chain, DecodeError
from mmprom.util import (U64_MAX, Availability, QuotaType, parse_bool, parse_int,
                         percent_decode)


@pytest.mark.parametrize('value, expected', [
    ('yes', True), ('Yes', True), ('YES', True),
    ('no', False), ('No', False), ('NO', False),
])
def test_parse_bool(value, expected):
    assert parse_bool('f', value) is expected


@pytest.mark.parametrize('value', ['', 'y', 'true', '1', '0', 'nope'])
def test_parse_bool_rejects(value):
    with pytest.raises(BoolError):
        parse_bool('f', value)


def test_parse_bool_digits():
    assert parse_bool('f', '1', digits=True) is True
    assert parse_bool('f', '0', digits=True) is False
    assert parse_bool('f', 'Yes', digits=True) is True
    with pytest.raises(BoolError):
        parse_bool('f', '2', digits=True)


def test_parse_int():
    assert parse_int('f', '0') == 0
    assert parse_int('f', str(U64_MAX)) == U64_MAX
    assert parse_int('f', '-4', signed=True) == -4


@pytest.mark.parametrize('value', ['', '-1', '+1', '1.5', ' 1', '0x10', str(U64_MAX + 1)])
def test_parse_int_rejects(value):
    with pytest.raises(CoercionError):
        parse_int('f', value)


def test_parse_int_signed_rejects():
    with pytest.raises(CoercionError):
        parse_int('f', '--1', signed=True)


def test_percent_decode():
    assert percent_decode('a%3Ab%2Fc') == 'a:b/c'
    assert percent_decode('plain') == 'plain'


def test_availability():
    assert Availability('up') == Availability.UP
    assert Availability.UP.is_up
    assert not Availability.DOWN.is_up
    assert Availability.RECOVERING.known
    new = Availability('suspended')
    assert not new.known
    assert not new.is_up
    assert str(new) == 'suspended'


def test_quota_type():
    assert QuotaType('USR') == QuotaType.USER
    assert QuotaType('GRP') == QuotaType.GROUP
    assert QuotaType.FILESET.known
    assert not QuotaType('PRJ').known


def test_error_chain():
    try:
        try:
            raise CoercionError('size', 'x', 'an unsigned integer')
        except CoercionError as err:
            raise DecodeError('parsing mmdf line 3') from err
    except DecodeError as err:
        assert error_chain(err) == ("parsing mmdf line 3: invalid size field: "
                                    "'x' is not an unsigned integer")
