"""Header driven decoding of the `mm* -Y` output format.

Every line is a list of colon separated tokens. The second token names the
record type, the third is either ``HEADER`` or belongs to a data row. A
``HEADER`` row maps column names to positions for all following rows of the
same type, until the next ``HEADER`` row of that type replaces it::

    mmlsdisk::HEADER:version:reserved:reserved:nsdName:...:storagePool:
    mmlsdisk::0:1:::disk1:...:system:

Record classes implement ``from_tokens(tokens, index)`` and read their fields
through a :class:`ColumnIndex`.
"""
import csv
import io
import logging

from mmprom.errors import DecodeError, MissingColumnError, MmError, StructuralError
from mmprom.util import parse_bool, parse_int, percent_decode

log = logging.getLogger(__name__)

HEADER = 'HEADER'


class ColumnIndex(dict):
    """Column name to position mapping of one record type."""

    @classmethod
    def from_header(cls, tokens):
        index = cls()
        # the first three tokens are the command, type and HEADER marker
        for position, name in enumerate(tokens):
            if position > 2 and name:
                index[name] = position
        return index

    def position(self, field):
        try:
            return self[field]
        except KeyError:
            raise MissingColumnError(field) from None

    def text(self, tokens, field):
        position = self.position(field)
        try:
            return tokens[position]
        except IndexError:
            raise StructuralError('row has %d tokens, %s column is at %d' %
                                  (len(tokens), field, position)) from None

    def optional_text(self, tokens, field, default=None):
        if field not in self:
            return default
        return self.text(tokens, field)

    def integer(self, tokens, field, signed=False):
        return parse_int(field, self.text(tokens, field), signed=signed)

    def boolean(self, tokens, field, digits=False):
        return parse_bool(field, self.text(tokens, field), digits=digits)

    def decoded(self, tokens, field, default=''):
        value = self.optional_text(tokens, field)
        if value is None:
            return default
        return percent_decode(value)


def split_line(line):
    """Split one line into its colon separated tokens."""
    # -Y output is never quoted, quote characters are data
    try:
        return next(csv.reader([line], delimiter=':', quoting=csv.QUOTE_NONE))
    except csv.Error as err:
        raise StructuralError("can't split line") from err


def as_lines(stream):
    """Iterate over ``stream`` as text lines.

    ``stream`` may be ``bytes``, a binary or text file object, or any
    iterable of lines.
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)
    elif isinstance(stream, str):
        stream = io.StringIO(stream)
    for line in stream:
        if isinstance(line, (bytes, bytearray)):
            line = line.decode('utf-8')
        yield line.rstrip('\r\n')


def iter_rows(stream, types, source='input', skip_comments=False):
    """Yield ``(type, record)`` pairs decoded from ``stream``.

    ``types`` maps the record type tag (second token) to a record class. Rows
    of types not in ``types`` are skipped; the tag ``None`` matches any row,
    for single type streams.
    """
    indices = {}
    lineno = 0
    try:
        for lineno, line in enumerate(as_lines(stream), 1):
            if not line:
                continue
            if skip_comments and line.startswith('***'):
                continue
            tokens = split_line(line)
            if len(tokens) < 3:
                raise StructuralError('expected at least 3 tokens, got %d' % len(tokens))
            tag = None if None in types else tokens[1]
            if tag not in types:
                continue
            if tokens[2] == HEADER:
                indices[tag] = ColumnIndex.from_header(tokens)
                log.debug('%s line %d: %s header with %d columns', source, lineno,
                          tokens[1] or tokens[0], len(indices[tag]))
                continue
            # a row without a preceding header fails on its first field
            yield tag, types[tag].from_tokens(tokens, indices.get(tag, ColumnIndex()))
    except UnicodeDecodeError as err:
        raise DecodeError('%s line %d is not UTF-8' % (source, lineno + 1)) from err
    except MmError as err:
        raise DecodeError('parsing %s line %d' % (source, lineno)) from err


def decode(stream, record_type, source='input', skip_comments=False):
    """Decode a single type stream into a list of records."""
    return [record for _, record in iter_rows(stream, {None: record_type}, source, skip_comments)]


def decode_many(stream, types, source='input'):
    """Decode an interleaved stream into one list per record type."""
    records = {tag: [] for tag in types}
    for tag, record in iter_rows(stream, types, source):
        records[tag].append(record)
    return records
