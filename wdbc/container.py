"""
# DBC container

The file is made of three contiguous parts

  .------------------------------------------.
  | header (20 bytes)                        |
  | record 0                                 |
  | ...                                      |
  | record n - 1 (record_size bytes each)    |
  | string block (string_block_size bytes)   |
  '------------------------------------------'

where each record is made of field_count slots of 4 bytes; string fields store
the offset of a NUL terminated string inside the string block, whose first byte is
always NUL so that the offset zero is the empty string.
"""
import logging
import os
import struct
from typing import Dict, Iterator, List, Optional, Sequence

from .core import Chunk
from . import fields
from .enum import FieldType, FIELD_SIZE, LOCALIZATION
from .mapping import FieldMap
from .record import Record, SLOT_FIELDS
from .streams import Stream
from .exceptions import (
    ChunkUnpackException,
    FieldCountMismatchException,
    InvalidSignatureException,
    MagicException,
    MalformedHeaderException,
    NoMapAttachedException,
    NotFoundException,
    NotReadableException,
    NotWritableException,
    TruncatedRecordsException,
    TruncatedStringBlockException,
)


SIGNATURE = b'WDBC'
NULL_BYTE = b'\x00'


class DBCHeader(Chunk):
    signature         = fields.StringField(4, default=SIGNATURE, is_magic=True)
    record_count      = fields.StructField('I')
    field_count       = fields.StructField('I')
    record_size       = fields.StructField('I')
    string_block_size = fields.StructField('I', default=1)


HEADER_SIZE = DBCHeader().size


class DBC(object):
    '''A DBC file on disk.

    Records are appended and modified directly on disk, the string block
    instead lives in memory until finalize() (or close()) is called.'''

    def __init__(self, path, map: Optional[FieldMap] = None, readonly=False):
        self.logger = logging.getLogger(__name__)
        self._path = os.fspath(path)
        self._index: Optional[Dict[int, int]] = None
        self._map: Optional[FieldMap] = None
        self._dirty = False
        self._stream = None

        if not os.path.isfile(self._path):
            raise NotFoundException('DBC "%s" could not be found' % self._path)

        self._stream, self._writable = self._open_stream(readonly)

        try:
            self._unpack()
            self.attach(map)
        except Exception:
            self._stream.close()
            self._stream = None
            raise

    def __repr__(self):
        return '<%s(%s, records=%d, fields=%d)>' % (
            self.__class__.__name__, self._path, self.record_count, self.field_count)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __del__(self):
        # records are appended over the on-disk string block
        if self.__dict__.get('_stream') is not None:
            self.close()

    def __len__(self):
        return self.record_count

    def __iter__(self) -> Iterator[Record]:
        for position in range(self.record_count):
            yield Record(self, position)

    @classmethod
    def open(cls, path, map: Optional[FieldMap] = None, readonly=False) -> "DBC":
        return cls(path, map=map, readonly=readonly)

    @classmethod
    def create(cls, path, count) -> "DBC":
        '''Creates an empty DBC (overwriting any existing file) with the given number
        of fields or with the number of fields required by the given FieldMap, that
        in that case is also attached.'''
        field_map = None
        if isinstance(count, FieldMap):
            field_map = count
            count = field_map.get_field_count()

        header = DBCHeader()
        header.field_count.value = count
        header.record_size.value = count * FIELD_SIZE

        try:
            stream = Stream(os.fspath(path), flags='w+b')
        except OSError as e:
            raise NotWritableException('new DBC "%s" could not be created' % path) from e

        stream.write(header.pack())
        stream.write(NULL_BYTE)
        stream.close()

        return cls(path, map=field_map)

    def _open_stream(self, readonly):
        if not readonly:
            try:
                return Stream(self._path, flags='r+b'), True
            except OSError:
                self.logger.warning('DBC "%s" is not writable, opening read-only' % self._path)

        try:
            return Stream(self._path, flags='rb'), False
        except OSError as e:
            raise NotReadableException('DBC "%s" is not readable' % self._path) from e

    def _unpack(self):
        size = self._stream.size

        self.header = DBCHeader()
        try:
            self.header.unpack(self._stream.seek(0))
        except MagicException as e:
            raise InvalidSignatureException(
                'DBC "%s" has an invalid signature and is therefore not valid' % self._path) from e
        except ChunkUnpackException as e:
            raise MalformedHeaderException('DBC "%s" has a malformed header' % self._path, chain=e.chain) from e

        offset = self.string_block_offset
        if size < offset:
            raise TruncatedRecordsException('DBC "%s" is short of %d bytes for %d records' % (
                self._path, offset - size, self.record_count))

        if size < offset + self.string_block_size:
            raise TruncatedStringBlockException('DBC "%s" is short of %d bytes for string-block' % (
                self._path, offset + self.string_block_size - size))

        self._records = bytearray(self._stream.seek(HEADER_SIZE).read(offset - HEADER_SIZE))
        self._string_block = bytearray(self._stream.read(self.string_block_size))

        self.logger.debug('opened %r (writable=%s)' % (self, self._writable))

    @property
    def path(self) -> str:
        return self._path

    @property
    def writable(self) -> bool:
        return self._stream is not None and self._writable

    @property
    def record_count(self) -> int:
        return self.header.record_count.value

    @property
    def field_count(self) -> int:
        return self.header.field_count.value

    @property
    def record_size(self) -> int:
        return self.header.record_size.value

    @property
    def string_block_size(self) -> int:
        '''Size of the string block as written in the header.'''
        return self.header.string_block_size.value

    @property
    def string_block_offset(self) -> int:
        return HEADER_SIZE + self.record_count * self.record_size

    @property
    def string_block(self) -> bytes:
        return bytes(self._string_block)

    @property
    def map(self) -> Optional[FieldMap]:
        return self._map

    def _check_writable(self, action):
        if not self.writable:
            raise NotWritableException('%s requires DBC "%s" to be writable' % (action, self._path))

    def _write_header_field(self, name):
        field = getattr(self.header, name)
        self._stream.seek(field.offset).write(field.pack())

    def _write(self, offset, raw: bytes):
        '''Writes the raw data at the given offset of the record array both in memory
        and on disk.'''
        self._records[offset:offset + len(raw)] = raw
        self._stream.seek(HEADER_SIZE + offset).write(raw)
        self._stream.flush()

    def record_offset(self, position) -> int:
        return HEADER_SIZE + position * self.record_size

    def get_record_data(self, position) -> bytes:
        start = position * self.record_size
        return bytes(self._records[start:start + self.record_size])

    def attach(self, map: Optional[FieldMap]) -> "DBC":
        '''Use a copy of the given map to access the records; None detaches the current one.'''
        if map is None:
            self._map = None
            return self

        if map.get_field_count() != self.field_count:
            raise FieldCountMismatchException('mapping holds %d fields, but DBC "%s" expects %d' % (
                map.get_field_count(), self._path, self.field_count))

        self._map = map.copy()

        return self

    def ensure_indexed(self) -> Dict[int, int]:
        '''Builds (once) the index of the records by their first slot.'''
        if self._index is None:
            self.logger.debug('indexing %d records of "%s"' % (self.record_count, self._path))
            self._index = {}
            for position in range(self.record_count):
                if self.record_size < FIELD_SIZE:
                    break
                start = position * self.record_size
                record_id, = struct.unpack_from('<I', self._records, start)
                self._index[record_id] = position

        return self._index

    def index(self, record_id, position, previous_id=None) -> "DBC":
        '''Associates the given id with the record at the given position, forgetting the
        id it had before. It does nothing if the index was never built.'''
        if self._index is None:
            return self

        if previous_id is not None and self._index.get(previous_id) == position:
            del self._index[previous_id]
        self._index[record_id] = position

        return self

    def has_record(self, position) -> bool:
        return 0 <= position < self.record_count

    def has_record_by_id(self, record_id) -> bool:
        return record_id in self.ensure_indexed()

    def has_field(self, index) -> bool:
        return 0 <= index < self.field_count

    def get_record(self, position) -> Optional[Record]:
        if not self.has_record(position):
            return None

        return Record(self, position)

    def get_record_by_id(self, record_id) -> Optional[Record]:
        position = self.ensure_indexed().get(record_id)
        if position is None:
            return None

        return Record(self, position)

    def get_string(self, offset) -> Optional[str]:
        if offset == 0:
            return ''

        if not 0 < offset < len(self._string_block):
            return None

        end = self._string_block.find(NULL_BYTE, offset)
        if end < 0:
            end = len(self._string_block)

        return self._string_block[offset:end].decode('utf-8', errors='replace')

    def add_string(self, string) -> int:
        '''Appends the string to the string block returning its offset: the same
        string added twice takes two different offsets.'''
        self._check_writable('adding strings')

        if isinstance(string, str):
            string = string.encode('utf-8')

        offset = len(self._string_block)
        self._string_block += string + NULL_BYTE
        self._dirty = True

        return offset

    def _encode_value(self, field_type: FieldType, item) -> bytes:
        if item is None:
            return SLOT_FIELDS[FieldType.UINT].encode(0)

        if field_type.is_string:
            item = self.add_string(item)

        return SLOT_FIELDS[field_type].encode(item)

    def add_record(self, values: Sequence) -> "DBC":
        '''Appends a record with the values given in the order of the attached map.

        This is lenient on purpose: missing values are written as zero (the empty
        string for string fields) and values in excess are ignored.'''
        self._check_writable('adding records')
        if self._map is None:
            raise NoMapAttachedException('adding records requires DBC "%s" to have a mapping attached' % self._path)

        values = list(values)
        expected = len(self._map.schema())
        if len(values) != expected:
            self.logger.debug('adding record with %d values while the mapping expects %d' % (len(values), expected))

        items = iter(values)
        data = bytearray(self.record_size)
        slot = 0
        for rule in self._map.get_fields().values():
            for _ in range(rule.count):
                raw = self._encode_value(rule.type, next(items, None))
                data[slot * FIELD_SIZE:(slot + 1) * FIELD_SIZE] = raw
                slot += 1
                if rule.type == FieldType.STRING_LOC:
                    slot += LOCALIZATION

        position = self.record_count
        self._write(position * self.record_size, bytes(data[:self.record_size]))
        self._dirty = True

        self.header.record_count.value = position + 1
        self._write_header_field('record_count')
        self._stream.flush()

        if self._index is not None and self.record_size >= FIELD_SIZE:
            record_id, = struct.unpack_from('<I', data)
            self._index[record_id] = position

        self.logger.debug('added record #%d to "%s"' % (position, self._path))

        return self

    def add_records(self, rows) -> "DBC":
        for row in rows:
            self.add_record(row)

        return self

    def finalize(self) -> "DBC":
        '''Writes the string block after the last record and updates its size in the
        header. Calling it more than once is harmless.'''
        if not self.writable or not self._dirty:
            return self

        size = len(self._string_block)
        self.logger.debug('writing string block of %d bytes at offset %d' % (size, self.string_block_offset))

        self._stream.seek(self.string_block_offset).write(bytes(self._string_block))
        self._stream.truncate()

        if self.string_block_size != size:
            self.header.string_block_size.value = size
            self._write_header_field('string_block_size')

        self._stream.flush()
        self._dirty = False

        return self

    def close(self):
        if self._stream is None:
            return

        self.finalize()
        self._stream.close()
        self._stream = None
        self._index = None

    def dump(self, use_map=False) -> List[str]:
        return [record.dump(use_map=use_map) for record in self]
