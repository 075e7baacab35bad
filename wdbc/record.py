import logging
import struct
from typing import Dict, List

from .enum import FieldType, FIELD_SIZE, LOCALIZATION
from .fields import StructField
from .exceptions import NoMapAttachedException, NotWritableException


logger = logging.getLogger(__name__)

# one codec for each kind of slot
SLOT_FIELDS = {field_type: StructField(field_type.format, name=field_type.value) for field_type in FieldType}


class Record(object):
    '''A view over the record at the given position of a DBC.

    The data is always read from the container, so that a modification done
    through another Record of the same position is visible here too.'''

    def __init__(self, dbc, position):
        self.dbc = dbc
        self.position = position
        self._id = None

    def __repr__(self):
        return '<%s(#%d, id=%s)>' % (self.__class__.__name__, self.position, self.id)

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return self.dbc is other.dbc and self.position == other.position

    def __hash__(self):
        return hash((id(self.dbc), self.position))

    @property
    def offset(self) -> int:
        '''Absolute offset of the record in the file.'''
        return self.dbc.record_offset(self.position)

    @property
    def data(self) -> bytes:
        return self.dbc.get_record_data(self.position)

    @property
    def id(self) -> int:
        if self._id is None:
            self._id = self.get_uint(0)
        return self._id

    def as_raw_slots(self) -> List[int]:
        data = self.data
        count = min(self.dbc.field_count, len(data) // FIELD_SIZE)

        return list(struct.unpack_from('<%dI' % count, data))

    def _resolve(self, name) -> int:
        field_map = self.dbc.map
        if field_map is None:
            raise NoMapAttachedException(
                'addressing fields by name requires DBC "%s" to have a mapping attached' % self.dbc.path)

        return field_map.get_field_offset(name)

    def _has_slot(self, index) -> bool:
        return 0 <= index and (index + 1) * FIELD_SIZE <= len(self.data)

    def get(self, index, type=FieldType.UINT):
        '''Reads the slot at the given index as a value of the given type (None if
        the slot doesn't exist); for strings the slot is the offset in the string block.'''
        if not self._has_slot(index):
            return None

        start = index * FIELD_SIZE
        value = SLOT_FIELDS[type].decode(self.data[start:start + FIELD_SIZE])

        if type.is_string:
            value = self.dbc.get_string(value)

        return value

    def get_by_name(self, name, type=FieldType.UINT):
        return self.get(self._resolve(name), type)

    def set(self, index, value, type=FieldType.UINT) -> "Record":
        '''Writes the value in the slot at the given index, both in memory and on disk.

        Slots outside the record are ignored.'''
        if not self.dbc.writable:
            raise NotWritableException('modifying records requires DBC "%s" to be writable' % self.dbc.path)

        if not self._has_slot(index):
            logger.debug('ignoring write to slot %d of record #%d' % (index, self.position))
            return self

        if type.is_string:
            value = self.dbc.add_string(value)

        raw = SLOT_FIELDS[type].encode(value)

        previous_id = self.get_uint(0) if index == 0 else None
        self.dbc._write(self.position * self.dbc.record_size + index * FIELD_SIZE, raw)

        if index == 0:
            self._id = SLOT_FIELDS[FieldType.UINT].decode(raw)
            self.dbc.index(self._id, self.position, previous_id=previous_id)

        return self

    def set_by_name(self, name, value, type=FieldType.UINT) -> "Record":
        return self.set(self._resolve(name), value, type)

    def get_uint(self, index):
        return self.get(index, FieldType.UINT)

    def set_uint(self, index, value):
        return self.set(index, value, FieldType.UINT)

    def get_int(self, index):
        return self.get(index, FieldType.INT)

    def set_int(self, index, value):
        return self.set(index, value, FieldType.INT)

    def get_float(self, index):
        return self.get(index, FieldType.FLOAT)

    def set_float(self, index, value):
        return self.set(index, value, FieldType.FLOAT)

    def get_string(self, index):
        return self.get(index, FieldType.STRING)

    def set_string(self, index, value):
        return self.set(index, value, FieldType.STRING)

    def extract(self, map=None) -> Dict[str, object]:
        '''Decodes the whole record using the given map or the one attached to the DBC.

        Fields with a count greater than one are returned as name1, name2, ...
        Of the localized strings only the base one is returned.'''
        field_map = map if map is not None else self.dbc.map
        if field_map is None:
            raise NoMapAttachedException('extracting requires DBC "%s" to have a mapping attached' % self.dbc.path)

        data = self.data
        result = {}
        slot = 0
        for name, rule in field_map.get_fields().items():
            for idx in range(rule.count):
                key = name + str(idx + 1) if rule.count > 1 else name
                start = slot * FIELD_SIZE
                value = SLOT_FIELDS[rule.type].decode(data[start:start + FIELD_SIZE])
                if rule.type.is_string:
                    value = self.dbc.get_string(value)
                result[key] = value

                slot += 1
                if rule.type == FieldType.STRING_LOC:
                    slot += LOCALIZATION

        return result

    def dump(self, use_map=False) -> str:
        if use_map and self.dbc.map is not None:
            fields = self.extract()
        else:
            fields = {'field%d' % (idx + 1): value for idx, value in enumerate(self.as_raw_slots())}

        lines = ['record #%d' % self.position]
        for name, value in fields.items():
            lines.append('  %s: %r' % (name, value))

        return '\n'.join(lines)
