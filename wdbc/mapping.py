"""
# Field mappings

A record is an opaque sequence of 4-byte slots: a FieldMap gives a name and a type
to groups of them. Every field has a repeat count, so that

    friends = FieldRule(FieldType.UINT, 3)

takes three consecutive slots, addressable as "friends1", "friends2" and "friends3".

Localized strings are special: each repeat takes one slot with the offset of the
base string followed by one slot for each of the LOCALIZATION supported locales.
"""
import logging
import re
from typing import Dict, Iterator, List, NamedTuple, Tuple

from .enum import FieldType, LOCALIZATION


logger = logging.getLogger(__name__)

_SUFFIX_RE = re.compile(r'(.+?)(\d+)$')


class FieldRule(NamedTuple):
    type: FieldType = FieldType.UINT
    count: int = 1

    @classmethod
    def build(cls, type=FieldType.UINT, count=1) -> "FieldRule":
        '''A count of zero means a single value.'''
        return cls(FieldType(type), max(count, 1))

    @property
    def slots(self) -> int:
        return self.slots_up_to(self.count)

    def slots_up_to(self, repeat: int) -> int:
        '''Number of raw slots preceding the given (0-based) repeat.'''
        count = min(self.count, repeat)
        if self.type == FieldType.STRING_LOC:
            count += count * LOCALIZATION
        return count

    def to_bitmask(self) -> int:
        return self.type.mask | (self.count & 0xFF)

    @classmethod
    def from_bitmask(cls, bitmask: int) -> "FieldRule":
        return cls.build(FieldType.from_mask(bitmask), bitmask & 0xFF)


class FieldMap(object):
    '''Ordered association between field names and their rule.

    The total number of raw slots is kept up to date at each add()/remove()
    since a map can be attached to a container only if it matches its field count.'''

    def __init__(self, fields=None):
        self._fields: Dict[str, FieldRule] = {}
        self._count = 0

        for name, rule in (fields or {}).items():
            if rule is None:
                rule = FieldRule()
            elif isinstance(rule, int):
                rule = FieldRule.from_bitmask(rule)
            elif isinstance(rule, FieldType):
                rule = FieldRule(rule)
            self.add(name, rule.type, rule.count)

    def __repr__(self):
        return '<%s(%s)>' % (
            self.__class__.__name__,
            ','.join('%s=%s|%d' % (name, rule.type.value, rule.count) for name, rule in self._fields.items()),
        )

    def __len__(self):
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __contains__(self, name):
        return self.exists(name)

    def __eq__(self, other):
        if not isinstance(other, FieldMap):
            return NotImplemented
        return list(self._fields.items()) == list(other._fields.items())

    def copy(self) -> "FieldMap":
        clone = self.__class__()
        clone._fields = dict(self._fields)
        clone._count = self._count
        return clone

    def get_fields(self) -> Dict[str, FieldRule]:
        return dict(self._fields)

    def get_field_count(self) -> int:
        '''The number of raw slots a record needs to hold this mapping.'''
        return self._count

    def exists(self, name) -> bool:
        return name in self._fields

    def add(self, name, type=FieldType.UINT, count=1):
        rule = FieldRule.build(type, count)

        if name in self._fields:
            logger.debug('replacing field \'%s\' with %s' % (name, rule))
            self._count -= self._fields[name].slots

        self._count += rule.slots
        self._fields[name] = rule

        return self

    def remove(self, name):
        if name in self._fields:
            self._count -= self._fields.pop(name).slots

        return self

    def get_field_offset(self, name) -> int:
        '''Index of the first raw slot of the field.

        A trailing number addresses a single repeat of a multi-count field
        ("friends2" is the second of "friends") unless a field named exactly
        like that exists. It returns -1 if the field can't be resolved.'''
        repeat = 0
        if name not in self._fields:
            match = _SUFFIX_RE.match(name)
            if not match:
                return -1
            name, repeat = match.group(1), int(match.group(2)) - 1

        rule = self._fields.get(name)
        if rule is None or not 0 <= repeat < rule.count:
            return -1

        offset = 0
        for field_name, field_rule in self._fields.items():
            if field_name == name:
                return offset + rule.slots_up_to(repeat)
            offset += field_rule.slots

        return -1

    def schema(self) -> List[Tuple[str, str]]:
        '''The (name, type) of each value as extracted from a record.'''
        result = []
        for name, rule in self._fields.items():
            for idx in range(rule.count):
                suffix = str(idx + 1) if rule.count > 1 else ''
                result.append((name + suffix, rule.type.semantic))

        return result

    def definitions(self) -> List[Tuple[str, str, int]]:
        return [(name, rule.type.value, rule.count) for name, rule in self._fields.items()]

    @classmethod
    def from_definitions(cls, definitions) -> "FieldMap":
        field_map = cls()
        for name, tag, count in definitions:
            field_map.add(name, FieldType(tag), count)

        return field_map

    @classmethod
    def from_dbc(cls, dbc, attach=True) -> "FieldMap":
        '''Predict the mapping of an unmapped container by sampling its records.'''
        from .inference import MapInference
        return MapInference(dbc).run(attach=attach)
