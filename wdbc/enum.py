from enum import Enum


FIELD_SIZE = 4
LOCALIZATION = 16


class FieldType(Enum):
    '''The kinds of value a raw slot (or a group of them) can hold.

    The value is the tag used when a mapping is persisted.'''
    UINT       = 'uint'
    INT        = 'int'
    FLOAT      = 'float'
    STRING     = 'string'
    STRING_LOC = 'string_loc'

    @property
    def format(self):
        '''struct format of a single slot: strings are stored as an offset
        into the string block.'''
        return _FORMATS[self]

    @property
    def mask(self):
        return _MASKS[self]

    @property
    def semantic(self):
        '''Tag for consumers that don't care about localization.'''
        return FieldType.STRING.value if self.is_string else self.value

    @property
    def is_string(self):
        return self in (FieldType.STRING, FieldType.STRING_LOC)

    @classmethod
    def from_mask(cls, bitmask):
        for field_type, mask in _MASKS.items():
            if bitmask & mask:
                return field_type

        raise ValueError('no type bit set in rule 0x%04x' % bitmask)


_FORMATS = {
    FieldType.UINT:       'I',
    FieldType.INT:        'i',
    FieldType.FLOAT:      'f',
    FieldType.STRING:     'I',
    FieldType.STRING_LOC: 'I',
}

# bits of the packed rule: the low byte holds the repeat count
_MASKS = {
    FieldType.UINT:       0x0100,
    FieldType.INT:        0x0200,
    FieldType.FLOAT:      0x0400,
    FieldType.STRING:     0x0800,
    FieldType.STRING_LOC: 0x1000,
}
