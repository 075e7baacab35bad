"""
# Mapping inference

Without a mapping a record is only a sequence of 32-bit slots; looking at how the
same slot behaves across a sample of records it's possible to guess what it holds:

 - a float usually has a small exponent or a mantissa with the lower bits cleared
 - a string is an offset that points right after a NUL byte of the string block
 - a signed integer sometimes has the sign bit set

It's a heuristic: expect some wrong guesses.
"""
import logging
from typing import List, Set

from bitstring import Bits

from .enum import FieldType, LOCALIZATION
from .mapping import FieldMap


logger = logging.getLogger(__name__)

SAMPLES = 255

# each slot accumulates its evidences in a single integer, one byte for each
NEGATIVE_SHIFT = 0
FLOAT_SHIFT    = 8
STRING_SHIFT   = 16
OFFSET_SHIFT   = 24


def is_probable_float(value: int) -> bool:
    '''Whether the 32 bits are a probable IEEE-754 single precision number.

    See <https://stackoverflow.com/questions/2485388/>.'''
    bits = Bits(uint=value, length=32)
    exponent = bits[1:9].uint - 127
    mantissa = bits[9:].uint

    if -30 <= exponent <= 30:
        return True

    return mantissa != 0 and (mantissa & 0xffff) == 0


def is_negative(value: int) -> bool:
    return Bits(uint=value, length=32)[0]


def string_starts(block: bytes) -> Set[int]:
    '''Offsets of the string block that follow a NUL byte, apart from the last one.'''
    starts = set()
    position = block.find(b'\x00')
    while position >= 0:
        offset = position + 1
        if offset < len(block) - 1:
            starts.add(offset)
        position = block.find(b'\x00', offset)

    return starts


class MapInference(object):
    '''Guesses a FieldMap for a DBC by sampling its first records.'''

    def __init__(self, dbc, samples=SAMPLES):
        self.dbc = dbc
        # the counters are one byte wide
        self.samples = min(samples, SAMPLES, dbc.record_count)
        self.matrix: List[int] = []

    def accumulate(self) -> List[int]:
        strings = string_starts(self.dbc.string_block)
        matrix = [0] * self.dbc.field_count

        for position in range(self.samples):
            record = self.dbc.get_record(position)
            for slot, value in enumerate(record.as_raw_slots()):
                if is_negative(value):
                    matrix[slot] += 1 << NEGATIVE_SHIFT
                if is_probable_float(value):
                    matrix[slot] += 1 << FLOAT_SHIFT
                if value in strings or value == 0:
                    matrix[slot] += 1 << STRING_SHIFT
                    if value != 0:
                        matrix[slot] |= 1 << OFFSET_SHIFT

        self.matrix = matrix

        return matrix

    def ratios(self, slot):
        '''The (negative, float, string) ratios of the slot with the flag for non-zero offsets.'''
        evidences = self.matrix[slot]
        samples = self.samples or 1

        return (
            ((evidences >> NEGATIVE_SHIFT) & 0xff) / samples,
            ((evidences >> FLOAT_SHIFT) & 0xff) / samples,
            ((evidences >> STRING_SHIFT) & 0xff) / samples,
            (evidences >> OFFSET_SHIFT) & 0xff,
        )

    def is_locale_slot(self, slot) -> bool:
        '''A locale slot is always zero or a string start, and never a non-zero offset.'''
        _, _, string, offset = self.ratios(slot)
        return string == 1 and offset == 0

    def classify(self) -> FieldMap:
        field_map = FieldMap()
        fields = self.dbc.field_count

        slot = 0
        while slot < fields:
            name = 'field%d' % (slot + 1)
            negative, flt, string, offset = self.ratios(slot)

            if flt > 0.6:
                field_type = FieldType.FLOAT
            elif offset > 0 and string > 0.99:
                field_type = FieldType.STRING
                if slot + LOCALIZATION < fields:
                    field_type = FieldType.STRING_LOC
                    for locale in range(slot + 1, slot + LOCALIZATION + 1):
                        if not self.is_locale_slot(locale):
                            field_type = FieldType.STRING
                    if field_type == FieldType.STRING_LOC:
                        slot += LOCALIZATION
            elif negative > 0.01:
                field_type = FieldType.INT
            else:
                field_type = FieldType.UINT

            logger.debug('%s guessed as %s' % (name, field_type.value))
            field_map.add(name, field_type)
            slot += 1

        return field_map

    def run(self, attach=True) -> FieldMap:
        self.accumulate()
        field_map = self.classify()

        if attach and self.dbc.map is None:
            self.dbc.attach(field_map)

        return field_map
