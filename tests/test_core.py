import pytest

from wdbc.container import DBCHeader, HEADER_SIZE, SIGNATURE
from wdbc.core import Chunk
from wdbc.exceptions import ChunkUnpackException, MagicException
from wdbc.fields import StructField, StringField
from wdbc.streams import Stream


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.pack() == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.a.offset == 0x00
    assert dummy.a.father == dummy

    assert dummy.b.size == 0x10
    assert dummy.b.offset == 0x04

    assert dummy.c.offset == 0x14

    assert dummy.size == 0x18
    assert dummy.layout == {
        'a': (0x00, 4),
        'b': (0x04, 0x10),
        'c': (0x14, 4),
    }
    assert dummy.pack() == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )


def test_chunk_instances_dont_share_fields():
    class Pair(Chunk):
        first = StructField('I')
        second = StructField('I')

    one, other = Pair(), Pair()
    one.first.value = 42

    assert one.first is not other.first
    assert other.first.value == 0


def test_chunk_inherits_fields():
    class Base(Chunk):
        first = StructField('I')

    class Derived(Base):
        second = StructField('H')

    assert Derived().get_ordered_fields_name() == ['first', 'second']
    assert Derived().size == 6


def test_header_layout():
    header = DBCHeader()

    assert HEADER_SIZE == 20
    assert header.layout == {
        'signature': (0, 4),
        'record_count': (4, 4),
        'field_count': (8, 4),
        'record_size': (12, 4),
        'string_block_size': (16, 4),
    }
    assert header.pack() == SIGNATURE + b'\x00' * 12 + b'\x01\x00\x00\x00'


def test_header_unpack():
    raw = b'WDBC' + bytes.fromhex('02000000' '03000000' '0c000000' '05000000')

    header = DBCHeader(Stream(raw))

    assert header.record_count.value == 2
    assert header.field_count.value == 3
    assert header.record_size.value == 12
    assert header.string_block_size.value == 5


def test_header_wrong_magic():
    with pytest.raises(MagicException):
        DBCHeader(Stream(b'WDBX' + b'\x00' * 16))


def test_header_short():
    """The chain tells which field failed."""
    with pytest.raises(ChunkUnpackException) as excinfo:
        DBCHeader(Stream(b'WDBC' + b'\x00' * 6))

    assert excinfo.value.chain == ['field_count']
