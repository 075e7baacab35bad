import pytest

from wdbc.exceptions import MagicException, UnpackException
from wdbc.fields import StructField, StringField
from wdbc.meta import Endianess
from wdbc.streams import Stream


def test_structfield_conversion_raw_value():
    """Check that encode()/decode() are the analogous of the integers
    and bytes representation for a field."""
    field = StructField('I')

    assert field.size == 4
    assert field.pack() == b'\x00\x00\x00\x00'
    assert field.value == 0

    field.value = 0xcafe

    assert field.value == 0xcafe
    assert field.pack() == b'\xfe\xca\x00\x00'
    assert field.decode(b'\x01\x02\x03\x04') == 0x04030201


def test_structfield_signed_and_float():
    assert StructField('i').decode(b'\xff\xff\xff\xff') == -1
    assert StructField('i').encode(-2) == b'\xfe\xff\xff\xff'
    assert StructField('f').decode(StructField('f').encode(0.5)) == 0.5


def test_structfield_big_endian():
    field = StructField('I', endianess=Endianess.BIG_ENDIAN)

    assert field.encode(1) == b'\x00\x00\x00\x01'


def test_structfield_unpack_short():
    field = StructField('I')

    with pytest.raises(UnpackException):
        field.unpack(Stream(b'\x01\x02'))


def test_structfield_magic():
    field = StructField('I', default=0xcafe, is_magic=True)

    field.unpack(Stream(b'\xfe\xca\x00\x00'))
    assert field.value == 0xcafe

    with pytest.raises(MagicException):
        field.unpack(Stream(b'\x00\x00\x00\x00'))


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert len(field.pack()) == field.size
    assert field.pack() == b'\x00' * field.size

    field.value = b'kebab'
    with pytest.raises(ValueError):
        field.pack()

    data = bytes(range(0x10))
    field.unpack(Stream(data))

    assert field.value == data
    assert field.pack() == data


def test_stringfield_needs_length():
    with pytest.raises(ValueError):
        StringField()

    assert StringField(default=b'WDBC').size == 4


def test_stringfield_short_magic_is_wrong_magic():
    field = StringField(4, default=b'WDBC', is_magic=True)

    with pytest.raises(MagicException):
        field.unpack(Stream(b'WD'))
