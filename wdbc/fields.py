"""
A Field is "fundamental" datatype from the format point of view, something with a fixed
size that is directly packable/unpackable from a stream.
"""
import logging
import struct

from .meta import FieldBase, Endianess
from .exceptions import UnpackException, MagicException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def relayout(self, offset=0):
        self.offset = offset

        return self.size

    def check_magic(self, value):
        if self.is_magic and value != self.default:
            self.logger.warning('the magic for field \'%s\' doesn\'t correspond: %r' % (self.name, value))
            raise MagicException('expected %r, found %r' % (self.default, value), chain=[])

    def pack(self) -> bytes:
        raise NotImplementedError('you need to implement this in the subclass')

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    numbers to/from bytes.

    It can be used standalone to encode and decode values, without being part of a Chunk.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        encoder = hex if isinstance(self.value, int) else repr
        return '<%s(%s)>' % (self.__class__.__name__, encoder(self.value))

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def encode(self, value) -> bytes:
        return struct.pack(self.get_format(), value)

    def decode(self, raw: bytes):
        try:
            return struct.unpack(self.get_format(), raw)[0]
        except struct.error as e:
            self.logger.debug(e)
            raise UnpackException('field \'%s\' needs %d bytes, got %d' % (self.name, self.size, len(raw)), chain=[])

    def pack(self) -> bytes:
        return self.encode(self.value)

    def unpack(self, stream):
        value = self.decode(stream.read(self.size))
        self.check_magic(value)
        self.value = value


class StringField(Field):
    """Represent a contiguous chunk of bytes of fixed length."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n or len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def pack(self) -> bytes:
        if len(self.value) != self.length:
            raise ValueError(f'you are trying to pack a value with the wrong size (that is {self.length} bytes)')

        return self.value

    def unpack(self, stream):
        value = stream.read(self.length)
        # a short magic is a wrong magic
        self.check_magic(value)
        if len(value) != self.length:
            raise UnpackException('field \'%s\' needs %d bytes, got %d' % (self.name, self.length, len(value)), chain=[])

        self.value = value
