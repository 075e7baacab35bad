"""
Core module for the abstraction of a fixed layout structure

"""
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaChunk
from .exceptions import (
    ChunkUnpackException,
    UnpackException,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    The fields are declared as class attributes and are packed/unpacked in the
    order of declaration, e.g.

        class Pair(Chunk):
            first = fields.StructField('I')
            second = fields.StructField('I')
    """

    def __init__(self, stream=None, **kwargs):
        super().__init__(**kwargs)

        self.relayout()

        if stream is not None:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
            self.unpack(stream)

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_size(self):
        return sum(field.size for _, field in self.get_fields())

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        return {name: (field.offset, field.size) for name, field in self.get_fields()}

    def relayout(self, offset=0):
        '''Place each field right after the previous one starting from offset.'''
        self.offset = offset

        size = 0
        for field_name, field in self.get_fields():
            size += field.relayout(offset=offset + size)

        return size

    def pack(self) -> bytes:
        value = b''
        for field_name, field in self.get_fields():
            raw = field.pack()
            self.logger.debug("packing %s.%s raw=%s" % (self.__class__.__name__, field_name, raw))
            value += raw

        return value

    def unpack(self, stream):
        '''Reads the fields one after the other starting from the current
        position of the stream.

        A failure is reported with the chain of field names leading to it.'''
        for field_name, field in self.get_fields():
            offset = stream.tell()
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, offset))

            try:
                field.unpack(stream)
            except (UnpackException, ChunkUnpackException) as e:
                chain = e.chain
                chain.append(field_name)
                raise ChunkUnpackException(str(e), chain=chain) from e

            field.offset = offset
