import io
import logging
import os


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file objects to
    uniform their properties: seek() returns the stream itself so
    that it's possible to write stream.seek(offset).read(size).'''

    def __init__(self, obj, flags='rb'):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.flags = flags
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)
        if init_method is None:
            raise ValueError('a stream can\'t be built from \'%s\'' % self._type.__name__)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __del__(self):
        obj = self.__dict__.get('obj')
        if hasattr(obj, 'close'):
            obj.close()

    def __repr__(self):
        return '<%s(%s, %s)>' % (self.__class__.__name__, self._type.__name__, self.flags)

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\' with flags \'%s\'' % (self.obj, self.flags))
        self.obj = open(self.obj, self.flags)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    init_bytearray = init_bytes

    def seek(self, offset, whence=os.SEEK_SET):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset, whence)

        return self

    @property
    def size(self):
        position = self.obj.tell()
        size = self.obj.seek(0, os.SEEK_END)
        self.obj.seek(position)

        return size

    def write(self, data):
        return self.obj.write(data)
