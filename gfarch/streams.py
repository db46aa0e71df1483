import io


class Stream(object):
    '''This is a simple wrapper around bytes-like object to
    uniform its properties: mainly we need to have a seek() method
    and to know how much data remains to be read.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' can not be used as a stream' % self._type.__name__)

        init_method()

    def __getattr__(self, name):
        if name == 'obj':
            raise AttributeError(name)
        return getattr(self.obj, name)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self._type.__name__)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    init_memoryview = init_bytearray

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

        return self

    def __len__(self):
        position = self.obj.tell()
        size = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(position)

        return size

    def remaining(self):
        '''Number of bytes between the actual position and the end of the stream.'''
        return max(len(self) - self.obj.tell(), 0)

