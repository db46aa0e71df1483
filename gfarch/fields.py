"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable without need for relayouting.
"""
import logging
import struct
from enum import Enum
from typing import Dict

from .enum import Compliant
from .meta import FieldBase, Endianess
from .properties import Dependency, ChunkPhase
from .streams import Stream
from .exceptions import (
    UnpackException,
    ChunkUnpackException,
    MagicException,
    TruncatedException,
    EnumException,
)


class Field(FieldBase):
    """Base class to subclass from"""
    logger = logging.getLogger(__name__)

    def __init__(self, *, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self._phase = ChunkPhase.INIT
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def get_dependencies(self) -> Dict[str, Dependency]:
        """Return the dictionary containing as key the attribute bound to a Dependency"""
        instance_dict = self.__dict__
        return {_k.lstrip('_'): _v for _k, _v in instance_dict.items() if isinstance(_v, Dependency)}

    def is_compliant(self, level):
        '''Returns True if this field or one of the fathers it inherits from requires
        the given level of compliance.'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def _get_value(self):
        return self._value

    def _set_value(self, value):
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    def _set_raw(self, raw: bytes) -> None:
        self.unpack(Stream(raw))

    raw = property(
        fget=lambda self: self._get_raw(),
        fset=lambda self, value: self._set_raw(value),
    )

    def _read(self, stream, size):
        '''Read exactly "size" bytes or complain about it.'''
        data = stream.read(size)

        if len(data) != size:
            self.logger.debug('wanted %d bytes for \'%s\', found %d' % (size, self.name, len(data)))
            if self.is_magic:
                raise MagicException(chain=[])
            raise TruncatedException(chain=[])

        return data

    def relayout(self, offset=0):
        self.logger.debug("relayouting %s", self.__class__.__name__)
        old_phase = self._phase
        self._phase = ChunkPhase.RELAYOUTING
        self.offset = offset

        self._phase = old_phase

        return self.size

    def _update_value(self):
        '''This is used to update the binary value before packing'''
        pass

    def pack(self, stream=None, relayout=True):
        '''Write the binary representation into the stream (at its actual position)
        and return it.'''
        self._phase = ChunkPhase.PACKING
        if relayout:
            self.relayout()

        self._update_value()
        raw = self.raw

        if stream is not None:
            stream.write(raw)

        self._phase = ChunkPhase.DONE

        return raw

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')

    def check_magic(self, value):
        if self.is_magic and value != self.default:
            self.logger.warning('the magic for field \'%s\' doesn\'t correspond' % self.name)
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(chain=[])


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if not self.enum:
            return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

        return f'<{self.__class__.__name__}({self.value!r})>'

    def __str__(self):
        width = self.size * 2
        formatter = '0x%%0%dx' % width
        return formatter % (self.value if not isinstance(self.value, Enum) else self.value.value,)

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        value = self.value.value if isinstance(self.value, Enum) else self.value
        try:
            return struct.pack(self.get_format(), value)
        except struct.error as e:
            raise ValueError(f'field \'{self.name}\' can not hold {value!r}: {e}') from e

    def _unpack_enum(self, value: int) -> Enum:
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise EnumException(chain=[])

            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value

    def _unpack(self, raw):
        value = struct.unpack(self.get_format(), raw)[0]
        if self.enum:
            value = self._unpack_enum(value)

        self.check_magic(value)

        return value

    def unpack(self, stream):
        self._phase = ChunkPhase.UNPACKING
        self.value = self._unpack(self._read(stream, self.size))
        self._phase = ChunkPhase.DONE


class StringField(Field):
    """Represent a contiguous chunk of bytes with a length fixed by "n", that can
    be an integer or a Dependency."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self._length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    @property
    def length(self):
        if isinstance(self._length, Dependency):
            return self._length.resolve(self) if self.father is not None else 0

        return self._length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        """The StringField has the size as a parameter and we must follow that indication
        unless it's a Dependency, in that case we are going to write back the value where necessary."""
        if value is None:
            value = b''

        if not isinstance(self._length, Dependency) and len(value) != self._length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self._length} bytes)')

        super()._set_value(bytes(value))

    def relayout(self, offset=0):
        if isinstance(self._length, Dependency) and self.father is not None:
            self._length.resolve_and_set(self, len(self.value))

        return super().relayout(offset=offset)

    def _get_raw(self):
        return self.value

    def unpack(self, stream):
        self._phase = ChunkPhase.UNPACKING
        value = self._read(stream, self.length)
        self.check_magic(value)
        self.value = value
        self._phase = ChunkPhase.DONE


class NameField(Field):
    """A text stored into a fixed slot of "n" bytes, padded with NULs.

    At least one NUL must remain at the end of the slot, so the longest
    name is "n - 1" bytes once encoded."""

    def __init__(self, n, encoding='utf-8', **kw):
        self.length = n
        self.encoding = encoding
        super().__init__(default=kw.pop('default', ''), **kw)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def _get_size(self):
        return self.length

    @property
    def encoded(self) -> bytes:
        return self.value.encode(self.encoding)

    def _set_value(self, value) -> None:
        if not isinstance(value, str):
            raise ValueError(f'field \'{self.name}\' accepts only str, not {value.__class__.__name__}')

        encoded = value.encode(self.encoding)
        if b'\x00' in encoded:
            raise ValueError(f'name {value!r} contains a NUL character')
        if len(encoded) >= self.length:
            raise ValueError(f'name {value!r} is {len(encoded)} bytes, at most {self.length - 1} are allowed')

        super()._set_value(value)

    def _get_raw(self):
        return self.encoded.ljust(self.length, b'\x00')

    def unpack(self, stream):
        self._phase = ChunkPhase.UNPACKING
        raw = self._read(stream, self.length)

        if b'\x00' not in raw:
            self.logger.warning('name slot for \'%s\' is not NUL terminated' % self.name)
            raise UnpackException(chain=[])

        try:
            self.value = raw.split(b'\x00', 1)[0].decode(self.encoding)
        except UnicodeDecodeError as e:
            self.logger.warning('name is not valid %s: %s' % (self.encoding, e))
            raise UnpackException(chain=[]) from e

        self._phase = ChunkPhase.DONE


class ArrayField(Field):
    '''Un/Pack an array of Chunks.

    You can indicate an explicit number of elements via the parameter named "n",
    either an integer or a Dependency on a sibling field.

    This class must behave like a list in python, obviously cannot implement all the methods
    since, for example, slicing what should mean?
    '''

    def __init__(self, field_cls, n=0, **kw):
        if not isinstance(n, (Dependency, int)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self.field_cls = field_cls
        self._n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        n = self._n if isinstance(self._n, int) else 0
        return [self.instance_element() for _ in range(n)]

    @property
    def n(self):
        if isinstance(self._n, Dependency):
            return self._n.resolve(self)

        return self._n

    def clear(self):
        self.value.clear()

    def _get_raw(self):
        return b''.join([element.raw for element in self.value])

    def _get_size(self):
        return sum([element.size for element in self.value])

    def relayout(self, offset=0):
        if isinstance(self._n, Dependency):
            self._n.resolve_and_set(self, len(self.value))
        else:
            self._n = len(self.value)

        super().relayout(offset=offset)

        size = 0
        for element in self.value:
            size += element.relayout(offset=offset + size)

        return size

    def pack(self, stream=None, relayout=True):
        self._phase = ChunkPhase.PACKING
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream
        for element in self.value:
            stream.seek(element.offset)
            element.pack(stream=stream, relayout=False)

        self._phase = ChunkPhase.DONE

        return self.raw

    def unpack(self, stream):
        self._phase = ChunkPhase.UNPACKING
        n = self.n

        # refuse counts that cannot be satisfied before building any element
        element_size = self.field_cls.size
        if element_size and n * element_size > stream.remaining():
            self.logger.debug('%d elements of %d bytes do not fit into %d bytes' % (
                n, element_size, stream.remaining()))
            raise TruncatedException(chain=[])

        self.value = []
        for idx in range(n):
            element = self.instance_element()
            element.offset = stream.tell()
            try:
                self.unpack_element(element, stream)
            except (UnpackException, ChunkUnpackException) as e:
                e.chain.append(str(idx))
                raise

            self.value.append(element)

        self._phase = ChunkPhase.DONE

    def instance_element(self):
        return self.field_cls.create(father=self)  # pass the father so that we don't lose the hierarchy

    def unpack_element(self, element, stream):
        element.unpack(stream)

    def append(self, element):
        element.father = self
        self.value.append(element)
