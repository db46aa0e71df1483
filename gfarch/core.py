"""
Core module for the abstraction of a file format

"""
from typing import Tuple, List, Dict

from .fields import Field
from .enum import Compliant
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    ChunkUnpackException,
    UnpackException,
    ValidationException,
)
from .properties import (
    Dependency,
    ChunkPhase,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    A Chunk can contain sub-chunks, declared as class attributes in the
    order they appear in the binary representation.

    If some data is passed to the constructor (bytes or a Stream) it
    is unpacked immediately, otherwise the chunk is initialized with the
    defaults of its fields and relayouted.
    """

    def __init__(self, data=None, **kwargs):
        super().__init__(**kwargs)

        if data is not None:
            stream = data if isinstance(data, Stream) else Stream(data)
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
            self.unpack(stream)
        else:
            self.relayout()

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def get_dependencies(self) -> Dict[str, Dependency]:
        dep = super().get_dependencies()

        for field_name, field in self.get_fields():
            for key, value in field.get_dependencies().items():
                dep.update({f'{field_name}.{key}': value})

        return dep

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

    def _get_value(self):
        return {name: field.value for name, field in self.get_fields()}

    def _set_value(self, value):
        for name, field_value in value.items():
            getattr(self, name).value = field_value

    def _get_size(self):
        '''the size parameter MUST not be set but MUST be derived from the subchunks'''
        size = 0
        for _, field in self.get_fields():
            size += field.size

        return size

    def _get_raw(self):
        value = b''
        for field_name, field_instance in self.get_fields():
            field_raw = field_instance.raw
            self.logger.debug("field '{}' raw={}".format(field_name, field_raw))
            value += field_raw

        return value

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def relayout(self, offset=0):
        '''This method triggers the chunk's children to reset the offsets
        and to update the fields depending on others, in order to pack correctly.

        In practice it's like packing() but it's only interested in the sizes
        of the chunks.'''
        phase_old = self._phase
        self._phase = ChunkPhase.RELAYOUTING
        self.offset = offset

        size = 0
        for field_name, field_instance in self.get_fields():
            self.logger.debug('relayouting %s.%s' % (self.__class__.__name__, field_name))
            size += field_instance.relayout(offset=offset + size)

        self._phase = phase_old

        return size

    def pack(self, stream=None, relayout=True):
        '''
        Create the raw data encoding of the class instance.

        **we need to update size and offset during the packing phase**, so
        if not told otherwise a relayout is triggered first.
        '''
        self._phase = ChunkPhase.PACKING
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream

        for field_name, field_instance in self.get_fields():
            if field_instance.offset is None:
                raise AttributeError(f'offset for field named "{field_name}" {field_instance!r} is not defined!')

            stream.seek(field_instance.offset)

            self.logger.debug('field %s set at offset %08x' % (field_name, field_instance.offset))
            field_instance.pack(stream=stream, relayout=False)

        self._phase = ChunkPhase.DONE

        return stream.getvalue()

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        The fields are read one after the other starting from the actual position
        of the stream; when one of them fails the exception is re-raised as a
        ChunkUnpackException with the chain of names leading to it.
        '''
        self._phase = ChunkPhase.UNPACKING
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            offset = stream.tell()
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, offset))

            try:
                field.unpack(stream)
            except (UnpackException, ChunkUnpackException) as e:
                chain = e.chain
                chain.append(field_name)
                cause = e.cause if isinstance(e, ChunkUnpackException) else e
                raise ChunkUnpackException(chain=chain, cause=cause) from e
            field.offset = offset

        if hasattr(self, 'validate') and not self.validate():
            self.logger.warning(f'validation for chunk \'{self.__class__.__name__}\' failed')
            if self.is_compliant(Compliant.VALIDATE):
                raise ValidationException(chain=[])

        self._phase = ChunkPhase.DONE
