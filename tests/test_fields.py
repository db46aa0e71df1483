from enum import Enum, auto
from zlib import crc32

import pytest

from gfarch.common.crc import CRCField, TextCRCField
from gfarch.core import Chunk
from gfarch.enum import Compliant
from gfarch.exceptions import (
    ChunkUnpackException,
    EnumException,
    TruncatedException,
    UnpackException,
)
from gfarch.fields import StructField, StringField, NameField, ArrayField
from gfarch.meta import Endianess
from gfarch.properties import Dependency
from gfarch.streams import Stream


def test_structfield_conversion_raw_value():
    """Check that the attributes "value" and "raw" are the analogous
    of the integers and bytes representation for a field.

    NOTE: this should be done for all the fields."""
    field = StructField('I')

    assert field.size == 4
    assert field.raw == b'\x00\x00\x00\x00'
    assert field.value == 0

    field.value = 0xcafe

    assert field.value == 0xcafe
    assert field.raw == b'\xfe\xca\x00\x00'


def test_structfield_set_raw():
    field = StructField('I')

    field.raw = b'\x01\x02\x03\x04'
    assert field.value == 0x04030201

    field = StructField('H', endianess=Endianess.BIG_ENDIAN)

    field.raw = b'\x01\x02'
    assert field.value == 0x0102

    with pytest.raises(TruncatedException):
        field.raw = b'\x01'


def test_structfield_overflow():
    field = StructField('H')

    field.value = 0x10000

    with pytest.raises(ValueError):
        field.raw


def test_structfield_enum():
    class DummyEnum(Enum):
        NONE = 0
        FIRST = auto()
        SECOND = auto()

    field = StructField('I', enum=DummyEnum, compliant=Compliant.ENUM)

    assert field.value == DummyEnum.NONE

    field.value = DummyEnum.SECOND

    assert field.value == DummyEnum.SECOND
    assert field.raw == b'\x02\x00\x00\x00'

    with pytest.raises(EnumException):
        field.raw = b'\x04\x00\x00\x00'

    # without compliance the raw integer is kept
    field = StructField('I', enum=DummyEnum)
    field.raw = b'\x04\x00\x00\x00'

    assert field.value == 4


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert len(field.raw) == field.size
    assert field.raw == b'\x00' * field.size

    with pytest.raises(ValueError):
        field.value = b'kebab'

    data = b''.join([bytes([_]) for _ in range(0x10)])

    field.value = data

    assert field.value == data
    assert field.raw == data


def test_namefield():
    field = NameField(0x08)

    assert field.size == 0x08
    assert field.value == ''
    assert field.raw == b'\x00' * 0x08

    field.value = 'a.txt'

    assert field.encoded == b'a.txt'
    assert field.raw == b'a.txt\x00\x00\x00'

    # the longest name leaves room for the terminator
    field.value = 'abcdefg'
    assert field.raw == b'abcdefg\x00'

    with pytest.raises(ValueError):
        field.value = 'abcdefgh'

    with pytest.raises(ValueError):
        field.value = 'a\x00b'

    with pytest.raises(ValueError):
        field.value = b'a.txt'

    # the encoded length counts, not the number of characters
    with pytest.raises(ValueError):
        field.value = 'àèìò'

    field.value = 'àèì'
    assert field.raw == 'àèì'.encode('utf-8') + b'\x00\x00'


def test_namefield_unpack():
    field = NameField(0x08)

    field.raw = b'b.bin\x00\x00\x00'
    assert field.value == 'b.bin'

    # garbage after the terminator is ignored
    field.raw = b'b.bin\x00zz'
    assert field.value == 'b.bin'

    with pytest.raises(UnpackException):
        field.raw = b'abcdefgh'

    with pytest.raises(UnpackException):
        field.raw = b'\xff\xfe\x00\x00\x00\x00\x00\x00'

    with pytest.raises(TruncatedException):
        field.raw = b'b.bin'


def test_arrayfield():
    length = 10
    array = ArrayField(StructField('I'), n=length)
    array.relayout()

    # check some basic property
    assert isinstance(array.value, list)
    assert len(array.value) == length
    assert len(array) == length

    # check that the elements are not duplicated
    assert array[0] is not array[1]
    assert array[0].father is array

    # check the offsets make sens
    assert array[0].offset == 0
    assert array[1].offset == 4
    assert array[9].offset == 36

    # check the value are all zero
    for _ in range(len(array)):
        field = array[_]
        assert field.value == 0

    # set one and check is actually changed
    array[3].value = 0xcafebabe
    assert [_.value for _ in array] == [
        0, 0, 0, 0xcafebabe, 0, 0, 0, 0, 0, 0,
    ]
    assert array.raw[12:16] == b'\xbe\xba\xfe\xca'

    array.clear()

    assert len(array) == 0


def test_arrayfield_unpack_bounds():
    array = ArrayField(StructField('H'), n=3)

    array.unpack(Stream(b'\x01\x00\x02\x00\x03\x00'))

    assert [_.value for _ in array] == [1, 2, 3]

    class Table(Chunk):
        count = StructField('I')
        items = ArrayField(StructField('H'), n=Dependency('.count'))

    # refused before building any element
    with pytest.raises(ChunkUnpackException) as excinfo:
        Table(b'\x00\x00\x00\x10\x01\x00\x02\x00')

    assert isinstance(excinfo.value.cause, TruncatedException)


def test_crcfield():
    class Record(Chunk):
        crc = CRCField(['payload'])
        payload = StringField(0x04, default=b'miao')

    record = Record()
    raw = record.pack()

    assert raw[:4] == crc32(b'miao').to_bytes(4, 'little')
    assert record.crc.is_valid()

    record = Record(raw[:4] + b'bau!')

    assert not record.crc.is_valid()


def test_textcrcfield():
    class Named(Chunk):
        name_hash = TextCRCField(['filename'])
        filename = NameField(0x10)

    named = Named()
    named.filename.value = 'a.txt'

    raw = named.pack()

    # only the text is hashed, not the padding of its slot
    assert named.name_hash.value == crc32(b'a.txt')
    assert raw[4:] == b'a.txt'.ljust(0x10, b'\x00')
    assert Named(raw).name_hash.is_valid()


def test_stream_types():
    assert Stream(bytearray(b'abc')).read() == b'abc'
    assert Stream(memoryview(b'abc')).seek(1).remaining() == 2

    # paths are not opened: the caller reads the file
    with pytest.raises(ValueError):
        Stream('archive.gfa')

    with pytest.raises(ValueError):
        Chunk('archive.gfa')
