import pytest

from gfarch.core import Chunk
from gfarch.enum import Compliant
from gfarch.exceptions import (
    ChunkUnpackException,
    MagicException,
    TruncatedException,
    ValidationException,
)
from gfarch.fields import StructField, StringField, ArrayField
from gfarch.properties import Dependency


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.a.offset == 0x00
    assert dummy.a.father == dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10
    assert dummy.b.offset == 0x04

    assert dummy.c.size == 0x4
    assert dummy.c.raw == b'\xef\xbe\xad\xde'
    assert dummy.c.offset == 0x14

    assert dummy.size == 0x18
    assert len(dummy.raw) == dummy.size
    assert dummy.raw == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )
    assert dummy.pack() == dummy.raw
    assert dummy.father is None


def test_chunk_instances_are_independent():
    class Dummy(Chunk):
        a = StructField('I')

    first = Dummy()
    second = Dummy()

    first.a.value = 0xcafe

    assert second.a.value == 0
    assert first.a is not second.a


def test_chunk_w_dependencies():
    class Example(Chunk):
        sz = StructField('I')
        data = StringField(Dependency('.sz'), default=b'kebab')

    example = Example()

    assert list(example.get_dependencies().keys()) == [
        'data.length',
    ]

    assert example.sz.father == example
    assert example.sz.value == 5
    assert example.data.value == b'kebab'

    example.data.value = b'miao'
    example.relayout()

    assert example.sz.value == 4
    assert example.pack() == b'\x04\x00\x00\x00miao'


def test_unpack_w_dependencies():
    class Example(Chunk):
        sz = StructField('I')
        data = StringField(Dependency('.sz'))
        trailer = StructField('H')

    example = Example(b'\x03\x00\x00\x00abc\x37\x13')

    assert example.sz.value == 3
    assert example.data.value == b'abc'
    assert example.trailer.value == 0x1337
    assert example.layout == {
        'sz': (0, 4),
        'data': (4, 3),
        'trailer': (7, 2),
    }


def test_nested_chunks_and_arrays():
    class Item(Chunk):
        kind = StructField('B')
        amount = StructField('H')

    class Table(Chunk):
        count = StructField('I')
        items = ArrayField(Item(), n=Dependency('.count'))

    table = Table()

    for idx in range(3):
        item = table.items.instance_element()
        item.kind.value = idx
        item.amount.value = 0x100 + idx
        table.items.append(item)

    raw = table.pack()

    assert table.count.value == 3
    assert raw == (
        b'\x03\x00\x00\x00'
        b'\x00\x00\x01'
        b'\x01\x01\x01'
        b'\x02\x02\x01'
    )
    assert [_.offset for _ in table.items] == [4, 7, 10]

    other = Table(raw)

    assert [(_.kind.value, _.amount.value) for _ in other.items] == [
        (0, 0x100), (1, 0x101), (2, 0x102),
    ]
    assert other.items[2].father is other.items


def test_dependency_from_root():
    class Header(Chunk):
        count = StructField('B')

    class Container(Chunk):
        header = Header()
        items = ArrayField(StructField('B'), n=Dependency('header.count'))

    container = Container(b'\x02\xaa\xbb')

    assert [_.value for _ in container.items] == [0xaa, 0xbb]

    assert Dependency('header.count').resolve(container.items[1]) == 2


def test_inheritance():
    class Base(Chunk):
        magic = StringField(0x02, default=b'AB')

    class Extended(Base):
        extra = StructField('H', default=0x0102)

    assert Extended._meta.fields == ['magic', 'extra']
    assert Extended().raw == b'AB\x02\x01'


def test_proxy_like_format():
    """Check that a file format having sub-components referring to overlapping data
    behaves gently."""

    class Proxy(Chunk):
        off = StructField('I')
        sz = StructField('I')

    class Experiment(Chunk):
        proxy_a = Proxy()
        proxy_b = Proxy()

        contents = StringField(0x100)

    experiment = Experiment()

    assert experiment.layout == {
        'proxy_a': (0, 8),
        'proxy_b': (8, 8),
        'contents': (16, 256),
    }

    assert experiment.size == 0x100 + 2 * (4 + 4)
    assert len(experiment.raw) == experiment.size
    assert experiment.raw == b'\x00' * experiment.size


def test_magic():
    class Magic(Chunk):
        magic = StringField(0x04, default=b'KEKE', is_magic=True)
        data = StructField('I')

    magic = Magic(b'KEKE\x01\x00\x00\x00')

    assert magic.data.value == 1

    with pytest.raises(MagicException):
        Magic(b'KOKO\x01\x00\x00\x00', compliant=Compliant.MAGIC)

    with pytest.raises(MagicException):
        Magic(b'KE', compliant=Compliant.MAGIC)

    # without compliance a wrong magic is only a warning
    magic = Magic(b'KOKO\x01\x00\x00\x00')

    assert magic.magic.value == b'KOKO'


def test_unpack_chain():
    class Inner(Chunk):
        a = StructField('I')
        b = StructField('I')

    class Outer(Chunk):
        count = StructField('B')
        inners = ArrayField(Inner(), n=Dependency('.count'))

    # the count promises more than the data holds
    with pytest.raises(ChunkUnpackException) as excinfo:
        Outer(b'\x02' + b'\x00' * 8)

    assert excinfo.value.chain == ['inners']
    assert isinstance(excinfo.value.cause, TruncatedException)

    # the header is truncated in its second field
    class Container(Chunk):
        header = Inner()

    with pytest.raises(ChunkUnpackException) as excinfo:
        Container(b'\x00' * 6)

    assert excinfo.value.chain == ['b', 'header']
    assert isinstance(excinfo.value.cause, TruncatedException)


def test_unpack_chain_inside_element():
    class Inner(Chunk):
        a = StructField('I')
        b = StringField(0x04, default=b'ELEM', is_magic=True)

    class Outer(Chunk):
        count = StructField('B')
        inners = ArrayField(Inner(), n=Dependency('.count'))

    with pytest.raises(MagicException):
        Outer(b'\x02' + b'\x00' * 4 + b'ELEM' + b'\x00' * 4 + b'ELLE', compliant=Compliant.MAGIC)


def test_validate():
    class Checked(Chunk):
        a = StructField('B')
        b = StructField('B')

        def validate(self):
            return self.a.value < self.b.value

    assert Checked(b'\x01\x02').b.value == 2

    # not enforced without the compliance flag
    assert Checked(b'\x02\x01').a.value == 2

    with pytest.raises(ValidationException):
        Checked(b'\x02\x01', compliant=Compliant.VALIDATE)

    class Container(Chunk):
        checked = Checked()

    with pytest.raises(ChunkUnpackException) as excinfo:
        Container(b'\x02\x01', compliant=Compliant.VALIDATE)

    assert excinfo.value.chain == ['checked']
    assert isinstance(excinfo.value.cause, ValidationException)
