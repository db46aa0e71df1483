import pytest

from gfarch.archive.enum import Version
from gfarch.archive.layout import get_layout, LAYOUTS
from gfarch.archive.offset import GFCPOffset, resolve
from gfarch.exceptions import InvalidOffset, UnsupportedVersion


def test_layouts():
    assert [(_.header_size, _.entry_size, _.name_width) for _ in LAYOUTS.values()] == [
        (0x0c, 0x2c, 31),
        (0x14, 0x4c, 63),
        (0x18, 0x50, 63),
    ]

    layout = get_layout(0x0200)

    assert layout.version == Version.V2
    assert layout.table_size(3) == 3 * 0x4c
    assert layout.align(0x1001) == 0x1010
    assert layout.align(0x1010) == 0x1010
    assert layout.has_data_offset
    assert not layout.has_data_size

    assert get_layout(Version.V1).align(0x1001) == 0x1001
    assert not get_layout(Version.V1).has_data_offset
    assert get_layout(Version.V3).has_data_size

    with pytest.raises(UnsupportedVersion):
        get_layout(0x0400)


def test_policy():
    assert GFCPOffset.default().is_default
    assert GFCPOffset.default() == GFCPOffset()
    assert not GFCPOffset.custom(0x100).is_default
    assert GFCPOffset.custom(0x100) == GFCPOffset.custom(0x100)
    assert GFCPOffset.custom(0x100) != GFCPOffset.custom(0x200)
    assert len({GFCPOffset.custom(0x100), GFCPOffset.custom(0x100)}) == 1


def test_default():
    assert resolve(GFCPOffset.default(), Version.V1, 0x0c, 0x2c) == 0x800
    assert resolve(GFCPOffset.default(), Version.V2, 0x14, 0x4c) == 0x1000
    assert resolve(None, Version.V3, 0x18, 0x50) == 0x2000

    # exactly filling the space before the canonical offset is fine
    assert resolve(None, Version.V3, 0x18, 0x2000 - 0x18) == 0x2000


def test_default_overflow():
    # 50 records of V1 don't fit before 0x800: the data follows the table
    assert resolve(None, Version.V1, 0x0c, 50 * 0x2c) == 0x8b0

    # the alignment of the version wins when bigger
    assert resolve(None, Version.V3, 0x18, 0x2000) == 0x2020


def test_custom():
    minimum = 0x14 + 2 * 0x4c

    assert resolve(GFCPOffset.custom(minimum), Version.V2, 0x14, 2 * 0x4c) == minimum
    assert resolve(minimum + 1, Version.V2, 0x14, 2 * 0x4c) == minimum + 1
    assert resolve(GFCPOffset.custom(0xffffffff), Version.V2, 0x14, 0x4c) == 0xffffffff

    with pytest.raises(InvalidOffset):
        resolve(GFCPOffset.custom(minimum - 1), Version.V2, 0x14, 2 * 0x4c)

    with pytest.raises(InvalidOffset):
        resolve(GFCPOffset.custom(-1), Version.V2, 0x14, 0x4c)

    with pytest.raises(InvalidOffset):
        resolve(GFCPOffset.custom(0x100000000), Version.V2, 0x14, 0x4c)

    with pytest.raises(InvalidOffset):
        resolve(GFCPOffset.custom('0x800'), Version.V2, 0x14, 0x4c)

    with pytest.raises(InvalidOffset):
        resolve('0x800', Version.V2, 0x14, 0x4c)

    # InvalidOffset is also a ValueError
    with pytest.raises(ValueError):
        resolve(True, Version.V2, 0x14, 0x4c)
