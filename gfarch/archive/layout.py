'''
Per-version description of the archive: which chunks encode header and file
table and the few numbers the codec needs to place the data.

  version | header | record | name    | default offset | alignment
  --------+--------+--------+---------+----------------+----------
  V1      | 0x0c   | 0x2c   | 31 byte | 0x0800         | none
  V2      | 0x14   | 0x4c   | 63 byte | 0x1000         | 0x10
  V3      | 0x18   | 0x50   | 63 byte | 0x2000         | 0x20
'''
import logging
from typing import NamedTuple

from ..exceptions import UnsupportedVersion
from . import (
    GFAFileV1,
    GFAFileV2,
    GFAFileV3,
    GFAHeaderV1,
    GFAHeaderV2,
    GFAHeaderV3,
    GFAEntryV1,
    GFAEntryV2,
    GFAEntryV3,
)
from .enum import Version


logger = logging.getLogger(__name__)


class Layout(NamedTuple):
    version: Version
    file_cls: type
    header_cls: type
    entry_cls: type
    max_entries: int
    default_offset: int
    alignment: int

    @property
    def header_size(self) -> int:
        return self.header_cls().size

    @property
    def entry_size(self) -> int:
        return self.entry_cls().size

    @property
    def name_width(self) -> int:
        '''Maximum number of bytes of an encoded name.'''
        return self.entry_cls().filename.length - 1

    @property
    def has_data_offset(self) -> bool:
        return 'data_offset' in self.header_cls._meta.fields

    @property
    def has_data_size(self) -> bool:
        return 'data_size' in self.header_cls._meta.fields

    def table_size(self, count: int) -> int:
        return count * self.entry_size

    def align(self, offset: int) -> int:
        return -(-offset // self.alignment) * self.alignment


LAYOUTS = {
    Version.V1: Layout(Version.V1, GFAFileV1, GFAHeaderV1, GFAEntryV1,
                       max_entries=0xffff, default_offset=0x0800, alignment=0x01),
    Version.V2: Layout(Version.V2, GFAFileV2, GFAHeaderV2, GFAEntryV2,
                       max_entries=0xffffffff, default_offset=0x1000, alignment=0x10),
    Version.V3: Layout(Version.V3, GFAFileV3, GFAHeaderV3, GFAEntryV3,
                       max_entries=0xffffffff, default_offset=0x2000, alignment=0x20),
}


def get_layout(version) -> Layout:
    try:
        return LAYOUTS[Version(version)]
    except (ValueError, KeyError):
        raise UnsupportedVersion(f'version {version!r} is not supported') from None
