'''
# GoodFeel archive (GFA)

Container used by the asset pipeline of the GoodFeel engine: a set of named
files, all compressed with the same algorithm, indexed by a fixed-width table.

The general structure is the following
  .--------------------------.
  | header                   |
  | file table (N records)   |
  | zero fill                |  up to the data offset
  | data of entry 1          |
  | zero padding             |  up to the alignment of the version
  | data of entry 2          |
    ...
  | data of entry N          |
  '--------------------------'

The offsets in the file table are relative to the start of the archive; the
sizes stored are the exact lengths of the (compressed) payloads, padding
excluded. The three revisions of the format differ in the widths of the
header's fields, in the width of the names and in the presence of the data
offset/size in the header, see layout.py.
'''
from ..core import Chunk
from .. import fields
from ..properties import Dependency
from ..common.crc import TextCRCField
from .enum import Version, CompressionType


MAGIC = b'GFAC'


class GFAPreamble(Chunk):
    '''The part of the header shared by all the versions, enough to choose the layout.'''
    magic   = fields.StringField(0x04, default=MAGIC, is_magic=True)
    version = fields.StructField('I', enum=Version, default=Version.V3)


class GFAHeaderV1(GFAPreamble):
    compression = fields.StructField('H', enum=CompressionType, default=CompressionType.NONE)
    entry_count = fields.StructField('H')


class GFAHeaderV2(GFAPreamble):
    compression = fields.StructField('I', enum=CompressionType, default=CompressionType.NONE)
    entry_count = fields.StructField('I')
    data_offset = fields.StructField('I')


class GFAHeaderV3(GFAHeaderV2):
    data_size   = fields.StructField('I')  # from data_offset to the end of the archive


class GFAEntryV1(Chunk):
    filename      = fields.NameField(0x20)
    original_size = fields.StructField('I')
    stored_offset = fields.StructField('I')
    stored_size   = fields.StructField('I')


class GFAEntryV2(Chunk):
    filename      = fields.NameField(0x40)
    original_size = fields.StructField('I')
    stored_offset = fields.StructField('I')
    stored_size   = fields.StructField('I')


class GFAEntryV3(Chunk):
    name_hash     = TextCRCField(['filename'])
    original_size = fields.StructField('I')
    stored_offset = fields.StructField('I')
    stored_size   = fields.StructField('I')
    filename      = fields.NameField(0x40)

    def validate(self):
        return self.name_hash.is_valid()


class GFAFileV1(Chunk):
    header  = GFAHeaderV1()
    entries = fields.ArrayField(GFAEntryV1(), n=Dependency('.header.entry_count'))


class GFAFileV2(Chunk):
    header  = GFAHeaderV2()
    entries = fields.ArrayField(GFAEntryV2(), n=Dependency('.header.entry_count'))


class GFAFileV3(Chunk):
    header  = GFAHeaderV3()
    entries = fields.ArrayField(GFAEntryV3(), n=Dependency('.header.entry_count'))
