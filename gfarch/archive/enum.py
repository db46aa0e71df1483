from enum import Enum


class Version(Enum):
    '''Format revision, stored as u32 right after the magic.'''
    V1 = 0x0100
    V2 = 0x0200
    V3 = 0x0300


class CompressionType(Enum):
    '''Algorithm used for every entry of an archive.'''
    NONE = 0x00  # payloads stored as they are
    BPE  = 0x01
    LZ10 = 0x02
    LZ11 = 0x03
