"""
# GoodFeel archives for humans.

A GFA archive packs a set of named files, compressed all with the same
algorithm, behind a fixed-layout header and a file table.

Two operations are defined on it:

 1. pack(): from an ordered set of (name, data) to the archive bytes,
    choosing the version of the format, the compression and where the
    data section starts.

 2. extract(): from the archive bytes back to the (name, data) couples,
    in the same order they were packed.

The header and the file table are described declaratively, like any other
binary format, with the Chunk and Field classes of this package: a Chunk is
an ordered collection of fields declared as class attributes, a Field knows
how to pack and unpack itself and, via Dependency, how its size or count
relates to its siblings.

The compression algorithms live in gfarch.compression and are seen by the
codec only through compress()/decompress().
"""
from .api import (
    pack_from_bytes,
    pack_from_files,
    extract,
)
from .archive.codec import GoodFeelArchive, FileEntry, read_table
from .archive.enum import Version, CompressionType
from .archive.offset import GFCPOffset
