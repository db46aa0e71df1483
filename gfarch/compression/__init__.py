'''
# Compression backends

Each algorithm is a couple of pure functions working on whole buffers; an
algorithm without a compressor can be used only to extract archives.

  tag   | compress | decompress
  ------+----------+-----------
  NONE  | yes      | yes
  BPE   | yes      | yes
  LZ10  | yes      | yes
  LZ11  | no       | yes

The decompressors are trusted to walk only the stream they are given: any
malformed input surfaces as CorruptData, as does an output that doesn't have
the size the caller expects. The expected size is handed to the decompressor
too, that gives up as soon as it can tell the output won't match.
'''
import logging
import struct
from typing import Callable, NamedTuple, Optional

from ..archive.enum import CompressionType
from ..exceptions import (
    CorruptData,
    OperationNotSupported,
    UnsupportedCompression,
)
from . import bpe, lz10, lz11


logger = logging.getLogger(__name__)


class Backend(NamedTuple):
    compress: Optional[Callable[[bytes], bytes]]
    decompress: Callable[[bytes, Optional[int]], bytes]

    @property
    def can_compress(self) -> bool:
        return self.compress is not None


def _stored(data: bytes, expected_size=None) -> bytes:
    return bytes(data)


BACKENDS = {
    CompressionType.NONE: Backend(_stored, _stored),
    CompressionType.BPE:  Backend(bpe.compress, bpe.decompress),
    CompressionType.LZ10: Backend(lz10.compress, lz10.decompress),
    CompressionType.LZ11: Backend(None, lz11.decompress),
}


def get_backend(algorithm) -> Backend:
    try:
        return BACKENDS[CompressionType(algorithm)]
    except (ValueError, KeyError):
        raise UnsupportedCompression(f'compression {algorithm!r} is not supported') from None


def supported_types():
    return list(BACKENDS.keys())


def can_compress(algorithm) -> bool:
    return get_backend(algorithm).can_compress


def compress(data: bytes, algorithm) -> bytes:
    backend = get_backend(algorithm)

    if not backend.can_compress:
        raise OperationNotSupported(f'compression with {CompressionType(algorithm).name} is not available')

    compressed = backend.compress(data)
    logger.debug('compressed %d bytes into %d with %s' % (len(data), len(compressed), CompressionType(algorithm).name))

    return compressed


def decompress(data: bytes, algorithm, expected_original_size: int) -> bytes:
    backend = get_backend(algorithm)

    try:
        decompressed = backend.decompress(data, expected_original_size)
    except (IndexError, ValueError, struct.error) as e:
        raise CorruptData(f'malformed {CompressionType(algorithm).name} stream: {e}') from e

    if len(decompressed) != expected_original_size:
        raise CorruptData(f'decompressed {len(decompressed)} bytes, expected {expected_original_size}')

    return decompressed
