'''
Entry points used by the outside world: they only gather the input and let
the codec do the real work.
'''
import logging
from pathlib import Path

from .archive import codec
from .archive.enum import Version, CompressionType
from .exceptions import InvalidInput


logger = logging.getLogger(__name__)


def pack_from_bytes(byte_buffers, filenames, version=Version.V3, compression_type=CompressionType.BPE,
                    offset_policy=None) -> codec.GoodFeelArchive:
    '''Pack the buffers, the i-th one under the i-th name.'''
    byte_buffers = list(byte_buffers)
    filenames = list(filenames)

    if len(byte_buffers) != len(filenames):
        raise InvalidInput(f'{len(byte_buffers)} buffers but {len(filenames)} names')

    return codec.pack(list(zip(filenames, byte_buffers)), version, compression_type, offset_policy)


def pack_from_files(paths, version=Version.V3, compression_type=CompressionType.BPE,
                    offset_policy=None) -> codec.GoodFeelArchive:
    '''Pack the files at the given paths, each one named after the last component of its path.'''
    entries = []
    for path in paths:
        path = Path(path)
        logger.debug('reading \'%s\'' % path)
        entries.append((path.name, path.read_bytes()))

    return codec.pack(entries, version, compression_type, offset_policy)


def extract(archive_bytes):
    '''Returns the list of couples (filename, data) stored into the archive.'''
    return codec.extract(archive_bytes)
