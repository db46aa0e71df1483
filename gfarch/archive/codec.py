'''
Packing and extraction of GoodFeel archives.

Both operations work on whole buffers and share nothing between calls: the
chunks of the header and of the file table are built (or parsed) from scratch
every time and thrown away once the result is ready.
'''
import logging
from typing import List, NamedTuple, Tuple

from .. import compression
from ..enum import Compliant
from ..exceptions import (
    ChunkUnpackException,
    CorruptData,
    EnumException,
    InvalidInput,
    MagicException,
    NotAGfaFile,
    OperationNotSupported,
    UnsupportedCompression,
    UnsupportedVersion,
)
from . import GFAPreamble
from .enum import Version, CompressionType
from .layout import get_layout, Layout
from .offset import resolve as resolve_offset


logger = logging.getLogger(__name__)

MAX_SIZE = 0xffffffff
COMPLIANCE = Compliant.MAGIC | Compliant.ENUM | Compliant.VALIDATE


class GoodFeelArchive(NamedTuple):
    '''A packed archive: the raw bytes plus what was used to build them.'''
    version: Version
    compression_type: CompressionType
    raw: bytes

    def __bytes__(self):
        return self.raw


class FileEntry(NamedTuple):
    name: str
    original_size: int
    stored_offset: int
    stored_size: int


class TableOfContents(NamedTuple):
    version: Version
    compression_type: CompressionType
    data_offset: int
    entries: List[FileEntry]


def _check_entries(entries, layout: Layout) -> List[Tuple[str, bytes]]:
    try:
        entries = [(name, data) for name, data in entries]
    except (TypeError, ValueError) as e:
        raise InvalidInput(f'entries must be couples (name, data): {e}') from e

    if not entries:
        raise InvalidInput('an archive needs at least one entry')

    if len(entries) > layout.max_entries:
        raise InvalidInput(f'{layout.version.name} archives hold at most {layout.max_entries} entries')

    seen = set()
    for name, data in entries:
        if not isinstance(name, str) or not name:
            raise InvalidInput(f'{name!r} is not a valid entry name')
        if name in seen:
            raise InvalidInput(f'entry \'{name}\' is present more than once')
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInput(f'data of entry \'{name}\' is {data.__class__.__name__}, not bytes')
        if len(data) > MAX_SIZE:
            raise InvalidInput(f'entry \'{name}\' is too big')
        seen.add(name)

    return [(name, bytes(data)) for name, data in entries]


def pack(entries, version=Version.V3, compression_type=CompressionType.BPE, offset_policy=None) -> GoodFeelArchive:
    '''Build an archive out of an ordered sequence of couples (name, data).

    The order of the entries is kept both in the file table and in the data section.'''
    layout = get_layout(version)

    entries = _check_entries(entries, layout)

    if not compression.can_compress(compression_type):
        raise OperationNotSupported(f'archives with compression {compression_type!r} can not be created')
    compression_type = CompressionType(compression_type)

    archive = layout.file_cls()
    header = archive.header
    header.version.value = layout.version
    header.compression.value = compression_type

    payloads = []
    for name, data in entries:
        entry = archive.entries.instance_element()
        try:
            entry.filename.value = name
        except ValueError as e:
            raise InvalidInput(str(e)) from e
        entry.original_size.value = len(data)
        archive.entries.append(entry)

        payloads.append(compression.compress(data, compression_type))

    data_offset = resolve_offset(
        offset_policy,
        layout.version,
        layout.header_size,
        layout.table_size(len(entries)),
    )

    logger.debug('packing %d entries with %s from offset 0x%x' % (len(entries), compression_type.name, data_offset))

    section = bytearray()
    cursor = data_offset
    for idx, (entry, payload) in enumerate(zip(archive.entries, payloads)):
        if idx:
            aligned = layout.align(cursor)
            section += b'\x00' * (aligned - cursor)
            cursor = aligned

        entry.stored_offset.value = cursor
        entry.stored_size.value = len(payload)
        logger.debug('entry \'%s\' at 0x%x (0x%x bytes)' % (entry.filename.value, cursor, len(payload)))

        section += payload
        cursor += len(payload)

    if cursor > MAX_SIZE:
        raise InvalidInput(f'the archive would be {cursor} bytes long, offsets are 32 bits')

    if layout.has_data_offset:
        header.data_offset.value = data_offset
    if layout.has_data_size:
        header.data_size.value = len(section)

    table = archive.pack()

    return GoodFeelArchive(
        version=layout.version,
        compression_type=compression_type,
        raw=table + b'\x00' * (data_offset - len(table)) + bytes(section),
    )


def _translate(e: ChunkUnpackException):
    where = '.'.join(e.chain[::-1])
    logger.debug('unpacking failed at \'%s\' because of %r' % (where, e.cause))

    if isinstance(e.cause, EnumException):
        if e.chain[0] == 'version':
            return UnsupportedVersion(f'unknown version at \'{where}\'')
        if e.chain[0] == 'compression':
            return UnsupportedCompression(f'unknown compression at \'{where}\'')

    return CorruptData(f'archive is corrupted at \'{where}\'')


def _check_table(archive, layout: Layout, size: int) -> int:
    '''Verify that the table describes data inside the archive; returns the data offset.'''
    header = archive.header
    table_end = layout.header_size + layout.table_size(len(archive.entries))

    if layout.has_data_offset:
        data_offset = header.data_offset.value
    else:
        # V1 doesn't store it: the data start where the first entry does
        data_offset = min([_.stored_offset.value for _ in archive.entries], default=table_end)

    if not table_end <= data_offset <= size:
        raise CorruptData(f'data offset 0x{data_offset:x} outside [0x{table_end:x}, 0x{size:x}]')

    if layout.has_data_size and data_offset + header.data_size.value != size:
        raise CorruptData(f'data section should be 0x{header.data_size.value:x} bytes, '
                          f'found 0x{size - data_offset:x}')

    for entry in archive.entries:
        start = entry.stored_offset.value
        end = start + entry.stored_size.value
        if start < data_offset or end > size:
            raise CorruptData(f'entry \'{entry.filename.value}\' spans 0x{start:x}-0x{end:x}, '
                              f'out of the data section 0x{data_offset:x}-0x{size:x}')

    return data_offset


def _parse(archive_bytes):
    if isinstance(archive_bytes, GoodFeelArchive):
        archive_bytes = archive_bytes.raw

    if not isinstance(archive_bytes, (bytes, bytearray, memoryview)):
        raise InvalidInput(f'can not extract from {archive_bytes.__class__.__name__}')

    data = bytes(archive_bytes)

    try:
        preamble = GFAPreamble(data, compliant=COMPLIANCE)
        layout = get_layout(preamble.version.value)
        archive = layout.file_cls(data, compliant=COMPLIANCE)
    except MagicException:
        raise NotAGfaFile('magic not found') from None
    except ChunkUnpackException as e:
        raise _translate(e) from e

    data_offset = _check_table(archive, layout, len(data))

    return data, layout, archive, data_offset


def read_table(archive_bytes) -> TableOfContents:
    '''Parse and check header and file table without touching the data.'''
    _, layout, archive, data_offset = _parse(archive_bytes)

    return TableOfContents(
        version=layout.version,
        compression_type=archive.header.compression.value,
        data_offset=data_offset,
        entries=[FileEntry(
            name=_.filename.value,
            original_size=_.original_size.value,
            stored_offset=_.stored_offset.value,
            stored_size=_.stored_size.value,
        ) for _ in archive.entries],
    )


def extract(archive_bytes) -> List[Tuple[str, bytes]]:
    '''Returns the couples (name, data) in the order of the file table.

    The first entry that can't be decompressed makes the whole extraction fail.'''
    data, layout, archive, _ = _parse(archive_bytes)
    compression_type = archive.header.compression.value

    logger.debug('extracting %d entries from a %s archive (%s)' % (
        len(archive.entries), layout.version.name, compression_type.name))

    files = []
    for entry in archive.entries:
        name = entry.filename.value
        start = entry.stored_offset.value
        payload = data[start:start + entry.stored_size.value]

        try:
            files.append((name, compression.decompress(payload, compression_type, entry.original_size.value)))
        except CorruptData as e:
            raise CorruptData(f'entry \'{name}\': {e}') from e

    return files
