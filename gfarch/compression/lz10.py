"""Nintendo LZ10 codec.

A 4 bytes header holds the type (0x10) in the lowest byte and the size of the
decompressed data in the others; when the size doesn't fit 24 bits (or is zero)
those bits are zero and the size follows as u32.

Data come in groups of eight tokens preceded by a flag byte, read from the most
significant bit: a clear bit is a literal byte, a set bit is a reference of two
bytes

    LLLL DDDD DDDD DDDD     length = L + 3, displacement = D + 1

copying from the already decompressed data.
"""
import logging
import struct

from bitstring import Bits


logger = logging.getLogger(__name__)

TYPE = 0x10
WINDOW = 0x1000
MIN_MATCH = 3
MAX_MATCH = 0x12
MAX_CANDIDATES = 0x40


def write_header(tag: int, size: int) -> bytes:
    if 0 < size <= 0xffffff:
        return struct.pack('<I', tag | (size << 8))

    return struct.pack('<II', tag, size)


def read_header(data: bytes, tag: int):
    '''Returns the decompressed size and the position where the tokens start.'''
    header, = struct.unpack_from('<I', data, 0)

    if header & 0xff != tag:
        raise ValueError(f'stream has type 0x{header & 0xff:02x} instead of 0x{tag:02x}')

    size = header >> 8
    if size:
        return size, 4

    size, = struct.unpack_from('<I', data, 4)

    return size, 8


def check_size(size: int, expected_size) -> None:
    '''Refuse a stream announcing a size other than the one expected, before decoding it.'''
    if expected_size is not None and size != expected_size:
        raise ValueError(f'stream announces {size} bytes, expected {expected_size}')


def iter_flags(flags: int):
    '''The bits of a flag byte as booleans, the most significant first.'''
    return iter(Bits(uint=flags, length=8))


def decompress(data: bytes, expected_size=None) -> bytes:
    size, pos = read_header(data, TYPE)
    check_size(size, expected_size)
    out = bytearray()

    while len(out) < size:
        flags = data[pos]
        pos += 1

        for is_reference in iter_flags(flags):
            if len(out) >= size:
                break

            if not is_reference:
                out.append(data[pos])
                pos += 1
                continue

            b1, b2 = data[pos], data[pos + 1]
            pos += 2

            length = (b1 >> 4) + MIN_MATCH
            displacement = (((b1 & 0x0f) << 8) | b2) + 1

            if displacement > len(out):
                raise ValueError(f'reference at -{displacement} before the start of the data')

            for _ in range(min(length, size - len(out))):
                out.append(out[-displacement])

    return bytes(out)


def compress(data: bytes) -> bytes:
    raw = bytes(data)
    n = len(raw)
    out = bytearray(write_header(TYPE, n))

    buckets = {}

    def add_position(position):
        key = raw[position:position + MIN_MATCH]
        if len(key) < MIN_MATCH:
            return

        candidates = buckets.setdefault(key, [])
        candidates.append(position)
        if len(candidates) > MAX_CANDIDATES:
            del candidates[0]

    def find_match(position):
        best_length, best_displacement = 0, 0
        max_length = min(MAX_MATCH, n - position)

        if max_length < MIN_MATCH:
            return best_length, best_displacement

        for candidate in reversed(buckets.get(raw[position:position + MIN_MATCH], [])):
            displacement = position - candidate
            if displacement > WINDOW:
                break

            length = MIN_MATCH
            while length < max_length and raw[candidate + length] == raw[position + length]:
                length += 1

            if length > best_length:
                best_length, best_displacement = length, displacement
                if length == max_length:
                    break

        return best_length, best_displacement

    position = 0
    while position < n:
        flags = []
        tokens = bytearray()

        while len(flags) < 8 and position < n:
            length, displacement = find_match(position)

            if length < MIN_MATCH:
                flags.append(False)
                tokens.append(raw[position])
                add_position(position)
                position += 1
                continue

            flags.append(True)
            displacement -= 1
            tokens += bytes((((length - MIN_MATCH) << 4) | (displacement >> 8), displacement & 0xff))

            for _ in range(position, position + length):
                add_position(_)
            position += length

        flags += [False] * (8 - len(flags))
        out.append(Bits(flags).uint)
        out += tokens

    logger.debug('LZ10: %d bytes into %d' % (n, len(out)))

    return bytes(out)
