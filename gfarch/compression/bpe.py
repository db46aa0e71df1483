'''
# Byte pair encoding

The scheme of Philip Gage (C Users Journal, 1994): inside a block the most
frequent pair of adjacent bytes is replaced by a byte value that doesn't
appear in the block, and so on until no pair is frequent enough or no value
is left. Every block is stored as

  .--------------------------------------.
  | pair table                           |
  | length of the packed data (u16, BE)  |
  | packed data                          |
  '--------------------------------------'

The pair table is walked from code 0x00 to 0xff as a sequence of runs: a
byte b >= 0x80 skips (b - 0x7f) codes that stand for themselves, a byte
b < 0x80 is followed by (b + 1) couples (left, right) for the next codes.
'''
import logging
import struct
from collections import Counter


logger = logging.getLogger(__name__)

BLOCK_SIZE = 0x1000
MIN_PAIR_COUNT = 3
MAX_STACK = 0x200  # a sane pair table never nests deeper than its 256 codes


def _replace(buffer: bytes, left: int, right: int, code: int) -> bytearray:
    out = bytearray()
    idx, n = 0, len(buffer)

    while idx < n:
        if idx + 1 < n and buffer[idx] == left and buffer[idx + 1] == right:
            out.append(code)
            idx += 2
        else:
            out.append(buffer[idx])
            idx += 1

    return out


def _pack_table(left, right) -> bytes:
    table = bytearray()
    code = 0

    while code < 0x100:
        start = code
        if left[code] == code:
            while code < 0x100 and left[code] == code and code - start < 0x80:
                code += 1
            table.append(0x7f + code - start)
        else:
            while code < 0x100 and left[code] != code and code - start < 0x80:
                code += 1
            table.append(code - start - 1)
            for _ in range(start, code):
                table += bytes((left[_], right[_]))

    return bytes(table)


def _compress_block(block: bytes) -> bytes:
    buffer = bytearray(block)
    left = list(range(0x100))
    right = [0] * 0x100
    present = set(buffer)
    free = [_ for _ in range(0x100) if _ not in present]

    while free:
        pairs = Counter(zip(buffer, buffer[1:]))
        if not pairs:
            break

        (a, b), count = pairs.most_common(1)[0]
        if count < MIN_PAIR_COUNT:
            break

        code = free.pop()
        left[code], right[code] = a, b
        buffer = _replace(buffer, a, b, code)

    logger.debug('block of %d bytes packed into %d' % (len(block), len(buffer)))

    return _pack_table(left, right) + struct.pack('>H', len(buffer)) + bytes(buffer)


def compress(data: bytes) -> bytes:
    data = bytes(data)
    return b''.join([_compress_block(data[_:_ + BLOCK_SIZE]) for _ in range(0, len(data), BLOCK_SIZE)])


def _unpack_table(data: bytes, pos: int):
    left = list(range(0x100))
    right = [0] * 0x100
    code = 0

    while code < 0x100:
        count = data[pos]
        pos += 1

        if count >= 0x80:
            code += count - 0x7f
            continue

        for _ in range(count + 1):
            if code >= 0x100:
                raise ValueError('pair table describes more than 256 codes')
            left[code], right[code] = data[pos], data[pos + 1]
            pos += 2
            code += 1

    if code != 0x100:
        raise ValueError('pair table describes more than 256 codes')

    return left, right, pos


def _expand(packed: bytes, left, right) -> bytearray:
    out = bytearray()

    for byte in packed:
        stack = [byte]
        while stack:
            code = stack.pop()
            if left[code] == code:
                out.append(code)
                if len(out) > BLOCK_SIZE:
                    raise ValueError('block expands over %d bytes' % BLOCK_SIZE)
                continue

            stack.append(right[code])
            stack.append(left[code])

            if len(stack) > MAX_STACK:
                raise ValueError('pair table is recursive')

    return out


def decompress(data: bytes, expected_size=None) -> bytes:
    '''With "expected_size" the decoding stops as soon as a block goes beyond it.'''
    data = bytes(data)
    out = bytearray()
    pos = 0

    while pos < len(data):
        left, right, pos = _unpack_table(data, pos)
        length, = struct.unpack_from('>H', data, pos)
        pos += 2

        if pos + length > len(data):
            raise ValueError('block wants %d bytes, only %d remain' % (length, len(data) - pos))

        out += _expand(data[pos:pos + length], left, right)
        pos += length

        if expected_size is not None and len(out) > expected_size:
            raise ValueError('data expands over the %d bytes expected' % expected_size)

    return bytes(out)
