"""Nintendo LZ11 decompressor.

Same framing as LZ10 (see lz10.py) with type 0x11, but references come in
three sizes selected by the high nibble of their first byte

    0000 LLLL  LLLL DDDD  DDDD DDDD                  length = L + 0x11
    0001 LLLL  LLLL LLLL  LLLL DDDD  DDDD DDDD       length = L + 0x111
    LLLL DDDD  DDDD DDDD                             length = L + 1 (L >= 2)

and the displacement is always D + 1.

There is no compressor: archives using it can be extracted but not created.
"""
import logging

from .lz10 import read_header, check_size, iter_flags


logger = logging.getLogger(__name__)

TYPE = 0x11


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

            byte1 = data[pos]
            indicator = byte1 >> 4

            if indicator == 0:
                byte2, byte3 = data[pos + 1], data[pos + 2]
                pos += 3
                length = (((byte1 & 0x0f) << 4) | (byte2 >> 4)) + 0x11
                displacement = ((byte2 & 0x0f) << 8) | byte3
            elif indicator == 1:
                byte2, byte3, byte4 = data[pos + 1], data[pos + 2], data[pos + 3]
                pos += 4
                length = (((byte1 & 0x0f) << 12) | (byte2 << 4) | (byte3 >> 4)) + 0x111
                displacement = ((byte3 & 0x0f) << 8) | byte4
            else:
                byte2 = data[pos + 1]
                pos += 2
                length = indicator + 1
                displacement = ((byte1 & 0x0f) << 8) | byte2

            displacement += 1
            if displacement > len(out):
                raise ValueError(f'reference at -{displacement} before the start of the data')

            for _ in range(min(length, size - len(out))):
                out.append(out[-displacement])

    return bytes(out)
