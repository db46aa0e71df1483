'''
We are implementing fields to handle CRC calculation.
'''

from .. import fields

from zlib import crc32


class CRCField(fields.StructField):
    """standard CRC-32 (ISO 3309, the one of zlib) calculated over the raw
    representation of the sibling fields whose names are passed as argument.

    The value is recalculated every time the field is packed; after unpacking
    the stored value is left untouched so that it can be compared with
    calculate() by the chunk's validate().
    """

    def __init__(self, fields, *args, **kwargs):
        super().__init__('I', *args, **kwargs)
        self.fields = fields

    def data(self) -> bytes:
        value = b''
        for field_name in self.fields:
            field = getattr(self.father, field_name)
            value += field.raw

        return value

    def calculate(self) -> int:
        return crc32(self.data())

    def is_valid(self) -> bool:
        return self.value == self.calculate()

    def _update_value(self):
        self.value = self.calculate()


class TextCRCField(CRCField):
    """Like CRCField but over the encoded text of NameField siblings, without
    the padding of their slot."""

    def data(self) -> bytes:
        return b''.join([getattr(self.father, _).encoded for _ in self.fields])
