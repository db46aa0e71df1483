'''
Where the data section of a new archive starts.

The legacy tooling of every version expects the data at a fixed offset
(see layout.py), but a custom one can be asked for, as long as it doesn't
overlap the header and the file table.
'''
import logging

from ..exceptions import InvalidOffset
from .layout import get_layout


logger = logging.getLogger(__name__)

MAX_OFFSET = 0xffffffff
MIN_ALIGNMENT = 0x10


class GFCPOffset(object):
    '''Policy value: either the default of the version or a custom offset.

    Use GFCPOffset.default() and GFCPOffset.custom(n).'''

    def __init__(self, value=None):
        self.value = value

    @classmethod
    def default(cls):
        return cls()

    @classmethod
    def custom(cls, offset):
        return cls(offset)

    @property
    def is_default(self):
        return self.value is None

    def __eq__(self, other):
        return isinstance(other, GFCPOffset) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __repr__(self):
        if self.is_default:
            return f'<{self.__class__.__name__}(default)>'

        return f'<{self.__class__.__name__}(0x{self.value:x})>'


def resolve(policy, version, header_size: int, table_size: int) -> int:
    '''Returns the offset of the data section for the given policy.

    A None policy is the default one, a plain integer a custom one.'''
    if policy is None:
        policy = GFCPOffset.default()
    elif isinstance(policy, int) and not isinstance(policy, bool):
        policy = GFCPOffset.custom(policy)
    elif not isinstance(policy, GFCPOffset):
        raise InvalidOffset(f'{policy!r} is not an offset policy')

    minimum = header_size + table_size

    if policy.is_default:
        layout = get_layout(version)
        if minimum <= layout.default_offset:
            return layout.default_offset

        # the table doesn't fit before the canonical offset: keep the data aligned
        alignment = max(layout.alignment, MIN_ALIGNMENT)
        offset = -(-minimum // alignment) * alignment
        logger.debug('header and table take 0x%x bytes, data moved to 0x%x' % (minimum, offset))

        return offset

    offset = policy.value
    if not isinstance(offset, int) or isinstance(offset, bool):
        raise InvalidOffset(f'offset {offset!r} is not an integer')

    if offset < minimum:
        raise InvalidOffset(f'offset 0x{offset:x} overlaps header and file table (0x{minimum:x} bytes)')

    if offset > MAX_OFFSET:
        raise InvalidOffset(f'offset 0x{offset:x} does not fit 32 bits')

    return offset
