import logging
from enum import Enum, auto
from typing import List


logger = logging.getLogger(__name__)


class ChunkPhase(Enum):
    '''Enum to state the actual phase of a chunk'''
    INIT      = 0
    RELAYOUTING = auto()
    PACKING   = auto()
    UNPACKING = auto()
    DONE      = auto()


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    is_root = condition(instance)
    father = instance

    while not is_root:
        father = instance.father

        if father is None:
            raise AttributeError(f'no chunk satisfies the condition starting from {instance!r}')

        is_root = condition(father)
        instance = father

    return father


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Table(Chunk):
            count = fields.StructField('I')
            items = fields.ArrayField(Item(), n=Dependency('.count'))

    and have the number of elements of the field named 'items' strictly
    connected to the field named 'count': unpacking reads 'count' elements,
    relayouting writes the actual length back into 'count'.

    The syntax for defining the expression is inspired from module resolution
    with an extra element via the first char of the expression: we have the following

     - '.' indicates we refer to a field at the same level
     - otherwise the resolution starts from the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression
        self._hierarchy: List["Field"] = []

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        logger.debug('trying to resolve \'%s\' for \'%s\'' % (
            self.expression,
            instance.__class__.__name__,
        ))

        self._hierarchy = []

        # '.count'.split(".") -> ['', 'count']
        # 'count'.split(".") -> ['count']
        fields_path = self.expression.split('.')

        # find the root the resolution starts
        if fields_path[0] == '':  # we have a relative dependency
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = get_root_from_chunk(instance)

        if field is None:
            raise AttributeError(f'I could not resolve {self!r} since {instance!r} has no father')

        self._hierarchy.append(field)

        for component_name in fields_path:
            field = getattr(field, component_name)
            self._hierarchy.append(field)

        logger.debug(' resolved as field %s' % field.__class__.__name__)

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        return self.resolve_field(instance).value

    def resolve_and_set(self, instance, value):
        """Write back the value into the field the expression points to."""
        real_field = self.resolve_field(instance)
        real_field.value = value
