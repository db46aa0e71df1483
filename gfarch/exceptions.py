class GFArchException(Exception):
    '''Base class for every exception thrown by gfarch.'''
    pass


class AbstructException(GFArchException):
    '''Base class to extend in order to throw exception from the structure layer.

    It takes a single argument that represents the chain of the layer that
    caused the exception; the chain is built from the innermost field outward
    while the exception climbs the chunks.
    '''

    def __init__(self, chain=None, cause=None):
        self.chain = chain if chain is not None else []
        self.cause = cause
        super().__init__('.'.join(self.chain[::-1]))


class UnpackException(AbstructException):
    pass


class TruncatedException(UnpackException):
    '''The stream ended before the field could be read.'''
    pass


class EnumException(UnpackException):
    '''The value read is not a member of the enum of the field.'''
    pass


class ValidationException(UnpackException):
    '''A chunk's validate() returned False.'''
    pass


class MagicException(AbstructException):
    pass


class ChunkUnpackException(AbstructException):
    '''Wraps any UnpackException raised by a sub-field: "cause" is always the
    innermost exception, never another ChunkUnpackException.'''
    pass


class ArchiveException(GFArchException):
    '''Base class for the errors returned by the archive codec.'''
    pass


class InvalidInput(ArchiveException, ValueError):
    pass


class InvalidOffset(ArchiveException, ValueError):
    pass


class UnsupportedVersion(ArchiveException):
    pass


class UnsupportedCompression(ArchiveException):
    pass


class OperationNotSupported(ArchiveException):
    pass


class NotAGfaFile(ArchiveException):
    pass


class CorruptData(ArchiveException):
    pass
