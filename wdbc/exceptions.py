class WDBCException(Exception):
    '''Base class to extend in order to throw exception in wdbc.

    Other than the message it takes an optional argument that represents
    the chain of the fields that caused the exception.
    '''

    def __init__(self, msg='', chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(msg)


class UnpackException(WDBCException):
    pass


class MagicException(WDBCException):
    pass


class ChunkUnpackException(WDBCException):
    pass


class NotFoundException(WDBCException):
    pass


class NotReadableException(WDBCException):
    pass


class NotWritableException(WDBCException):
    '''Raised when a mutation is attempted on a container opened read-only.'''
    pass


class InvalidSignatureException(MagicException):
    pass


class MalformedHeaderException(UnpackException):
    '''The file is too short to contain the fixed size header.'''
    pass


class TruncatedException(UnpackException):
    '''The sizes declared in the header exceed the actual size of the file.'''
    pass


class TruncatedRecordsException(TruncatedException):
    pass


class TruncatedStringBlockException(TruncatedException):
    pass


class FieldCountMismatchException(WDBCException):
    pass


class NoMapAttachedException(WDBCException):
    pass
