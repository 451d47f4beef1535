import typing


class FormDataError(Exception):
    """Base error type for 'formdata'. Every error raised by the
    package on purpose derives from this so callers can catch
    the whole family with one clause.
    """

    def __init__(self, message: str):
        super().__init__(message)

        self.message = message


class ConstructionError(FormDataError, TypeError):
    """Error raised when a Blob, File or encoder is constructed
    with arguments of the wrong type.
    """


class TypeMismatchError(FormDataError, TypeError):
    """Error raised when a filename is given for a value that isn't binary"""


class UnsupportedSourceError(FormDataError, TypeError):
    """Error raised when a stream exposes neither async iteration
    nor a recognized reader method.
    """


NOT_READABLE_MESSAGE = (
    "The requested file could not be read, "
    "typically due to permission problems that have occurred after a reference "
    "to a file was acquired."
)


class NotReadableError(FormDataError, OSError):
    """Error raised when a file on disk was modified after
    a reference to it was acquired.
    """

    def __init__(self, path: typing.Optional[str] = None):
        super().__init__(NOT_READABLE_MESSAGE)

        self.path = path
