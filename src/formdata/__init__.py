from .exceptions import (
    FormDataError,
    ConstructionError,
    TypeMismatchError,
    UnsupportedSourceError,
    NotReadableError,
)
from .blob import Blob
from .file import File, file_from_path, file_from_path_sync
from .formdata import FormData, FormDataEntryValue
from .multipart import MultipartEncoder, StreamingFormData, StreamValue
from .streams import ByteStream
from .utils import is_blob, is_file, is_form_data
from ._backends import get_backend, AsyncioBackend, TrioBackend

__all__ = [
    "AsyncioBackend",
    "Blob",
    "ByteStream",
    "ConstructionError",
    "File",
    "FormData",
    "FormDataEntryValue",
    "FormDataError",
    "MultipartEncoder",
    "NotReadableError",
    "StreamValue",
    "StreamingFormData",
    "TrioBackend",
    "TypeMismatchError",
    "UnsupportedSourceError",
    "file_from_path",
    "file_from_path_sync",
    "get_backend",
    "is_blob",
    "is_file",
    "is_form_data",
]

__version__ = "dev"
