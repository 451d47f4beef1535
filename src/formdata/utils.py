import binascii
import inspect
import math
import mimetypes
import numbers
import os
import re
import time
import typing

from .exceptions import UnsupportedSourceError

CHUNK_SIZE = 65536
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_PRINTABLE_ASCII_RE = re.compile(r"[\x20-\x7E]*")
_RADIX_DIGITS_RE = re.compile(r"[0-9a-fA-F]+")
_RADIX_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}

RetType = typing.TypeVar("RetType")
AsyncCallable = typing.Union[
    typing.Callable[..., RetType],
    typing.Callable[..., typing.Awaitable[RetType]],
]


async def sync_or_async(
    f: AsyncCallable, *args: typing.Any, **kwargs: typing.Any
) -> RetType:
    ret = f(*args, **kwargs)
    if inspect.isawaitable(ret):
        ret = await ret
    return ret


def normalize_type(value: typing.Any) -> str:
    """Renders a MIME type option into the value stored on a Blob.
    Anything outside of printable ASCII makes the whole type empty.
    """
    if value is None:
        return ""
    value = str(value)
    return value if _PRINTABLE_ASCII_RE.fullmatch(value) else ""


def coerce_timestamp(value: typing.Any) -> int:
    """Converts a 'last_modified' option into integer milliseconds.
    Values that can't be read as a finite number become 0, booleans
    count as 0 and 1 and 'None' is 0.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, numbers.Real):
        number = float(value)
    else:
        text = str(value).strip()
        # float() is more permissive than a numeric literal.
        if "_" in text or text.lower().lstrip("+-") in ("nan", "inf", "infinity"):
            return 0
        radix = _RADIX_PREFIXES.get(text[:2].lower())
        if radix is not None:
            digits = text[2:]
            try:
                return int(digits, radix) if _RADIX_DIGITS_RE.fullmatch(digits) else 0
            except ValueError:
                return 0
        try:
            number = float(text) if text else 0.0
        except ValueError:
            return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def now_ms() -> int:
    return int(time.time() * 1000)


def lookup_mime_type(filename: str) -> str:
    """Guesses a MIME type from the extension of a filename"""
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def random_token(length: int = 16) -> str:
    """Hex encoding of 'length' random bytes"""
    return binascii.hexlify(os.urandom(length)).decode()


def is_blob(value: typing.Any) -> bool:
    """Recognizes a Blob by shape rather than by class so that Blobs
    from other libraries can be nested and encoded.
    """
    if value is None or isinstance(value, type):
        return False
    return (
        callable(getattr(value, "stream", None))
        or callable(getattr(value, "array_buffer", None))
    ) and getattr(value, "type_tag", None) in ("Blob", "File")


def is_file(value: typing.Any) -> bool:
    return (
        is_blob(value)
        and getattr(value, "type_tag", None) == "File"
        and isinstance(getattr(value, "name", None), str)
    )


_FORM_DATA_METHODS = (
    "append",
    "set",
    "get",
    "get_all",
    "has",
    "delete",
    "entries",
    "values",
    "keys",
    "for_each",
    "__iter__",
)


def is_form_data(value: typing.Any) -> bool:
    if value is None or isinstance(value, type):
        return False
    return getattr(value, "type_tag", None) == "FormData" and all(
        callable(getattr(value, name, None)) for name in _FORM_DATA_METHODS
    )


def is_buffer(value: typing.Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def is_stream(value: typing.Any) -> bool:
    """Tests whether 'iter_stream()' knows how to read the value"""
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return False
    return (
        callable(getattr(value, "__aiter__", None))
        or callable(getattr(value, "receive_some", None))
        or callable(getattr(value, "read", None))
    )


def split_chunk(chunk: bytes) -> typing.Iterable[bytes]:
    """Divides a chunk into pieces of at most CHUNK_SIZE bytes"""
    if len(chunk) <= CHUNK_SIZE:
        return (chunk,)
    return (chunk[i : i + CHUNK_SIZE] for i in range(0, len(chunk), CHUNK_SIZE))


async def close_stream(stream: typing.Any) -> None:
    """Releases a stream through whichever close method it has"""
    for name in ("aclose", "cancel", "close"):
        close = getattr(stream, name, None)
        if callable(close):
            await sync_or_async(close)
            return


async def iter_stream(source: typing.Any) -> typing.AsyncIterator[bytes]:
    """Adapts an async iterable, a trio 'ReceiveStream' or an object
    with a sync or async 'read()' into a sequence of byte chunks.
    The source is closed once the sequence ends or is closed early.
    """
    # Readers signal the end of data with an empty chunk,
    # iterators by stopping.
    empty_is_end = True
    if callable(getattr(source, "__aiter__", None)):
        iterator = source.__aiter__()
        empty_is_end = False

        async def read() -> typing.Optional[bytes]:
            try:
                return await iterator.__anext__()
            except StopAsyncIteration:
                return None

    elif callable(getattr(source, "receive_some", None)):
        iterator = source

        async def read() -> typing.Optional[bytes]:
            return await source.receive_some(CHUNK_SIZE)

    elif callable(getattr(source, "read", None)):
        iterator = source

        async def read() -> typing.Optional[bytes]:
            return await sync_or_async(source.read, CHUNK_SIZE)

    else:
        raise UnsupportedSourceError(
            "Unsupported data source: Expected either an async iterable "
            "or an object with a 'receive_some()' or 'read()' method."
        )

    try:
        while True:
            chunk = await read()
            if chunk is None:
                break
            if not chunk:
                if empty_is_end:
                    break
                continue
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            for piece in split_chunk(bytes(chunk)):
                yield piece
    finally:
        await close_stream(iterator)
