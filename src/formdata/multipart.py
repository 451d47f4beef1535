import io
import os
import typing

from . import utils
from .exceptions import ConstructionError
from .file import File, file_from_path_sync
from .formdata import FormData
from .log import multipart_logger
from .streams import ByteStream

DASHES = b"--"
CARRIAGE = b"\r\n"

LookupMimeType = typing.Callable[[str], typing.Optional[str]]
RandomToken = typing.Callable[[int], str]


class StreamValue(typing.NamedTuple):
    """A raw stream stored in a 'StreamingFormData' field.
    Its length can't be known without reading it.
    """

    stream: typing.Any
    filename: typing.Optional[str] = None


class MultipartEncoder:
    """Encodes a FormData as multipart/form-data.

    The encoder holds no state besides its boundary, the fields are read
    from the wrapped form every time 'get_computed_length()' or 'stream()'
    is called. Every field value becomes

        --<boundary>\\r\\n
        Content-Disposition: form-data; name="<name>"[; filename="<filename>"
        Content-Type: <type>]\\r\\n
        \\r\\n
        <value>\\r\\n

    and the body ends with '--<boundary>--\\r\\n\\r\\n'.
    """

    def __init__(
        self,
        form: typing.Any,
        *,
        boundary: typing.Optional[str] = None,
        lookup_mime_type: LookupMimeType = utils.lookup_mime_type,
        random_token: RandomToken = utils.random_token,
    ):
        if not utils.is_form_data(form):
            raise ConstructionError(
                "Failed to construct 'MultipartEncoder': "
                "parameter 1 is not of type 'FormData'."
            )
        if boundary is None:
            boundary = f"FormDataStreamBoundary{random_token(16)}"

        self._form = form
        self._boundary = boundary
        self._lookup_mime_type = lookup_mime_type
        self._footer = DASHES + boundary.encode() + DASHES + CARRIAGE * 2

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"

    @property
    def headers(self) -> typing.Dict[str, str]:
        return {"Content-Type": self.content_type}

    def _get_mime(self, filename: str) -> str:
        return self._lookup_mime_type(filename) or utils.DEFAULT_CONTENT_TYPE

    def get_header(
        self,
        name: str,
        filename: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
    ) -> bytes:
        """Renders the header block that precedes a field's value"""
        header = (
            DASHES
            + self._boundary.encode()
            + CARRIAGE
            + b'Content-Disposition: form-data; name="%b"' % str(name).encode()
        )
        if filename is not None:
            header += b'; filename="%b"' % filename.encode() + CARRIAGE
            header += b"Content-Type: %b" % (
                content_type or self._get_mime(filename)
            ).encode()
        return header + CARRIAGE * 2

    def _render_header(self, name: str, value: typing.Any) -> bytes:
        if utils.is_blob(value):
            filename = value.name if utils.is_file(value) else "blob"
            return self.get_header(name, filename, value.type)
        if isinstance(value, StreamValue) and value.filename is not None:
            return self.get_header(name, value.filename)
        return self.get_header(name)

    async def _get_length(self, value: typing.Any) -> typing.Optional[int]:
        if utils.is_buffer(value):
            return memoryview(value).nbytes
        if utils.is_blob(value):
            return value.size
        if isinstance(value, StreamValue):
            return None
        return len(str(value).encode("utf-8"))

    async def get_computed_length(self) -> typing.Optional[int]:
        """Returns the exact byte length of the encoded body, or 'None'
        if any value is a stream whose length can't be known up front.
        """
        length = 0
        for name, value in self._form.entries():
            length += len(self._render_header(name, value))
            value_length = await self._get_length(value)
            if value_length is None:
                multipart_logger.debug(
                    "Length of field %r can't be computed without reading it", name
                )
                return None
            length += value_length + len(CARRIAGE)
        return length + len(self._footer)

    async def _iter_value(self, value: typing.Any) -> typing.AsyncIterator[bytes]:
        if utils.is_buffer(value):
            if value:
                yield bytes(value)
            return
        if utils.is_blob(value):
            source = utils.iter_stream(value.stream())
        elif isinstance(value, StreamValue):
            source = utils.iter_stream(value.stream)
        else:
            data = str(value).encode("utf-8")
            if data:
                yield data
            return

        try:
            async for chunk in source:
                yield chunk
        finally:
            await source.aclose()

    async def _iter_fields(self) -> typing.AsyncIterator[bytes]:
        for name, value in self._form.entries():
            yield self._render_header(name, value)
            chunks = self._iter_value(value)
            try:
                async for chunk in chunks:
                    yield chunk
            finally:
                await chunks.aclose()
            yield CARRIAGE
        yield self._footer

    def stream(self) -> ByteStream:
        """Returns a new cursor over the encoded body"""
        return ByteStream(self._iter_fields())

    def __aiter__(self) -> ByteStream:
        return self.stream()


class StreamingFormData(FormData):
    """A FormData carrying its own encoder, plus a few more kinds of values.

    Besides strings, Blobs and Files, fields can hold raw bytes (stored
    as a File named 'filename' or "blob"), open files with a path
    (stored as a File that reads from disk) and streams (stored as
    'StreamValue', which makes the computed length unknown).
    'fields' is an iterable of '(name, value)' or '(name, value, filename)'
    tuples to append.
    """

    def __init__(
        self,
        fields: typing.Optional[typing.Iterable[typing.Sequence[typing.Any]]] = None,
        *,
        boundary: typing.Optional[str] = None,
        lookup_mime_type: LookupMimeType = utils.lookup_mime_type,
        random_token: RandomToken = utils.random_token,
    ):
        super().__init__()
        self._encoder = MultipartEncoder(
            self,
            boundary=boundary,
            lookup_mime_type=lookup_mime_type,
            random_token=random_token,
        )
        for field in fields or ():
            self.append(*field)

    def _normalize_value(
        self, method: str, value: typing.Any, filename: typing.Optional[str]
    ) -> typing.Any:
        if filename is not None:
            filename = os.path.basename(filename)

        if isinstance(value, io.IOBase) and isinstance(
            getattr(value, "name", None), (str, os.PathLike)
        ):
            return file_from_path_sync(value.name, filename)
        if utils.is_buffer(value):
            return File([value], "blob" if filename is None else filename)
        if utils.is_stream(value) and not utils.is_blob(value):
            return StreamValue(value, filename)
        return super()._normalize_value(method, value, filename)

    @property
    def boundary(self) -> str:
        return self._encoder.boundary

    @property
    def content_type(self) -> str:
        return self._encoder.content_type

    @property
    def headers(self) -> typing.Dict[str, str]:
        return self._encoder.headers

    def get_header(
        self,
        name: str,
        filename: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
    ) -> bytes:
        return self._encoder.get_header(name, filename, content_type)

    async def get_computed_length(self) -> typing.Optional[int]:
        return await self._encoder.get_computed_length()

    def stream(self) -> ByteStream:
        return self._encoder.stream()

    def __aiter__(self) -> ByteStream:
        return self._encoder.stream()
