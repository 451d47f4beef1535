import codecs
import collections.abc
import math
import numbers
import typing

from . import utils
from .exceptions import ConstructionError
from .sources import ByteSource, BlobSource, BytesSource
from .streams import ByteStream

BlobPartsType = typing.Iterable[typing.Any]
BlobOptionsType = typing.Optional[typing.Mapping[str, typing.Any]]


def _classify_part(raw: typing.Any) -> ByteSource:
    if isinstance(raw, ByteSource):
        return raw
    if utils.is_blob(raw):
        return BlobSource(raw)
    if not isinstance(raw, str):
        try:
            view = memoryview(raw)
        except TypeError:
            pass
        else:
            # Copy so that later changes to a caller's buffer aren't visible.
            with view:
                return BytesSource(view.tobytes())
    return BytesSource(str(raw).encode("utf-8"))


def _check_arguments(
    class_name: str, parts: typing.Any, options: typing.Any
) -> typing.Mapping[str, typing.Any]:
    if parts is None or isinstance(
        parts, (str, bytes, bytearray, memoryview, numbers.Number)
    ):
        raise ConstructionError(
            f"Failed to construct '{class_name}': "
            "The provided value cannot be converted to a sequence."
        )
    if not callable(getattr(parts, "__iter__", None)):
        raise ConstructionError(
            f"Failed to construct '{class_name}': "
            "The object must have a callable __iter__ method."
        )
    if options is None:
        return {}
    if not isinstance(options, collections.abc.Mapping):
        raise ConstructionError(
            f"Failed to construct '{class_name}': "
            "parameter 2 cannot convert to dictionary."
        )
    return options


def _clamp(index: int, size: int) -> int:
    if isinstance(index, float):
        if math.isnan(index):
            return 0
        if math.isinf(index):
            return size if index > 0 else 0
    index = int(index)
    if index < 0:
        return max(size + index, 0)
    return min(index, size)


class Blob:
    """An immutable sequence of bytes with a MIME type.

    'parts' is an iterable of strings (UTF-8 encoded), bytes-like
    objects (copied) and other Blobs (referenced). Any other value
    is converted with 'str()' first. The only option is "type".
    """

    type_tag = "Blob"

    def __init__(self, parts: BlobPartsType = (), options: BlobOptionsType = None):
        options = _check_arguments(self.type_tag, parts, options)

        sources = tuple(_classify_part(raw) for raw in parts)
        self._sources: typing.Tuple[ByteSource, ...] = sources
        self._size = sum(source.length for source in sources)
        self._type = utils.normalize_type(options.get("type"))

    @classmethod
    def _from_sources(
        cls, sources: typing.Iterable[ByteSource], content_type: typing.Any
    ) -> "Blob":
        blob = cls.__new__(cls)
        blob._sources = tuple(sources)
        blob._size = sum(source.length for source in blob._sources)
        blob._type = utils.normalize_type(content_type)
        return blob

    # Assigning or deleting 'size' and 'type' leaves them unchanged.

    @property
    def size(self) -> int:
        return self._size

    @size.setter
    def size(self, _: typing.Any) -> None:
        pass

    @size.deleter
    def size(self) -> None:
        pass

    @property
    def type(self) -> str:
        return self._type

    @type.setter
    def type(self, _: typing.Any) -> None:
        pass

    @type.deleter
    def type(self) -> None:
        pass

    def slice(
        self,
        start: int = 0,
        end: typing.Optional[int] = None,
        content_type: typing.Optional[str] = "",
    ) -> "Blob":
        """Returns a new Blob with the bytes in '[start, end)'. Negative
        indexes count back from the end. Nothing is read here, the new
        Blob refers to windows of this Blob's parts.
        """
        relative_start = _clamp(start, self._size)
        relative_end = _clamp(self._size if end is None else end, self._size)
        span = max(relative_end - relative_start, 0)

        sources = []
        added = 0
        for source in self._sources:
            if added >= span:
                break

            length = source.length
            if relative_start and length <= relative_start:
                # The whole part comes before the window.
                relative_start -= length
                relative_end -= length
            else:
                chunk = source.slice(relative_start, min(length, relative_end))
                added += chunk.length
                relative_end -= length
                relative_start = 0
                sources.append(chunk)

        return Blob._from_sources(sources, content_type)

    async def _iter_chunks(self, split: bool = False) -> typing.AsyncIterator[bytes]:
        for source in self._sources:
            chunks = source.chunks(split=split)
            try:
                async for chunk in chunks:
                    yield chunk
            finally:
                await chunks.aclose()

    async def text(self) -> str:
        """Decodes the whole content as UTF-8. Multi-byte characters
        spanning two chunks are decoded correctly.
        """
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        result = []
        async for chunk in self._iter_chunks():
            result.append(decoder.decode(chunk))
        result.append(decoder.decode(b"", final=True))
        return "".join(result)

    async def array_buffer(self) -> bytearray:
        buffer = bytearray(self._size)
        offset = 0
        with memoryview(buffer) as view:
            async for chunk in self._iter_chunks():
                view[offset : offset + len(chunk)] = chunk
                offset += len(chunk)
        return buffer

    def stream(self) -> ByteStream:
        return ByteStream(self._iter_chunks(split=True))

    def __repr__(self) -> str:
        return f"<{self.type_tag} size={self._size} type={self._type!r}>"
