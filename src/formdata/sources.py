"""The kinds of byte origins a Blob is made of.

A Blob holds an ordered tuple of sources. Each source knows its exact
length without doing any I/O, can produce a narrower source for a byte
window and can produce its content as async chunks. Adding a new kind
means implementing all three on a new subclass.
"""
import os
import typing

from . import utils
from .exceptions import NotReadableError
from ._backends import AsyncFileBackend, get_backend
from .log import blob_logger


class ByteSource:
    @property
    def length(self) -> int:
        raise NotImplementedError()

    def slice(self, start: int, end: int) -> "ByteSource":
        """Returns the source for the bytes in '[start, end)'.
        Offsets are already clamped to '[0, length]' by the caller.
        """
        raise NotImplementedError()

    def chunks(self, split: bool = False) -> typing.AsyncIterator[bytes]:
        """Produces the content. With 'split' every chunk
        is at most 'utils.CHUNK_SIZE' bytes.
        """
        raise NotImplementedError()


class BytesSource(ByteSource):
    """Bytes held in memory, owned by the source"""

    def __init__(self, data: bytes):
        self._data = data

    @property
    def length(self) -> int:
        return len(self._data)

    def slice(self, start: int, end: int) -> "BytesSource":
        return BytesSource(self._data[start:end])

    async def chunks(self, split: bool = False) -> typing.AsyncIterator[bytes]:
        if not self._data:
            return
        if split:
            for chunk in utils.split_chunk(self._data):
                yield chunk
        else:
            yield self._data

    def __repr__(self) -> str:
        return f"<BytesSource length={self.length}>"


class BlobSource(ByteSource):
    """Another Blob nested by reference. Any object passing
    'utils.is_blob()' works here, not only 'formdata.Blob'.
    """

    def __init__(self, blob: typing.Any):
        self._blob = blob

    @property
    def blob(self) -> typing.Any:
        return self._blob

    @property
    def length(self) -> int:
        return self._blob.size

    def slice(self, start: int, end: int) -> "BlobSource":
        return BlobSource(self._blob.slice(start, end))

    async def chunks(self, split: bool = False) -> typing.AsyncIterator[bytes]:
        if callable(getattr(self._blob, "stream", None)):
            source = utils.iter_stream(self._blob.stream())
            try:
                async for chunk in source:
                    yield chunk
            finally:
                await source.aclose()
            return

        # Blobs without 'stream()' are read through windows of 'array_buffer()'.
        position = 0
        size = self._blob.size
        while position < size:
            window = self._blob.slice(position, min(size, position + utils.CHUNK_SIZE))
            data = bytes(await window.array_buffer())
            if not data:
                break
            position += len(data)
            yield data

    def __repr__(self) -> str:
        return f"<BlobSource length={self.length}>"


class DiskFileSource(ByteSource):
    """A window into a file on disk.

    The file's modification time is captured when the reference
    is created. Every read stats the file again and fails with
    'NotReadableError' if the file was modified since.
    """

    def __init__(
        self,
        path: typing.Union[str, os.PathLike],
        *,
        size: int,
        mtime_ms: float,
        start: int = 0,
        backend: typing.Optional[AsyncFileBackend] = None,
    ):
        self._path = os.fspath(path)
        self._start = start
        self._size = size
        self._mtime_ms = mtime_ms
        self._backend = backend

    @property
    def path(self) -> str:
        return self._path

    @property
    def mtime_ms(self) -> float:
        return self._mtime_ms

    @property
    def length(self) -> int:
        return self._size

    def slice(self, start: int, end: int) -> "DiskFileSource":
        return DiskFileSource(
            self._path,
            size=max(end - start, 0),
            mtime_ms=self._mtime_ms,
            start=self._start + start,
            backend=self._backend,
        )

    async def chunks(self, split: bool = False) -> typing.AsyncIterator[bytes]:
        backend = self._backend or get_backend()

        stat = await backend.stat_file(self._path)
        if stat.mtime_ms > self._mtime_ms:
            blob_logger.debug(
                "%s was modified after it was referenced (%s > %s)",
                self._path,
                stat.mtime_ms,
                self._mtime_ms,
            )
            raise NotReadableError(self._path)

        if not self._size:
            return

        reader = backend.open_read_stream(
            self._path, self._start, self._start + self._size
        )
        try:
            async for chunk in reader:
                if split:
                    for piece in utils.split_chunk(chunk):
                        yield piece
                else:
                    yield chunk
        finally:
            await reader.aclose()

    def __repr__(self) -> str:
        return (
            f"<DiskFileSource path={self._path!r} "
            f"start={self._start} length={self._size}>"
        )
