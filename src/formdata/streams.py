import typing


class ByteStream:
    """Pull-based cursor over a sequence of byte chunks.

    Every call to 'Blob.stream()' or 'MultipartEncoder.stream()'
    creates a new cursor, cursors never share position with each
    other. Use 'pull()' to get the next chunk ('None' once the data
    is exhausted) and 'cancel()' to stop early and release whatever
    the cursor has open, for example a file on disk.
    """

    def __init__(self, chunks: typing.AsyncIterator[bytes]):
        self._chunks = chunks
        self._done = False
        self._pulling = False

    @property
    def done(self) -> bool:
        return self._done

    async def _close_chunks(self) -> None:
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    async def pull(self) -> typing.Optional[bytes]:
        if self._done:
            return None
        self._pulling = True
        try:
            chunk = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._done = True
            return None
        except BaseException:
            self._done = True
            raise
        finally:
            self._pulling = False

        # Cancelled by another task while the chunk was being read.
        if self._done:
            await self._close_chunks()
            return None
        return chunk

    async def cancel(self) -> None:
        """Stops the stream. When another task is in the middle of
        'pull()' the chunks are released as soon as that read returns.
        """
        if self._done:
            return
        self._done = True
        if not self._pulling:
            await self._close_chunks()

    aclose = cancel

    async def read(self) -> bytes:
        """Drains the rest of the stream into one bytes object"""
        chunks = []
        async for chunk in self:
            chunks.append(chunk)
        return b"".join(chunks)

    def __aiter__(self) -> "ByteStream":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.pull()
        if chunk is None:
            raise StopAsyncIteration()
        return chunk

    async def __aenter__(self) -> "ByteStream":
        return self

    async def __aexit__(self, *_: typing.Any) -> None:
        await self.cancel()
