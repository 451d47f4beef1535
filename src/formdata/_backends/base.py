import typing


class FileStat(typing.NamedTuple):
    size: int
    mtime_ms: float


class AsyncFileBackend:
    """Filesystem access used by disk-backed Blobs. One implementation
    exists per event loop so that reads suspend instead of blocking.
    """

    async def stat_file(self, path: str) -> FileStat:
        raise NotImplementedError()

    def open_read_stream(
        self, path: str, start: int, end: int
    ) -> typing.AsyncGenerator[bytes, None]:
        """Reads the bytes in '[start, end)' of the file at 'path'.
        The file stays open until the generator finishes or is closed.
        """
        raise NotImplementedError()


def stat_result_to_file_stat(stat: typing.Any) -> FileStat:
    return FileStat(size=stat.st_size, mtime_ms=stat.st_mtime_ns / 1_000_000)
