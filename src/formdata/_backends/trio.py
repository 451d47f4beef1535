import trio
import typing
from .base import AsyncFileBackend, FileStat, stat_result_to_file_stat
from formdata import utils


class TrioBackend(AsyncFileBackend):
    async def stat_file(self, path: str) -> FileStat:
        return stat_result_to_file_stat(await trio.Path(path).stat())

    async def open_read_stream(
        self, path: str, start: int, end: int
    ) -> typing.AsyncGenerator[bytes, None]:
        async with await trio.open_file(path, "rb") as f:
            await f.seek(start)
            remaining = end - start
            while remaining > 0:
                chunk = await f.read(min(utils.CHUNK_SIZE, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
