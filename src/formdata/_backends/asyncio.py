import asyncio
import os
import typing
from .base import AsyncFileBackend, FileStat, stat_result_to_file_stat
from formdata import utils


class AsyncioBackend(AsyncFileBackend):
    """asyncio has no async file API so the blocking
    calls run in the loop's default executor.
    """

    async def stat_file(self, path: str) -> FileStat:
        loop = asyncio.get_running_loop()
        return stat_result_to_file_stat(await loop.run_in_executor(None, os.stat, path))

    async def open_read_stream(
        self, path: str, start: int, end: int
    ) -> typing.AsyncGenerator[bytes, None]:
        loop = asyncio.get_running_loop()
        f = await loop.run_in_executor(None, open, path, "rb")
        try:
            await loop.run_in_executor(None, f.seek, start)
            remaining = end - start
            while remaining > 0:
                chunk = await loop.run_in_executor(
                    None, f.read, min(utils.CHUNK_SIZE, remaining)
                )
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
        finally:
            # Closing a regular file doesn't block for long
            # and must happen even when cancelled.
            f.close()
