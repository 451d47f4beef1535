import sniffio
from .base import AsyncFileBackend, FileStat
from .asyncio import AsyncioBackend
from .trio import TrioBackend
from ..log import blob_logger

__all__ = [
    "AsyncFileBackend",
    "AsyncioBackend",
    "FileStat",
    "TrioBackend",
    "get_backend",
]


def get_backend() -> AsyncFileBackend:
    """Gets the file backend for the event loop that is currently running."""
    try:
        async_lib = sniffio.current_async_library()
    except sniffio.AsyncLibraryNotFoundError:
        raise ValueError("Disk-backed files can only be read from async code") from None
    blob_logger.debug("Using the %s file backend", async_lib)
    if async_lib == "trio":
        return TrioBackend()
    elif async_lib == "asyncio":
        return AsyncioBackend()
    else:
        raise ValueError(f"Unsupported async library {async_lib!r}")
