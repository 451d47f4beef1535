import os
import typing

from . import utils
from ._backends import AsyncFileBackend, FileStat, get_backend
from ._backends.base import stat_result_to_file_stat
from .blob import Blob, BlobOptionsType, BlobPartsType, _check_arguments
from .sources import DiskFileSource

PathType = typing.Union[str, os.PathLike]


class File(Blob):
    """A Blob with a name and a last modified time.

    Both 'parts' and 'name' are required. Options are "type" and
    "last_modified" in milliseconds since the epoch. Without
    "last_modified" the current time is used, values that aren't
    numbers become 0.
    """

    type_tag = "File"

    def __init__(
        self, parts: BlobPartsType, name: typing.Any, options: BlobOptionsType = None
    ):
        super().__init__(parts, options)
        options = {} if options is None else options

        self._name = str(name)
        if "last_modified" in options:
            self._last_modified = utils.coerce_timestamp(options["last_modified"])
        else:
            self._last_modified = utils.now_ms()

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, _: typing.Any) -> None:
        pass

    @property
    def last_modified(self) -> int:
        return self._last_modified

    @last_modified.setter
    def last_modified(self, _: typing.Any) -> None:
        pass

    def __repr__(self) -> str:
        return (
            f"<File name={self._name!r} size={self.size} "
            f"type={self.type!r} last_modified={self._last_modified}>"
        )


def _create_file_from_path(
    path: PathType,
    stat: FileStat,
    filename: typing.Optional[str],
    options: BlobOptionsType,
    backend: typing.Optional[AsyncFileBackend],
) -> File:
    source = DiskFileSource(
        path, size=stat.size, mtime_ms=stat.mtime_ms, backend=backend
    )
    options = dict(_check_arguments("File", (), options))
    options["last_modified"] = int(stat.mtime_ms)
    if not filename:
        filename = os.path.basename(source.path)
    return File([source], filename, options)


async def file_from_path(
    path: PathType,
    filename: typing.Optional[str] = None,
    options: BlobOptionsType = None,
    *,
    backend: typing.Optional[AsyncFileBackend] = None,
) -> File:
    """Creates a File referencing a file on disk. Only the file's
    size and modification time are read here, the content is read
    each time the File is, as long as the file wasn't modified since.
    A "last_modified" option is ignored.
    """
    stat = await (backend or get_backend()).stat_file(os.fspath(path))
    return _create_file_from_path(path, stat, filename, options, backend)


def file_from_path_sync(
    path: PathType,
    filename: typing.Optional[str] = None,
    options: BlobOptionsType = None,
    *,
    backend: typing.Optional[AsyncFileBackend] = None,
) -> File:
    """Same as 'file_from_path()' but stats the file synchronously"""
    stat = stat_result_to_file_stat(os.stat(path))
    return _create_file_from_path(path, stat, filename, options, backend)
