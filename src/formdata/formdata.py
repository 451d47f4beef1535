import functools
import typing

from . import utils
from .exceptions import TypeMismatchError
from .file import File

FormDataEntryValue = typing.Union[str, File]


class FormData:
    """An ordered multi-map of field names to string or File values.

    Field names iterate in the order they were first added, values
    of one field in the order they were appended. 'set()' replaces all
    values of a field, 'append()' adds one more. A field always holds
    at least one value, 'delete()' removes it entirely.
    """

    type_tag = "FormData"

    def __init__(self) -> None:
        self._entries: typing.Dict[str, typing.List[typing.Any]] = {}

    def _normalize_value(
        self, method: str, value: typing.Any, filename: typing.Optional[str]
    ) -> typing.Any:
        if utils.is_file(value):
            if filename is None:
                return value
            return File(
                [value],
                filename,
                {"type": value.type, "last_modified": value.last_modified},
            )
        if utils.is_blob(value):
            return File(
                [value], "blob" if filename is None else filename, {"type": value.type}
            )
        if filename is not None:
            raise TypeMismatchError(
                f"Failed to execute '{method}' on 'FormData': "
                "parameter 2 is not of type 'Blob'."
            )
        return str(value)

    def _set_entry(
        self,
        name: typing.Any,
        value: typing.Any,
        filename: typing.Optional[str],
        append: bool,
    ) -> None:
        name = str(name)
        value = self._normalize_value("append" if append else "set", value, filename)

        values = self._entries.get(name)
        if values is None or not append:
            self._entries[name] = [value]
        else:
            values.append(value)

    def append(
        self, name: str, value: typing.Any, filename: typing.Optional[str] = None
    ) -> None:
        """Adds a value to the end of a field's values, creating the
        field if it doesn't exist. Blobs are stored as Files named
        'filename' ("blob" by default), Files are renamed to 'filename'
        when given and everything else is converted to a string.
        """
        self._set_entry(name, value, filename, append=True)

    def set(
        self, name: str, value: typing.Any, filename: typing.Optional[str] = None
    ) -> None:
        """Same as 'append()' except all existing values of the field are replaced."""
        self._set_entry(name, value, filename, append=False)

    def get(self, name: str) -> typing.Optional[FormDataEntryValue]:
        values = self._entries.get(str(name))
        if not values:
            return None
        return values[0]

    def get_all(self, name: str) -> typing.List[FormDataEntryValue]:
        return list(self._entries.get(str(name), ()))

    def has(self, name: str) -> bool:
        return str(name) in self._entries

    def delete(self, name: str) -> None:
        self._entries.pop(str(name), None)

    def keys(self) -> typing.Iterator[str]:
        for name in list(self._entries):
            yield name

    def entries(self) -> typing.Iterator[typing.Tuple[str, FormDataEntryValue]]:
        """Yields one '(name, value)' pair per value, so a field with
        three values yields three pairs with the same name.
        """
        for name in self.keys():
            for value in self.get_all(name):
                yield name, value

    def values(self) -> typing.Iterator[FormDataEntryValue]:
        for _, value in self.entries():
            yield value

    def for_each(
        self,
        callback: typing.Callable[..., typing.Any],
        this_arg: typing.Any = None,
    ) -> None:
        """Calls 'callback(value, name, form)' for every entry. A 'this_arg'
        is bound as the callback's first argument, like a method's 'self'.
        """
        if this_arg is not None:
            callback = functools.partial(callback, this_arg)
        for name, value in self.entries():
            callback(value, name, self)

    def __iter__(self) -> typing.Iterator[typing.Tuple[str, FormDataEntryValue]]:
        return self.entries()

    def __contains__(self, name: object) -> bool:
        return self.has(typing.cast(str, name))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} fields={list(self._entries)!r}>"
