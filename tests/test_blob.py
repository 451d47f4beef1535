import array
import pytest
import formdata
from formdata import Blob
from formdata.utils import CHUNK_SIZE


class ForeignBlob:
    """Blob from another library, only has 'array_buffer()'"""

    type_tag = "Blob"

    def __init__(self, data, type=""):
        self._data = data
        self.type = type

    @property
    def size(self):
        return len(self._data)

    def slice(self, start=0, end=None, content_type=""):
        return ForeignBlob(self._data[start:end], content_type)

    async def array_buffer(self):
        return bytearray(self._data)


class ForeignStreamingBlob(ForeignBlob):
    def slice(self, start=0, end=None, content_type=""):
        return ForeignStreamingBlob(self._data[start:end], content_type)

    def stream(self):
        async def chunks():
            for i in range(0, len(self._data), 2):
                yield self._data[i : i + 2]

        return chunks()


@pytest.mark.parametrize(
    ["parts", "expected"],
    [
        ([], 0),
        (["a"], 1),
        (["ä"], 2),
        (["€", "a"], 4),
        ([b"abc", "de"], 5),
        ([bytearray(b"xy")], 2),
        ([memoryview(b"hello")[1:3]], 2),
        ([array.array("H", [1, 2])], 4),
        ([Blob(["abc"]), "d"], 4),
        ([1, None, True], len("1NoneTrue")),
        ((part for part in ["a", "b"]), 2),
    ],
)
def test_blob_size(parts, expected):
    assert Blob(parts).size == expected


def test_blob_empty():
    blob = Blob()
    assert blob.size == 0
    assert blob.type == ""


@pytest.mark.trio
async def test_blob_copies_buffers():
    data = bytearray(b"abc")
    blob = Blob([data])
    data[0] = ord("x")

    assert await blob.text() == "abc"


@pytest.mark.trio
async def test_blob_non_bytes_parts_are_stringified():
    assert await Blob([1, None, 2.5]).text() == "1None2.5"


@pytest.mark.parametrize("parts", [None, "abc", b"abc", 5, 1.5])
def test_blob_parts_not_a_sequence(parts):
    with pytest.raises(formdata.ConstructionError) as e:
        Blob(parts)
    assert "cannot be converted to a sequence" in str(e.value)


def test_blob_parts_not_iterable():
    with pytest.raises(TypeError) as e:
        Blob(object())
    assert isinstance(e.value, formdata.ConstructionError)
    assert "__iter__" in str(e.value)


@pytest.mark.parametrize("options", [5, "text/plain", ["type"]])
def test_blob_options_not_a_mapping(options):
    with pytest.raises(formdata.ConstructionError):
        Blob([], options)


@pytest.mark.parametrize(
    ["type", "expected"],
    [
        ("text/plain", "text/plain"),
        ("text/plain; charset=utf-8", "text/plain; charset=utf-8"),
        ("", ""),
        (None, ""),
        ("text/plaïn", ""),
        ("text/plain\n", ""),
        ("\x19", ""),
        (123, "123"),
    ],
)
def test_blob_type_normalized(type, expected):
    assert Blob([], {"type": type}).type == expected


def test_blob_size_and_type_cant_be_changed():
    blob = Blob(["abc"], {"type": "text/plain"})

    blob.size = 10
    blob.type = "image/png"
    assert blob.size == 3
    assert blob.type == "text/plain"

    del blob.size
    del blob.type
    assert blob.size == 3
    assert blob.type == "text/plain"


@pytest.mark.trio
@pytest.mark.parametrize(
    ["start", "end"],
    [
        (0, None),
        (1, 2),
        (1, 5),
        (2, 4),
        (0, 6),
        (3, 3),
        (4, 2),
        (-2, None),
        (-5, -1),
        (-100, 2),
        (2, 100),
        (100, None),
        (0, -100),
    ],
)
async def test_blob_slice(start, end):
    text = "abcdef"
    blob = Blob(["ab", "cd", "ef"])

    sliced = blob.slice(start) if end is None else blob.slice(start, end)

    assert await sliced.text() == text[start:end]
    assert sliced.size == len(text[start:end])


@pytest.mark.trio
async def test_blob_slice_single_char():
    assert await Blob(["a", "b", "c"]).slice(1, 2).text() == "b"


@pytest.mark.trio
async def test_blob_slice_whole_blob():
    blob = Blob(["hello ", b"world"], {"type": "text/plain"})
    sliced = blob.slice()

    assert sliced.size == blob.size
    assert await sliced.text() == await blob.text()
    assert sliced.type == ""


def test_blob_slice_content_type():
    blob = Blob(["abc"], {"type": "text/plain"})

    assert blob.slice(0, 1, "text/html").type == "text/html"
    assert blob.slice(0, 1, "text/é").type == ""
    assert blob.slice(0, 1).type == ""


@pytest.mark.trio
async def test_blob_slice_nested_blobs():
    blob = Blob(["ab", Blob(["cd", "ef"]), "gh"])

    assert await blob.slice(3, 7).text() == "defg"
    assert await blob.slice(3, 7).slice(1, -1).text() == "ef"


def test_blob_slice_returns_blob_for_file():
    file = formdata.File(["abc"], "a.txt")
    sliced = file.slice(1)

    assert formdata.is_blob(sliced)
    assert not formdata.is_file(sliced)


@pytest.mark.trio
@pytest.mark.parametrize(
    ["start", "end", "expected"],
    [
        (float("nan"), None, "abcdef"),
        (0, float("nan"), ""),
        (0, float("inf"), "abcdef"),
        (float("-inf"), 2, "ab"),
        (float("inf"), None, ""),
        (1.7, 4.2, "bcd"),
        (-2.5, None, "ef"),
    ],
)
async def test_blob_slice_float_offsets(start, end, expected):
    blob = Blob(["abc", "def"])
    assert await blob.slice(start, end).text() == expected


@pytest.mark.trio
@pytest.mark.parametrize(
    ["parts", "expected"],
    [
        ([b"\xe2\x82", b"\xac"], "€"),
        ([b"\xe2", b"\x82", b"\xac", "!"], "€!"),
        ([b"\xff"], "�"),
        ([b"\xe2\x82"], "�"),
    ],
)
async def test_blob_text_decodes_across_parts(parts, expected):
    assert await Blob(parts).text() == expected


@pytest.mark.trio
async def test_blob_array_buffer():
    blob = Blob(["ab", b"cd", Blob(["ef"])])
    buffer = await blob.array_buffer()

    assert isinstance(buffer, bytearray)
    assert buffer == b"abcdef"
    assert Blob([buffer]).size == blob.size


@pytest.mark.trio
async def test_blob_stream_chunks_large_parts():
    blob = Blob([b"x" * (CHUNK_SIZE * 2 + 10), b"yz"])

    chunks = [chunk async for chunk in blob.stream()]

    assert [len(chunk) for chunk in chunks] == [CHUNK_SIZE, CHUNK_SIZE, 10, 2]
    assert b"".join(chunks) == await blob.array_buffer()


@pytest.mark.trio
async def test_blob_stream_cancel():
    blob = Blob(["a", "b", "c"])
    stream = blob.stream()

    assert await stream.pull() == b"a"
    await stream.cancel()
    assert await stream.pull() is None
    assert await stream.pull() is None


@pytest.mark.trio
async def test_blob_streams_are_independent():
    blob = Blob(["a", "b", "c"])
    first = blob.stream()
    second = blob.stream()

    assert await first.pull() == b"a"
    assert await first.pull() == b"b"
    assert await second.pull() == b"a"
    assert await first.pull() == b"c"
    assert await first.pull() is None
    assert await second.read() == b"bc"


@pytest.mark.trio
async def test_blob_empty_parts_produce_no_chunks():
    chunks = [chunk async for chunk in Blob(["", b"", "a"]).stream()]
    assert chunks == [b"a"]


@pytest.mark.trio
@pytest.mark.parametrize("blob_class", [ForeignBlob, ForeignStreamingBlob])
async def test_blob_with_foreign_blob(blob_class):
    foreign = blob_class(b"hello world")
    blob = Blob(["<", foreign, ">"])

    assert blob.size == 13
    assert await blob.text() == "<hello world>"
    assert await blob.slice(3, 8).text() == "llo w"


@pytest.mark.trio
async def test_blob_with_foreign_blob_larger_than_chunk():
    data = bytes(range(256)) * 600
    blob = Blob([ForeignBlob(data)])

    assert await blob.array_buffer() == data


@pytest.mark.trio
async def test_blob_with_unsupported_foreign_stream():
    class WeirdBlob(ForeignBlob):
        def stream(self):
            return object()

    blob = Blob([WeirdBlob(b"abc")])

    with pytest.raises(formdata.UnsupportedSourceError):
        await blob.text()
