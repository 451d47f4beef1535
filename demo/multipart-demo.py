import sys
import trio
import formdata


async def main():
    form = formdata.StreamingFormData(
        [
            ("greeting", "Hello!"),
            ("notes", formdata.Blob(["line 1\n", "line 2\n"], {"type": "text/plain"})),
        ]
    )
    form.append("script", await formdata.file_from_path(__file__))

    print(form.headers)
    print("Content-Length:", await form.get_computed_length())

    async with form.stream() as stream:
        async for chunk in stream:
            sys.stdout.buffer.write(chunk)


trio.run(main)
