# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Text decoding and encoding over binary file handles."""

from __future__ import annotations

import codecs
import os
from collections.abc import Iterator
from typing import BinaryIO, Final, Protocol

DEFAULT_CHUNK_SIZE: Final[int] = 65_536


class TextSource(Protocol):
    def read_some(self, size: int = DEFAULT_CHUNK_SIZE) -> str | None: ...


class TextSink(Protocol):
    def write(self, text: str, /) -> object: ...


def new_decoder(encoding: str) -> codecs.IncrementalDecoder:
    return codecs.getincrementaldecoder(encoding)()


def decode_some(
    handle: BinaryIO, decoder: codecs.IncrementalDecoder, size: int
) -> str | None:
    """Read and decode the next piece of text, or None at end of file.

    Multi-byte characters split across reads are held back by the decoder
    until their remaining bytes arrive.
    """
    while True:
        chunk = handle.read(size)
        if not chunk:
            tail = decoder.decode(b"", final=True)
            return tail or None
        text = decoder.decode(chunk)
        if text:
            return text


def iter_lines(source: TextSource) -> Iterator[str]:
    """Yield lines from ``source`` without their line terminators."""

    pending = ""
    while (text := source.read_some()) is not None:
        pending += text
        *complete, pending = pending.split("\n")
        for line in complete:
            yield line.removesuffix("\r")
    if pending:
        yield pending.removesuffix("\r")


def copy_text(source: TextSource, sink: TextSink) -> None:
    while (text := source.read_some()) is not None:
        _ = sink.write(text)


def append_text(handle: BinaryIO, text: str, encoding: str) -> int:
    """Append ``text`` at end of file, keeping the read position unchanged."""

    data = text.encode(encoding)
    position = handle.tell()
    _ = handle.seek(0, os.SEEK_END)
    written = handle.write(data)
    handle.flush()
    _ = handle.seek(position)
    return written


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "TextSink",
    "TextSource",
    "append_text",
    "copy_text",
    "decode_some",
    "iter_lines",
    "new_decoder",
]
