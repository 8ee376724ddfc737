from __future__ import annotations

import codecs
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional


_TERMINATOR = re.compile(r"\r?\n")


def iter_file_chunks(file_path: str | Path, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
    """Yield the raw bytes of a file in chunks of at most ``chunk_size``."""
    path = Path(file_path).expanduser()
    if not path.exists():
        raise FileNotFoundError(str(path))
    n = int(chunk_size)
    if n <= 0:
        raise ValueError("chunk_size must be > 0")
    with path.open("rb") as fh:
        while True:
            chunk = fh.read(n)
            if not chunk:
                break
            yield chunk


class LineStreamReader:
    """
    Pull-based line reader over an incrementally arriving byte stream.

    Contract:
      - chunks may split a line, a ``\\r\\n`` pair, or a multi-byte character anywhere;
        the produced lines do not depend on where the boundaries fall.
      - ``\\n`` and ``\\r\\n`` terminate a line and are stripped; a lone ``\\r`` is kept.
      - a non-empty trailing remainder is produced as the last line; an empty stream
        produces no lines.
      - single forward pass: a new parse needs a new reader over a fresh stream.

    State is limited to the decoder's pending bytes, the decoded text not yet split
    into lines, and the lines already split but not yet handed out.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        *,
        encoding: str = "utf-8",
        errors: str = "replace",
    ) -> None:
        self._chunks = iter(chunks)
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
        self._remainder = ""
        self._ready: List[str] = []
        self._ready_pos = 0
        self._exhausted = False

    def next_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end of stream."""
        while self._ready_pos >= len(self._ready):
            if self._exhausted:
                return None
            self._fill()
        line = self._ready[self._ready_pos]
        self._ready_pos += 1
        return line

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self.next_line()
        if line is None:
            raise StopIteration
        return line

    def _fill(self) -> None:
        self._ready = []
        self._ready_pos = 0

        chunk = next(self._chunks, None)
        if chunk is None:
            # Flush bytes of a truncated trailing character (decoded per ``errors``).
            text = self._remainder + self._decoder.decode(b"", final=True)
            self._remainder = ""
            self._exhausted = True
            self._split(text, final=True)
            return

        text = self._remainder + self._decoder.decode(bytes(chunk))
        self._split(text, final=False)

    def _split(self, text: str, *, final: bool) -> None:
        start = 0
        for m in _TERMINATOR.finditer(text):
            self._ready.append(text[start:m.start()])
            start = m.end()
        rest = text[start:]
        if final:
            if rest:
                self._ready.append(rest)
        else:
            self._remainder = rest


def read_lines(
    file_path: str | Path,
    *,
    chunk_size: int = 64 * 1024,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> LineStreamReader:
    """Open a line reader streaming ``file_path`` from disk."""
    path = Path(file_path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(str(path))
    return LineStreamReader(iter_file_chunks(path, chunk_size), encoding=encoding, errors=errors)
