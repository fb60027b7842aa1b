from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import IO, Any, Optional, Union

DocumentInput = Union[str, bytes, bytearray, IO[Any]]


def _to_bytes(data: Union[str, bytes, bytearray], encoding: str) -> bytes:
    if isinstance(data, str):
        return data.encode(encoding)
    return bytes(data)


@dataclass
class InlineDocument:
    """Document handed over as an in-memory payload."""

    data: bytes

    def content(self) -> bytes:
        return self.data


@dataclass
class StreamDocument:
    """Document handed over as a readable object; read once, then cached."""

    source: IO[Any]
    encoding: str = "utf-8"
    _data: Optional[bytes] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def content(self) -> bytes:
        with self._lock:
            if self._data is None:
                self._data = _to_bytes(self.source.read(), self.encoding)
            return self._data


Document = Union[InlineDocument, StreamDocument]


def resolve_document(document: Union[DocumentInput, InlineDocument, StreamDocument], encoding: str = "utf-8") -> Document:
    if isinstance(document, (InlineDocument, StreamDocument)):
        return document
    if isinstance(document, (str, bytes, bytearray)):
        return InlineDocument(_to_bytes(document, encoding))
    if hasattr(document, "read"):
        return StreamDocument(document, encoding=encoding)
    raise TypeError(f"unsupported document type: {type(document).__name__}")
