from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MatrixError(Exception):
    """A build file or limits problem, identified by a stable code.

    file is the build (or limits) file, path the dotted location inside it,
    e.g. "matrix.go[1]".
    """

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        loc = ":".join(p for p in (self.file, self.path) if p) or "<build file>"
        return f"{loc}: {self.code}: {self.message}"


class MatrixLoadError(MatrixError):
    """The file could not be found, read or parsed."""


class MatrixDecodeError(MatrixError):
    """The document parsed but the matrix section has the wrong shape."""
