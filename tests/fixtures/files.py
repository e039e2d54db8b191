"""Problem-file helpers bound to a test's tmp directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union


@dataclass
class QuizFiles:
    root: Path

    def raw(self, name: Union[str, Path], content: Union[str, bytes]) -> Path:
        """Write ``content`` verbatim; bytes skip any encoding."""

        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def rows(self, rows: Sequence[str], name: str = "problems.csv") -> Path:
        return self.raw(name, "".join(f"{row}\n" for row in rows))
