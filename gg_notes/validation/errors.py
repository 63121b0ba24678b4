from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    layer: Optional[int] = None

    def __str__(self) -> str:
        where = "plot" if self.layer is None else f"layer {self.layer}"
        return f"{self.code} ({where}): {self.message}"


class ValidationError(Exception):
    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(str(i) for i in issues))
