"""CASE ... WHEN ... THEN ... ELSE ... END expressions."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Any

from himorm.utils import to_string


@dataclass(frozen=True)
class WhenThen:
    when: str
    then: str


@dataclass(frozen=True)
class Else:
    value: str


@dataclass
class CaseBuilder:
    """Builds a CASE expression, optionally bound to the column it assigns."""

    subject: str = ""
    field: str = ""
    whens: list[WhenThen] = dc_field(default_factory=list)
    otherwise: Else | None = None

    def set_field(self, field: str) -> CaseBuilder:
        """Bind the target column, quoting it with backticks unless already quoted."""
        self.field = field if "`" in field else f"`{field}`"
        return self

    def when(self, when: Any, then: Any) -> CaseBuilder:
        self.whens.append(WhenThen(to_string(when), to_string(then)))
        return self

    def else_(self, value: Any) -> CaseBuilder:
        self.otherwise = Else(to_string(value))
        return self

    def to_sql(self) -> tuple[str, list]:
        if not self.whens:
            raise ValueError("case expression must contain at least one WHEN clause")
        pieces = ["CASE ", self.subject, " "]
        for part in self.whens:
            pieces += ["WHEN ", part.when, " ", "THEN ", part.then, " "]
        if self.otherwise is not None:
            pieces += ["ELSE ", self.otherwise.value, " "]
        pieces.append("END")
        return "".join(pieces), []


def case(*args: Any) -> CaseBuilder:
    """Start a CASE expression; the first argument, if any, is the value compared."""
    return CaseBuilder(subject=to_string(args[0]) if args else "")


def new_case_builder(field: str, *args: Any) -> CaseBuilder:
    """Start a CASE expression bound to a target column."""
    return case(*args).set_field(field)