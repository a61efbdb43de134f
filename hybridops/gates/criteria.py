"""
Checkpoint criteria: typed structure plus a parser for the text form.

Grammar (whitespace between tokens is optional around comparators)::

    criterion  := comparison | presence | floor
    comparison := subject comparator number annotation?
    presence   := subject "present" annotation?
    floor      := "no" subject "below" number annotation?
    comparator := "≥" | ">=" | ">" | "≤" | "<=" | "<" | "=" | "=="
    annotation := "(" any text ")"
    subject    := one or more words

Examples: ``"End-state vision clarity ≥0.8"``, ``"Guardrails present (VETO)"``,
``"No dimension below 6.0"``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, model_validator

from hybridops.errors import CriterionSyntaxError


class Operator(str, Enum):
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"
    EQ = "=="
    PRESENT = "present"


class CriterionKind(str, Enum):
    COMPARISON = "comparison"
    PRESENCE = "presence"
    FLOOR = "floor"


COMPARATORS: dict[str, Operator] = {
    ">=": Operator.GE,
    "<=": Operator.LE,
    "==": Operator.EQ,
    "≥": Operator.GE,
    "≤": Operator.LE,
    ">": Operator.GT,
    "<": Operator.LT,
    "=": Operator.EQ,
}
_COMPARATOR_CHARS = set("≥≤<>=")
_NUMBER = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)")


class Criterion(BaseModel):
    """One pass/fail condition of a checkpoint."""

    field: str
    operator: Operator
    threshold: float | None = None
    label: str = ""
    kind: CriterionKind = CriterionKind.COMPARISON

    @model_validator(mode="after")
    def _check_shape(self) -> "Criterion":
        if self.operator == Operator.PRESENT:
            self.kind = CriterionKind.PRESENCE
        elif self.threshold is None:
            raise ValueError(f"Operator {self.operator.value} requires a threshold")
        if not self.label:
            self.label = self.describe()
        return self

    def describe(self) -> str:
        if self.kind == CriterionKind.PRESENCE:
            return f"{self.field} present"
        if self.kind == CriterionKind.FLOOR:
            return f"no {self.field} below {self.threshold:g}"
        return f"{self.field} {self.operator.value} {self.threshold:g}"

    @property
    def expected(self) -> str:
        if self.kind == CriterionKind.PRESENCE:
            return "present"
        return f"{self.operator.value} {self.threshold:g}"

    def compare(self, actual: Any) -> bool:
        """Apply the operator to a resolved value."""
        if self.operator == Operator.PRESENT:
            return bool(actual)
        if isinstance(actual, bool) or not isinstance(actual, (int, float)):
            return False
        threshold = self.threshold
        if self.operator == Operator.GE:
            return actual >= threshold
        if self.operator == Operator.GT:
            return actual > threshold
        if self.operator == Operator.LE:
            return actual <= threshold
        if self.operator == Operator.LT:
            return actual < threshold
        return math.isclose(actual, threshold, abs_tol=1e-9)


def to_snake(name: str) -> str:
    """``"End-state vision"`` / ``"endStateVision"`` -> ``end_state_vision``."""
    spaced = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name.strip())
    return re.sub(r"[^0-9a-z]+", "_", spaced.lower()).strip("_")


# =============================================================================
# Tokenizer and parser
# =============================================================================


@dataclass
class _Token:
    kind: str  # WORD, NUMBER, COMP, NOTE
    value: str
    pos: int


class _ParseError(Exception):
    def __init__(self, pos: int, message: str):
        super().__init__(message)
        self.pos = pos
        self.message = message


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
        elif ch == "(":
            close = text.find(")", i + 1)
            if close == -1:
                raise _ParseError(i, "unterminated annotation, expected ')'")
            tokens.append(_Token("NOTE", text[i + 1:close].strip(), i))
            i = close + 1
        elif ch == ")":
            raise _ParseError(i, "unexpected ')'")
        elif ch in _COMPARATOR_CHARS:
            two = text[i:i + 2]
            symbol = two if two in COMPARATORS else ch
            if symbol not in COMPARATORS:
                raise _ParseError(i, f"unknown comparator {symbol!r}")
            tokens.append(_Token("COMP", symbol, i))
            i += len(symbol)
        else:
            start = i
            while i < n and not text[i].isspace() and text[i] not in _COMPARATOR_CHARS and text[i] not in "()":
                i += 1
            chunk = text[start:i]
            kind = "NUMBER" if _NUMBER.fullmatch(chunk) else "WORD"
            tokens.append(_Token(kind, chunk, start))
    return tokens


def _parse_tokens(text: str, tokens: list[_Token]) -> Criterion:
    label = text.strip()
    if tokens and tokens[-1].kind == "NOTE":
        tokens = tokens[:-1]
    for tok in tokens:
        if tok.kind == "NOTE":
            raise _ParseError(tok.pos, "annotation must come last")
    if not tokens:
        raise _ParseError(0, "expected a subject")

    end = len(text)

    # floor := "no" subject "below" number
    if tokens[0].kind == "WORD" and tokens[0].value.lower() == "no":
        idx = 1
        subject: list[str] = []
        while idx < len(tokens) and not (
            tokens[idx].kind == "WORD" and tokens[idx].value.lower() == "below"
        ):
            if tokens[idx].kind == "COMP":
                raise _ParseError(tokens[idx].pos, "expected 'below', got a comparator")
            subject.append(tokens[idx].value)
            idx += 1
        if not subject:
            pos = tokens[idx].pos if idx < len(tokens) else end
            raise _ParseError(pos, "expected a subject after 'no'")
        if idx >= len(tokens):
            raise _ParseError(end, "expected 'below'")
        idx += 1
        if idx >= len(tokens) or tokens[idx].kind != "NUMBER":
            pos = tokens[idx].pos if idx < len(tokens) else end
            raise _ParseError(pos, "expected a number after 'below'")
        threshold = float(tokens[idx].value)
        if idx + 1 < len(tokens):
            raise _ParseError(tokens[idx + 1].pos, "unexpected text after number")
        return Criterion(
            field=to_snake(" ".join(subject)),
            operator=Operator.GE,
            threshold=threshold,
            label=label,
            kind=CriterionKind.FLOOR,
        )

    idx = 0
    subject = []
    while idx < len(tokens) and tokens[idx].kind in ("WORD", "NUMBER"):
        subject.append(tokens[idx].value)
        idx += 1
    if not subject:
        raise _ParseError(tokens[0].pos, "expected a subject")

    # presence := subject "present"
    if idx == len(tokens):
        if subject[-1].lower() == "present" and len(subject) > 1:
            return Criterion(
                field=to_snake(" ".join(subject[:-1])),
                operator=Operator.PRESENT,
                label=label,
                kind=CriterionKind.PRESENCE,
            )
        raise _ParseError(end, "expected a comparator (≥ >= > ≤ <= < = ==) or 'present'")

    # comparison := subject comparator number
    comparator = tokens[idx]
    idx += 1
    if idx >= len(tokens) or tokens[idx].kind != "NUMBER":
        pos = tokens[idx].pos if idx < len(tokens) else end
        raise _ParseError(pos, f"expected a number after {comparator.value!r}")
    threshold = float(tokens[idx].value)
    if idx + 1 < len(tokens):
        raise _ParseError(tokens[idx + 1].pos, "unexpected text after number")
    return Criterion(
        field=to_snake(" ".join(subject)),
        operator=COMPARATORS[comparator.value],
        threshold=threshold,
        label=label,
        kind=CriterionKind.COMPARISON,
    )


def parse_criterion(text: str) -> Criterion:
    """Parse one criterion string.

    Raises:
        CriterionSyntaxError: With the offending position and what was expected.
    """
    try:
        return _parse_tokens(text, _tokenize(text))
    except _ParseError as e:
        raise CriterionSyntaxError([(text, e.pos, e.message)]) from None


def parse_criteria(items: Iterable[Criterion | dict | str] | None) -> list[Criterion]:
    """Parse a mixed list of criteria, reporting every invalid entry at once."""
    parsed: list[Criterion] = []
    problems: list[tuple[str, int, str]] = []
    for item in items or []:
        if isinstance(item, Criterion):
            parsed.append(item)
        elif isinstance(item, dict):
            try:
                parsed.append(Criterion.model_validate(item))
            except ValueError as e:
                problems.append((str(item), 0, str(e)))
        elif isinstance(item, str):
            try:
                parsed.append(parse_criterion(item))
            except CriterionSyntaxError as e:
                problems.extend(e.problems)
        else:
            problems.append((repr(item), 0, "criterion must be a string or mapping"))
    if problems:
        raise CriterionSyntaxError(problems)
    return parsed
