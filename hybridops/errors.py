"""Exception hierarchy shared by the hybridops services.

Configuration problems are never raised: they are reported and the caller
falls back to the last good configuration or the hardcoded defaults. Vetoes
are result values, not exceptions.
"""

from __future__ import annotations


class HybridOpsError(Exception):
    """Base class for all hybridops errors."""


class InvalidInputError(HybridOpsError, ValueError):
    """Malformed or out-of-range input supplied by a caller."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class UnknownHeuristicError(HybridOpsError, KeyError):
    """No built-in or registered template exists for a heuristic id."""

    def __init__(self, heuristic_id: str):
        super().__init__(heuristic_id)
        self.heuristic_id = heuristic_id

    def __str__(self) -> str:
        return (
            f"Unknown heuristic ID: {self.heuristic_id}. "
            "Register a custom template first."
        )


class TemplateRegistrationError(HybridOpsError, ValueError):
    """A custom template was rejected at registration time."""


class ArtifactNotFoundError(HybridOpsError, FileNotFoundError):
    """A mind artifact (or the whole mind directory) could not be located."""


class MindLoadError(HybridOpsError):
    """Loading the mind bundle failed; the mind stays unloaded."""


class MindNotLoadedError(HybridOpsError, RuntimeError):
    """An operation needs a loaded mind but ``load()`` has not succeeded."""


class HeuristicExecutionError(HybridOpsError):
    """A compiled decision function raised while evaluating a context."""

    def __init__(self, heuristic_id: str, cause: BaseException):
        super().__init__(f"Heuristic {heuristic_id} execution failed: {cause}")
        self.heuristic_id = heuristic_id
        self.cause = cause


class UnknownValidatorError(HybridOpsError, ValueError):
    """A checkpoint names a structural validator that does not exist."""


class CriterionSyntaxError(HybridOpsError, ValueError):
    """One or more criterion strings do not match the criteria grammar.

    Attributes:
        problems: list of ``(criterion, position, message)`` tuples, one per
            offending criterion.
    """

    def __init__(self, problems: list[tuple[str, int, str]]):
        self.problems = problems
        lines = [
            f"{text!r} at position {pos}: {message}"
            for text, pos, message in problems
        ]
        super().__init__(
            f"{len(problems)} invalid criteria: " + "; ".join(lines)
        )
