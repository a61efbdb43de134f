"""Mind package - artifacts, the shared mind bundle and sessions."""

from .artifacts import (
    ARTIFACT_PATHS,
    ArtifactStore,
    parse_markdown_artifact,
)
from .loader import (
    DECISION_FUNCTION_IDS,
    TASK_ANATOMY_RULES,
    TASK_MANAGEMENT_RULES,
    MindBundle,
    MindLoader,
    thaw,
)
from .session import Session, SessionManager

__all__ = [
    "ARTIFACT_PATHS",
    "ArtifactStore",
    "parse_markdown_artifact",
    "DECISION_FUNCTION_IDS",
    "TASK_ANATOMY_RULES",
    "TASK_MANAGEMENT_RULES",
    "MindBundle",
    "MindLoader",
    "thaw",
    "Session",
    "SessionManager",
]
