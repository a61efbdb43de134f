"""
Locating, reading and parsing the mind's knowledge artifacts.

Artifacts live under ``<minds_dir>/<mind_name>`` (co-located with the
package). The older ``<legacy_minds_dir>/<mind_name>`` layout is still read,
with a deprecation warning.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from hybridops.errors import ArtifactNotFoundError
from hybridops.observability import Telemetry

COMPONENT = "mind_artifacts"

META_AXIOMS = "artifacts/meta_axioms.md"
DECISION_HEURISTICS = "artifacts/decision_heuristics.md"
TASK_PLAYBOOK = "sources/task_management_playbook.md"
SYSTEM_PROMPT = "system_prompts/system_prompt.txt"

# bundle key -> relative path, in load order
ARTIFACT_PATHS: dict[str, str] = {
    "meta_axioms": META_AXIOMS,
    "decision_heuristics": DECISION_HEURISTICS,
    "task_playbook": TASK_PLAYBOOK,
    "system_prompt": SYSTEM_PROMPT,
}

_YAML_BLOCK = re.compile(r"```ya?ml\n(.*?)\n```", re.DOTALL)


def parse_markdown_artifact(text: str, telemetry: Telemetry | None = None) -> dict[str, Any]:
    """Split markdown into ``{heading: body}`` on top-level ``# `` headings.

    A section containing a fenced YAML block is replaced by the parsed data
    of its first block. Text before the first heading is dropped.
    """
    sections: dict[str, Any] = {}
    current: str | None = None
    body: list[str] = []

    for line in text.splitlines():
        if line.startswith("# "):
            if current is not None:
                sections[current] = "\n".join(body).strip()
            current = line[2:].strip()
            body = []
        elif current is not None:
            body.append(line)
    if current is not None:
        sections[current] = "\n".join(body).strip()

    for heading, value in list(sections.items()):
        match = _YAML_BLOCK.search(value)
        if match is None:
            continue
        try:
            sections[heading] = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            # keep the raw text when the block is not valid YAML
            if telemetry is not None:
                telemetry.warn(COMPONENT, "yaml_section_unparsed", {"section": heading, "error": str(e)})
    return sections


class ArtifactStore:
    """Resolves the mind directory and caches parsed artifacts by path."""

    def __init__(
        self,
        mind_name: str,
        minds_dir: str | Path,
        legacy_minds_dir: str | Path | None = None,
        telemetry: Telemetry | None = None,
    ):
        self.mind_name = mind_name
        self._candidates = [Path(minds_dir) / mind_name]
        if legacy_minds_dir is not None:
            self._candidates.append(Path(legacy_minds_dir) / mind_name)
        self._telemetry = telemetry or Telemetry()
        self._cache: dict[str, Any] = {}

    @property
    def search_paths(self) -> list[Path]:
        return list(self._candidates)

    def resolve_base(self) -> Path:
        """First existing candidate directory.

        Raises:
            ArtifactNotFoundError: If no candidate exists.
        """
        for idx, base in enumerate(self._candidates):
            if base.is_dir():
                if idx > 0:
                    self._telemetry.warn(COMPONENT, "legacy_mind_path", {
                        "path": str(base),
                        "preferred": str(self._candidates[0]),
                    })
                return base

        searched = "\n".join(f"  {i}. {p}" for i, p in enumerate(self._candidates, start=1))
        raise ArtifactNotFoundError(
            f"Mind '{self.mind_name}' not found in any location.\nSearched paths:\n{searched}"
        )

    def load(self, relative_path: str) -> Any:
        """Read one artifact; markdown is parsed, anything else returned as text."""
        if relative_path in self._cache:
            self._telemetry.record_cache_hit({"component": COMPONENT, "artifact": relative_path})
            return self._cache[relative_path]
        self._telemetry.record_cache_miss({"component": COMPONENT, "artifact": relative_path})

        full_path = self.resolve_base() / relative_path
        try:
            text = full_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ArtifactNotFoundError(f"Artifact not found: {full_path}") from None

        parsed: Any = text
        if full_path.suffix == ".md":
            parsed = parse_markdown_artifact(text, self._telemetry)
        self._cache[relative_path] = parsed
        return parsed

    def load_all(self) -> dict[str, Any]:
        return {key: self.load(path) for key, path in ARTIFACT_PATHS.items()}

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()
