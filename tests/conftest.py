"""Pytest fixtures for test suite."""

import pytest
import yaml
from pathlib import Path
from typing import Any

from hybridops.configuration import ConfigStore, default_config
from hybridops.core import PACKAGE_DIR, Settings
from hybridops.heuristics import HeuristicCompiler
from hybridops.mind import ArtifactStore, MindLoader
from hybridops.observability import Telemetry


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def telemetry() -> Telemetry:
    """Private telemetry so counters start at zero."""
    return Telemetry()


@pytest.fixture
def minds_dir() -> Path:
    """Directory holding the packaged sample mind."""
    return PACKAGE_DIR / "minds"


def write_config(path: Path, config: Any) -> Path:
    """Write a configuration document as YAML."""
    path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def write_yaml():
    """Helper writing a document to a YAML file."""
    return write_config


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """A valid configuration file equal to the defaults."""
    return write_config(tmp_path / "heuristics.yaml", default_config())


@pytest.fixture
def store(config_path: Path, telemetry: Telemetry) -> ConfigStore:
    return ConfigStore(config_path, telemetry=telemetry)


@pytest.fixture
def compiler(telemetry: Telemetry) -> HeuristicCompiler:
    return HeuristicCompiler(telemetry=telemetry)


@pytest.fixture
def artifact_store(minds_dir: Path, tmp_path: Path, telemetry: Telemetry) -> ArtifactStore:
    return ArtifactStore(
        "operations_mind",
        minds_dir,
        legacy_minds_dir=tmp_path / "legacy",
        telemetry=telemetry,
    )


@pytest.fixture
def mind(
    store: ConfigStore,
    compiler: HeuristicCompiler,
    artifact_store: ArtifactStore,
    telemetry: Telemetry,
) -> MindLoader:
    """Unloaded mind isolated from the process environment."""
    loader = MindLoader(store, compiler, artifact_store, telemetry=telemetry, environ={})
    yield loader
    store.unwatch()


@pytest.fixture
def settings(config_path: Path, minds_dir: Path, tmp_path: Path) -> Settings:
    return Settings(
        config_path=str(config_path),
        minds_dir=str(minds_dir),
        legacy_minds_dir=str(tmp_path / "legacy"),
    )
