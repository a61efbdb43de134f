"""
Application root: builds the service graph once and hands it to callers.

Components receive their collaborators explicitly; the only module-level
state is the lazily built ``Services`` used by the HTTP routers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from hybridops.axioms import AxiomValidator
from hybridops.configuration import ConfigStore
from hybridops.core import Settings, get_settings
from hybridops.gates import ValidationGate
from hybridops.heuristics import HeuristicCompiler
from hybridops.mind import ArtifactStore, MindLoader, SessionManager
from hybridops.observability import Telemetry


@dataclass
class Services:
    """Every long-lived component, wired together."""

    settings: Settings
    telemetry: Telemetry
    store: ConfigStore
    compiler: HeuristicCompiler
    artifacts: ArtifactStore
    mind: MindLoader
    sessions: SessionManager
    axiom_validator: AxiomValidator
    gate: ValidationGate

    def shutdown(self) -> None:
        self.sessions.stop_sweeper()
        self.mind.close()
        self.store.unwatch()


def build_services(
    settings: Settings | None = None,
    environ: Mapping[str, str] | None = None,
) -> Services:
    """Build the component graph in dependency order.

    Args:
        settings: Defaults to the cached process settings.
        environ: Environment used for configuration overrides; defaults to
            ``os.environ``.
    """
    settings = settings or get_settings()
    telemetry = Telemetry()
    store = ConfigStore(
        settings.config_path,
        telemetry=telemetry,
        watch_interval=settings.watch_interval_seconds,
    )
    compiler = HeuristicCompiler(telemetry=telemetry)
    artifacts = ArtifactStore(
        settings.mind_name,
        settings.minds_dir,
        legacy_minds_dir=settings.legacy_minds_dir,
        telemetry=telemetry,
    )
    mind = MindLoader(store, compiler, artifacts, telemetry=telemetry, environ=environ)
    sessions = SessionManager(mind, ttl_hours=settings.session_ttl_hours, telemetry=telemetry)
    axiom_validator = AxiomValidator(telemetry=telemetry, history_limit=settings.history_limit)
    gate = ValidationGate(
        compiler,
        mind=mind,
        axiom_validator=axiom_validator,
        telemetry=telemetry,
    )
    return Services(
        settings=settings,
        telemetry=telemetry,
        store=store,
        compiler=compiler,
        artifacts=artifacts,
        mind=mind,
        sessions=sessions,
        axiom_validator=axiom_validator,
        gate=gate,
    )


_services: Services | None = None


def get_services() -> Services:
    """Get or create the process-wide services."""
    global _services
    if _services is None:
        _services = build_services()
    return _services


def set_services(services: Services | None) -> None:
    """Replace the process-wide services (tests, embedding hosts)."""
    global _services
    _services = services
