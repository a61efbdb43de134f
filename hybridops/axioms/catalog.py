"""
The four-level belief catalog used to score content.

Keywords are matched as plain lower-case substrings of the content and
counted once per distinct keyword. The keyword vocabulary is Portuguese
because the source material the mind is built from is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class AxiomLevel(IntEnum):
    """Severity tiers; only SOCIAL carries veto power."""

    EXISTENTIAL = -4
    EPISTEMOLOGICAL = -3
    SOCIAL = -2
    OPERATIONAL = 0

    @property
    def key(self) -> str:
        return self.name.lower()


ALL_LEVELS: tuple[AxiomLevel, ...] = tuple(AxiomLevel)


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class BeliefEntry:
    """One named belief: keyword group with a capped per-hit bonus."""

    key: str
    core_belief: str
    keywords: tuple[str, ...]
    per_hit: float
    cap: float
    strength_reason: str
    manifestations: tuple[str, ...] = ()


@dataclass(frozen=True)
class PenaltyRule:
    """Fixed deduction when the content matches a negative phrase pattern."""

    belief: str
    reason: str
    severity: Severity
    penalty: float
    any_of: tuple[str, ...] = ()
    all_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if self.any_of and not any(phrase in text for phrase in self.any_of):
            return False
        if not all(phrase in text for phrase in self.all_of):
            return False
        return not any(phrase in text for phrase in self.none_of)


@dataclass(frozen=True)
class VetoRule:
    """Markers that zero the level unless the belief's keywords also appear."""

    belief: str
    markers: tuple[str, ...]
    reason: str


@dataclass(frozen=True)
class LevelSpec:
    level: AxiomLevel
    beliefs: tuple[BeliefEntry, ...]
    penalties: tuple[PenaltyRule, ...] = ()
    veto: VetoRule | None = None


BASELINE_SCORE = 5.0
MIN_LEVEL_SCORE = 0.0
MAX_LEVEL_SCORE = 10.0

SOCIAL_VETO_REASON = "Detected systemic incoherence - VETO applied per PV_PA_001"


AXIOM_CATALOG: dict[AxiomLevel, LevelSpec] = {
    AxiomLevel.EXISTENTIAL: LevelSpec(
        level=AxiomLevel.EXISTENTIAL,
        beliefs=(
            BeliefEntry(
                key="purpose",
                core_belief="A existência é um projeto de construção contra o caos entrópico",
                manifestations=(
                    "Propósito sem sistema é agonia",
                    "Clareza sem execução é covardia",
                    "Sistema sem propósito é mecanicismo morto",
                ),
                keywords=("propósito", "sistema", "construção", "ordem", "caos", "clareza", "execução"),
                per_hit=0.5,
                cap=2.5,
                strength_reason="Demonstrates purpose-driven thinking",
            ),
            BeliefEntry(
                key="time",
                core_belief="Tempo é recurso não-renovável para construir ordem",
                manifestations=(
                    "Fez duas vezes? Automatize",
                    "Clareza antecede execução",
                    "Decisão > Perfeição paralisante",
                ),
                keywords=("tempo", "automação", "eficiência", "decisão", "ação"),
                per_hit=0.5,
                cap=2.5,
                strength_reason="Shows awareness of time as scarce resource",
            ),
        ),
        penalties=(
            PenaltyRule(
                belief="purpose",
                reason="Content suggests purposeless or systemless approach",
                severity=Severity.MEDIUM,
                penalty=2.0,
                any_of=("sem propósito", "sem sistema"),
            ),
        ),
    ),
    AxiomLevel.EPISTEMOLOGICAL: LevelSpec(
        level=AxiomLevel.EPISTEMOLOGICAL,
        beliefs=(
            BeliefEntry(
                key="truth",
                core_belief="Verdade = Coerência Sistêmica Verificada por Dados",
                keywords=("verdade", "dados", "coerência", "sistema", "verificação", "evidência"),
                per_hit=0.6,
                cap=3.0,
                strength_reason="Evidence-based and data-driven approach",
            ),
            BeliefEntry(
                key="learning",
                core_belief="Aprendizado = Padrão + Aplicação + Refinamento iterativo",
                keywords=("aprendizado", "padrão", "iteração", "refinamento", "aplicação"),
                per_hit=0.4,
                cap=2.0,
                strength_reason="Demonstrates iterative learning mindset",
            ),
        ),
        penalties=(
            PenaltyRule(
                belief="truth",
                reason="Relies on opinion without data verification",
                severity=Severity.MEDIUM,
                penalty=1.5,
                all_of=("opinião",),
                none_of=("dados",),
            ),
        ),
    ),
    AxiomLevel.SOCIAL: LevelSpec(
        level=AxiomLevel.SOCIAL,
        beliefs=(
            BeliefEntry(
                key="hierarchy",
                core_belief="Única hierarquia legítima = competência sistêmica + execução",
                manifestations=(
                    "Autoridade sem competência = tirania",
                    "Competência sem execução = inutilidade",
                    "Execução sem sistema = caos eficiente",
                ),
                keywords=("competência", "execução", "hierarquia", "autoridade", "resultado"),
                per_hit=0.5,
                cap=2.5,
                strength_reason="Focus on competence and execution",
            ),
            BeliefEntry(
                key="people",
                core_belief="Coerência sistêmica > habilidades técnicas",
                keywords=("coerência", "alinhamento", "verdade", "integridade", "sistema"),
                per_hit=0.5,
                cap=2.5,
                strength_reason="Demonstrates systemic coherence",
            ),
        ),
        veto=VetoRule(
            belief="people",
            markers=("incoerente", "contraditório"),
            reason=SOCIAL_VETO_REASON,
        ),
    ),
    AxiomLevel.OPERATIONAL: LevelSpec(
        level=AxiomLevel.OPERATIONAL,
        beliefs=(
            BeliefEntry(
                key="automation",
                core_belief="Fez duas vezes? Automatize",
                keywords=("automação", "repetição", "eficiência", "escala"),
                per_hit=0.7,
                cap=2.0,
                strength_reason="Shows automation awareness",
            ),
            BeliefEntry(
                key="clarity",
                core_belief="Clarity without execution is cowardice",
                manifestations=(
                    "Decisão > Análise paralítica",
                    "Ação > Perfeição teórica",
                    "Sistema > Ad-hoc",
                ),
                keywords=("clareza", "execução", "decisão", "ação", "coragem"),
                per_hit=0.6,
                cap=2.0,
                strength_reason="Demonstrates clarity and action orientation",
            ),
            BeliefEntry(
                key="systematization",
                core_belief="Processo documentado > Conhecimento tácito",
                keywords=("documentação", "processo", "sistema", "padrão", "replicabilidade"),
                per_hit=0.5,
                cap=1.0,
                strength_reason="Demonstrates systematic thinking",
            ),
        ),
        penalties=(
            PenaltyRule(
                belief="automation",
                reason="Suggests manual repetitive work (should automate)",
                severity=Severity.LOW,
                penalty=1.0,
                all_of=("manual", "repetitivo"),
            ),
        ),
    ),
}


def count_keywords(text: str, keywords: tuple[str, ...]) -> int:
    """Number of distinct keywords present in already lower-cased text."""
    return sum(1 for keyword in keywords if keyword.lower() in text)
