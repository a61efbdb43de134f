"""
Remediation feedback for gate results.

Plain-text blocks meant for a human operator: what failed, how to fix it,
and where the relevant documentation lives.
"""

from __future__ import annotations

from .schemas import CriterionResult, GateResult, Veto, VetoType

DOCS_BASE = "docs/hybridops"
RULE = "=" * 80

DOCUMENTATION_LINKS: dict[str, dict[str, str]] = {
    "PV_BS_001": {
        "heuristic": f"{DOCS_BASE}/heuristics/PV_BS_001-future-back-casting.md",
        "guide": f"{DOCS_BASE}/guides/strategic-alignment-guide.md",
        "description": "Future System Back-Casting (Strategic Alignment)",
    },
    "PV_PA_001": {
        "heuristic": f"{DOCS_BASE}/heuristics/PV_PA_001-coherence-scan.md",
        "guide": f"{DOCS_BASE}/guides/executor-coherence-guide.md",
        "description": "Systemic Coherence Scan (Executor Truthfulness)",
    },
    "PV_PM_001": {
        "heuristic": f"{DOCS_BASE}/heuristics/PV_PM_001-automation-tipping-point.md",
        "guide": f"{DOCS_BASE}/guides/automation-readiness-guide.md",
        "description": "Automation Tipping Point Assessment",
    },
    "axiom-compliance": {
        "validator": f"{DOCS_BASE}/validators/axiom-validator.md",
        "guide": f"{DOCS_BASE}/guides/axiom-compliance-guide.md",
        "description": "Axiom Compliance Quality Framework",
    },
    "task-anatomy": {
        "validator": f"{DOCS_BASE}/validators/task-anatomy-validator.md",
        "guide": f"{DOCS_BASE}/guides/task-anatomy-guide.md",
        "description": "Task Anatomy Field Structure",
    },
}

CHECKPOINT_DOCS: dict[str, str] = {
    "strategic-alignment": "Strategic Alignment Checkpoint",
    "coherence-scan": "Coherence Scan Checkpoint",
    "automation-readiness": "Automation Readiness Checkpoint",
    "axiom-compliance": "Axiom Compliance Checkpoint",
    "task-anatomy-check": "Task Anatomy Checkpoint",
}

DIMENSION_SUGGESTIONS: dict[str, str] = {
    "Truthfulness": "Improve data accuracy and executor honesty assessment",
    "Coherence": "Align system components and team understanding",
    "Strategic Alignment": "Clarify long-term vision and priorities",
    "Operational Excellence": "Standardize processes and improve efficiency",
    "Innovation Capacity": "Foster creativity and experimentation",
    "Risk Management": "Identify and mitigate potential risks",
    "Resource Optimization": "Improve resource allocation and utilization",
    "Stakeholder Value": "Enhance value delivery to stakeholders",
    "Sustainability": "Ensure long-term viability and maintenance",
    "Adaptability": "Increase system flexibility and resilience",
}

# (title, bullets) per heuristic / validator
CRITERIA_SUGGESTIONS: dict[str, list[tuple[str, list[str]]]] = {
    "PV_BS_001": [
        ("Clarify end-state vision and long-term goals", [
            "What does success look like in 3-5 years?",
            "Document strategic architecture explicitly",
        ]),
        ("Improve strategic priority alignment", [
            "Reassess market signals against the vision",
            "Prioritize strategic value over tactical urgency",
        ]),
        ("Re-evaluate recommendation criteria", [
            "If DEFER: clarify why strategic fit is weak",
            "Document strategic assumptions",
        ]),
    ],
    "PV_PA_001": [
        ("Address executor coherence issues", [
            "Replace executors with low truthfulness (<0.7)",
            "Re-assess system alignment and understanding",
        ]),
        ("Improve primary executor weighted coherence", [
            "Validate the executor's alignment with goals",
            "Consider pairing with a mentor",
        ]),
        ("Document and address concerns", [
            "Record specific coherence gaps",
            "Request a manual override with justification if needed",
        ]),
    ],
    "PV_PM_001": [
        ("Increase task frequency to reach the tipping point", [
            "Wait for sufficient volume before automating",
            "Consider batching or scheduling changes",
        ]),
        ("Add safety guardrails (REQUIRED)", [
            "Define error handling procedures",
            "Establish rollback mechanisms",
        ]),
        ("Improve process standardization", [
            "Reduce variability in execution",
            "Document standard operating procedures",
        ]),
    ],
    "task-anatomy": [
        ("Review Task Anatomy requirements", [
            "Every required field must be filled before task creation",
        ]),
        ("Validate automation decisions", [
            "Ensure automation flags align with the automation readiness results",
            "Verify guardrails for automated tasks",
        ]),
    ],
}

GENERIC_SUGGESTIONS: list[tuple[str, list[str]]] = [
    ("Review failed criteria listed above", [
        "Address each specific failure point",
        "Update phase outputs to meet requirements",
    ]),
    ("Consult validation documentation", [
        "Review the checkpoint criteria definition",
    ]),
    ("Request team review if needed", [
        "Document decisions and trade-offs",
    ]),
]

# checkpoint name -> key into CRITERIA_SUGGESTIONS
CHECKPOINT_TARGETS: dict[str, str] = {
    "strategic-alignment": "PV_BS_001",
    "coherence-scan": "PV_PA_001",
    "automation-readiness": "PV_PM_001",
    "axiom-compliance": "axiom-compliance",
    "task-anatomy-check": "task-anatomy",
}

AXIOM_REVIEW_SCORE = 7.0


def format_checkpoint_name(checkpoint: str) -> str:
    """``strategic-alignment`` -> ``Strategic Alignment``."""
    return " ".join(part.capitalize() for part in checkpoint.replace("_", "-").split("-") if part)


def dimension_suggestion(dimension: str) -> str:
    return DIMENSION_SUGGESTIONS.get(dimension, "Review dimension definition and improvement strategies")


def _fmt(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.2f}"


def _numbered(blocks: list[tuple[str, list[str]]]) -> list[str]:
    lines: list[str] = []
    for idx, (title, bullets) in enumerate(blocks, start=1):
        if idx > 1:
            lines.append("")
        lines.append(f"   {idx}. {title}")
        lines.extend(f"      - {bullet}" for bullet in bullets)
    return lines


def veto_fix_suggestions(vetoes: list[Veto]) -> list[str]:
    blocks: list[tuple[str, list[str]]] = []
    for veto in vetoes:
        if veto.type == VetoType.TRUTHFULNESS:
            blocks.append((f'Replace executor "{veto.executor}" with higher truthfulness', [
                f"Current: {_fmt(veto.value)}, Required: >={veto.threshold}",
                "Action: Re-evaluate executor selection or provide additional training",
            ]))
        elif veto.type == VetoType.GUARDRAILS:
            blocks.append(("Define safety guardrails before automation", [
                "Add error handling procedures",
                "Create validation checkpoints",
                "Establish rollback mechanisms",
                "Document edge cases and failure modes",
            ]))
        elif veto.type == VetoType.AXIOM_MINIMUM:
            blocks.append((f'Improve dimension "{veto.dimension}"', [
                f"Current score: {_fmt(veto.value)}/10.0",
                f"Required minimum: {veto.threshold}/10.0",
                f"Action: {dimension_suggestion(veto.dimension or '')}",
            ]))
        elif veto.type == VetoType.MISSING_FIELDS:
            blocks.append((f'Complete Task Anatomy for "{veto.task}"', [
                f"Missing fields: {', '.join(veto.missing or [])}",
                "Review Task Anatomy documentation for field definitions",
            ]))
        else:
            blocks.append((f"Address {veto.type.value}: {veto.message}", [
                "Review veto condition details above",
                "Consult validation documentation",
            ]))
    return _numbered(blocks)


def _suggestion_target(result: GateResult) -> str | None:
    return CHECKPOINT_TARGETS.get(result.gate) or result.heuristic_id or result.validator


def criteria_fix_suggestions(result: GateResult) -> list[str]:
    target = _suggestion_target(result)

    if target == "axiom-compliance":
        overall = [f"Current: {_fmt(result.score)}/10.0"] if result.score is not None else []
        overall.append(f"Focus on dimensions scoring below {AXIOM_REVIEW_SCORE}")
        low = sorted(
            ((dim, score) for dim, score in (result.dimensions or {}).items() if score < AXIOM_REVIEW_SCORE),
            key=lambda item: item[1],
        )
        low_lines = [f"{dim}: {score:.2f}/10.0 - {dimension_suggestion(dim)}" for dim, score in low[:3]]
        floor = ["Bring all dimensions to an acceptable baseline"]
        if result.min_score is not None:
            floor.insert(0, f"Lowest score: {result.min_score:.2f}/10.0")
        return _numbered([
            ("Improve overall axiom score", overall),
            ("Address low-scoring dimensions", low_lines or ["No dimension below the review score"]),
            ("Ensure no dimension falls below minimum", floor),
        ])

    blocks = list(CRITERIA_SUGGESTIONS.get(target or "", GENERIC_SUGGESTIONS))
    if target == "task-anatomy":
        missing = [f"{task}: missing {', '.join(fields)}" for task, fields in (result.missing_fields or {}).items()]
        blocks.insert(0, ("Complete missing Task Anatomy fields", missing or ["Check every task"]))
    return _numbered(blocks)


def documentation_links(result: GateResult) -> list[str]:
    lines: list[str] = []
    for key in (result.heuristic_id, result.validator):
        docs = DOCUMENTATION_LINKS.get(key or "")
        if docs is None:
            continue
        lines.append(f"   {docs['description']}")
        for kind in ("heuristic", "validator", "guide"):
            if kind in docs:
                lines.append(f"      - {kind.capitalize()}: {docs[kind]}")
    if result.gate in CHECKPOINT_DOCS:
        lines.append(f"   {CHECKPOINT_DOCS[result.gate]}")
        lines.append(f"      - Checkpoint: {DOCS_BASE}/checkpoints/{result.gate}.md")
    if not lines:
        lines.append(f"   General validation docs: {DOCS_BASE}/README.md")
    return lines


def success_feedback(result: GateResult) -> str:
    lines = [f"{format_checkpoint_name(result.gate)} validation passed"]
    if result.score is not None:
        lines.append(f"   Score: {result.score:.2f}")
    lines.append("   All criteria met. Proceeding to next phase.")
    return "\n".join(lines)


def veto_feedback(result: GateResult) -> str:
    lines = [
        RULE,
        f"{format_checkpoint_name(result.gate).upper()} - VETO TRIGGERED",
        RULE,
        "",
        "CRITICAL: Non-negotiable validation failure detected.",
        "These conditions MUST be fixed before proceeding.",
        "",
        "VETO CONDITIONS:",
    ]
    for idx, veto in enumerate(result.vetoes, start=1):
        lines.append(f"   {idx}. {veto.message}")
        if veto.value is not None and veto.threshold is not None:
            lines.append(f"      - Current value: {veto.value}")
            lines.append(f"      - Required threshold: {veto.threshold}")
        lines.append(f"      - Type: {veto.type.value}")
    lines += ["", "REQUIRED FIXES:", *veto_fix_suggestions(result.vetoes)]
    lines += ["", "DOCUMENTATION:", *documentation_links(result)]
    lines += ["", RULE, "Choose: [FIX VETOES] [ABORT WORKFLOW]", RULE]
    return "\n".join(lines)


def criteria_failure_feedback(result: GateResult, hints: list[str] | None = None) -> str:
    failed: list[CriterionResult] = [cr for cr in result.criteria_results if not cr.passed]
    lines = [
        RULE,
        f"{format_checkpoint_name(result.gate)} validation failed",
        RULE,
        "",
        "FAILED CRITERIA:",
    ]
    for idx, cr in enumerate(failed, start=1):
        lines.append(f"   {idx}. {cr.criterion}")
        lines.append(f"      - Expected: {cr.expected}")
        lines.append(f"      - Actual: {cr.actual}")
        if cr.message and cr.message != cr.criterion:
            lines.append(f"      - Details: {cr.message}")
    if result.recommendation is not None:
        lines += ["", f"RECOMMENDATION: {result.recommendation.value}"]
    if hints:
        lines += ["", "CHECKPOINT NOTES:", *(f"   - {hint}" for hint in hints)]
    lines += ["", "SUGGESTED FIXES:", *criteria_fix_suggestions(result)]
    lines += ["", "DOCUMENTATION:", *documentation_links(result)]
    lines += ["", RULE, "Choose: [FIX] [SKIP VALIDATION] [ABORT WORKFLOW]", RULE]
    return "\n".join(lines)


def generate_feedback(result: GateResult, hints: list[str] | None = None) -> str:
    """Feedback text matching the result's outcome."""
    if result.passed:
        return success_feedback(result)
    if result.veto:
        return veto_feedback(result)
    if result.error:
        return f"{format_checkpoint_name(result.gate)} could not be evaluated: {result.message}"
    return criteria_failure_feedback(result, hints)
