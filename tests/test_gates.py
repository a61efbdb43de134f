"""
Tests for checkpoint criteria, the validation gate and its feedback.
"""

import pytest

from hybridops.errors import CriterionSyntaxError
from hybridops.gates import (
    Criterion,
    CriterionKind,
    GateRecommendation,
    GateSeverity,
    Operator,
    PhaseSpec,
    ValidationGate,
    ValidationSpec,
    VetoType,
    flatten,
    generate_feedback,
    parse_criteria,
    parse_criterion,
    to_snake,
)
from hybridops.gates.feedback import format_checkpoint_name

FULL_TASK = {
    "Name": "Publish report",
    "Description": "Weekly metrics report",
    "Status": "todo",
    "Assignee": "ops-agent",
    "Due Date": "2024-02-01",
    "Dependencies": ["collect data"],
    "Automation Trigger": "weekly",
    "Validation Criteria": "report delivered",
}


@pytest.fixture
def gate(compiler, telemetry) -> ValidationGate:
    return ValidationGate(compiler, telemetry=telemetry)


# =============================================================================
# Criteria grammar
# =============================================================================


class TestParseCriterion:
    """Test the criterion text grammar."""

    def test_comparison(self):
        """Test subject comparator number."""
        c = parse_criterion("End-state vision clarity ≥0.8")
        assert c.field == "end_state_vision_clarity"
        assert c.operator == Operator.GE
        assert c.threshold == 0.8
        assert c.kind == CriterionKind.COMPARISON
        assert c.label == "End-state vision clarity ≥0.8"

    def test_ascii_comparators(self):
        """Test ASCII comparators with and without spaces."""
        assert parse_criterion("score>=7").operator == Operator.GE
        assert parse_criterion("score <= 7").operator == Operator.LE
        assert parse_criterion("score < 7").operator == Operator.LT
        assert parse_criterion("score > 7").operator == Operator.GT
        assert parse_criterion("priority = 1").operator == Operator.EQ
        assert parse_criterion("priority == 1").operator == Operator.EQ

    def test_presence(self):
        """Test subject followed by 'present', with an annotation."""
        c = parse_criterion("Guardrails present (VETO)")
        assert c.field == "guardrails"
        assert c.operator == Operator.PRESENT
        assert c.kind == CriterionKind.PRESENCE
        assert c.threshold is None
        assert c.expected == "present"

    def test_floor(self):
        """Test 'no' subject 'below' number."""
        c = parse_criterion("No dimension below 6.0")
        assert c.kind == CriterionKind.FLOOR
        assert c.field == "dimension"
        assert c.operator == Operator.GE
        assert c.threshold == 6.0

    def test_missing_number(self):
        """Test a comparator without a number."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("clarity ≥")
        text, pos, message = exc_info.value.problems[0]
        assert text == "clarity ≥"
        assert pos == 9
        assert message == "expected a number after '≥'"

    def test_missing_subject(self):
        """Test a criterion starting with a comparator."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("≥ 0.8")
        assert exc_info.value.problems[0][1:] == (0, "expected a subject")

    def test_missing_comparator(self):
        """Test a subject with nothing to compare."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("clarity high")
        pos, message = exc_info.value.problems[0][1:]
        assert pos == len("clarity high")
        assert message.startswith("expected a comparator")

    def test_trailing_text(self):
        """Test text after the number is rejected."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("clarity ≥ 0.8 extra")
        assert exc_info.value.problems[0][1:] == (14, "unexpected text after number")

    def test_unknown_comparator_sequence(self):
        """Test '=>' is read as '=' followed by a stray '>'."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("clarity => 1")
        assert exc_info.value.problems[0][1:] == (9, "expected a number after '='")

    def test_annotation_must_be_last(self):
        """Test annotations are only allowed at the end."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("(note) clarity ≥ 1")
        assert exc_info.value.problems[0][1:] == (0, "annotation must come last")

    def test_unterminated_annotation(self):
        """Test a missing closing parenthesis."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("clarity ≥ 0.8 (unterminated")
        assert exc_info.value.problems[0][1:] == (14, "unterminated annotation, expected ')'")

    def test_floor_without_below(self):
        """Test a floor criterion missing 'below'."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criterion("no dimension 6")
        assert exc_info.value.problems[0][2] == "expected 'below'"


class TestParseCriteria:
    """Test parsing criteria lists."""

    def test_mixed_items(self):
        """Test strings, mappings and Criterion objects are accepted."""
        existing = Criterion(field="score", operator=Operator.GT, threshold=1)
        parsed = parse_criteria([
            "Score ≥ 7",
            {"field": "total_tasks", "operator": ">=", "threshold": 1},
            existing,
        ])
        assert [c.field for c in parsed] == ["score", "total_tasks", "score"]
        assert parsed[1].label == "total_tasks >= 1"
        assert parsed[2] is existing

    def test_all_problems_reported(self):
        """Test every invalid entry is reported in one error."""
        with pytest.raises(CriterionSyntaxError) as exc_info:
            parse_criteria(["bad", "ok ≥ 1", "≥ 2", 5])
        problems = exc_info.value.problems
        assert [p[0] for p in problems] == ["bad", "≥ 2", "5"]
        assert "3 invalid criteria" in str(exc_info.value)

    def test_mapping_requires_threshold(self):
        """Test a comparison mapping without a threshold is rejected."""
        with pytest.raises(CriterionSyntaxError):
            parse_criteria([{"field": "score", "operator": ">"}])

    def test_none(self):
        """Test no criteria parse to an empty list."""
        assert parse_criteria(None) == []


class TestCriterionCompare:
    """Test applying operators."""

    def test_numbers(self):
        """Test the comparison operators."""
        c = parse_criterion("score ≥ 0.8")
        assert c.compare(0.8) is True
        assert c.compare(0.79) is False
        assert parse_criterion("score == 0.3").compare(0.1 + 0.2) is True

    def test_non_numbers_fail(self):
        """Test booleans and strings never satisfy a comparison."""
        c = parse_criterion("score ≥ 0")
        assert c.compare(True) is False
        assert c.compare("5") is False
        assert c.compare(None) is False

    def test_presence(self):
        """Test presence is truthiness."""
        c = parse_criterion("Guardrails present")
        assert c.compare(["rollback"]) is True
        assert c.compare([]) is False


class TestHelpers:
    """Test name normalisation helpers."""

    def test_to_snake(self):
        """Test camelCase and spaced names."""
        assert to_snake("endStateVision") == "end_state_vision"
        assert to_snake("Overall score") == "overall_score"
        assert to_snake("  Due-Date ") == "due_date"

    def test_flatten(self):
        """Test nested keys are joined."""
        flat = flatten({"endStateVision": {"clarity": 0.9}, "name": "x"})
        assert flat["end_state_vision_clarity"] == 0.9
        assert flat["name"] == "x"

    def test_format_checkpoint_name(self):
        """Test checkpoint ids become titles."""
        assert format_checkpoint_name("task-anatomy-check") == "Task Anatomy Check"
        assert format_checkpoint_name("coherence_scan") == "Coherence Scan"


# =============================================================================
# Gate
# =============================================================================


class TestGateSkip:
    """Test phases without validation."""

    def test_none(self, gate):
        """Test a None phase passes as skipped."""
        result = gate.execute(None)
        assert result.passed is True
        assert result.skipped is True
        assert result.message == "No validation configured for this phase"

    def test_phase_with_none_validation(self, gate):
        """Test validation 'none' skips the gate."""
        result = gate.execute({"name": "discovery", "validation": "none"})
        assert result.skipped is True
        assert result.gate == "discovery"

    def test_phase_spec_without_validation(self, gate):
        """Test a PhaseSpec with no validation skips."""
        assert gate.execute(PhaseSpec(name="build")).skipped is True


class TestHeuristicCheckpoints:
    """Test checkpoints backed by heuristics."""

    def test_passing_criteria(self, gate):
        """Test criteria resolved from context and score."""
        phase = {
            "checkpoint": "strategic-alignment",
            "heuristic": "PV_BS_001",
            "criteria": ["End-state vision clarity ≥0.8", "Score ≥ 0.8"],
        }
        context = {"endStateVision": {"clarity": 0.9}, "marketSignals": {"alignment": 0.3}}
        result = gate.execute(phase, context)

        assert result.passed is True
        assert result.heuristic_id == "PV_BS_001"
        assert result.score == pytest.approx(0.84)
        assert [cr.passed for cr in result.criteria_results] == [True, True]
        assert result.message.startswith("Strategic Alignment validation passed")
        assert "Score: 0.84" in result.message

    def test_criteria_from_results(self, gate):
        """Test criteria can read flattened heuristic output."""
        spec = ValidationSpec(
            checkpoint="strategic-alignment",
            heuristic="PV_BS_001",
            criteria=["Breakdown end state contribution ≥ 0.8"],
        )
        result = gate.execute(spec, {"endStateClarity": 0.9})
        assert result.passed is True
        assert result.criteria_results[0].actual == pytest.approx(0.81)

    def test_failing_criteria(self, gate):
        """Test a failing criterion yields review feedback."""
        phase = {
            "checkpoint": "strategic-alignment",
            "heuristic": "PV_BS_001",
            "criteria": ["Score ≥ 0.9"],
            "feedback_on_failure": ["Revisit the vision statement"],
        }
        result = gate.execute(phase, {"endStateClarity": 0.9, "marketAlignment": 0.3})

        assert result.passed is False
        assert result.veto is False
        assert result.severity == GateSeverity.MAJOR
        assert result.recommendation == GateRecommendation.REVIEW_AND_FIX
        assert "FAILED CRITERIA:" in result.feedback
        assert "Score ≥ 0.9" in result.feedback
        assert "RECOMMENDATION: REVIEW_AND_FIX" in result.feedback
        assert "   - Revisit the vision statement" in result.feedback
        assert "Clarify end-state vision and long-term goals" in result.feedback
        assert "Choose: [FIX] [SKIP VALIDATION] [ABORT WORKFLOW]" in result.feedback

    def test_unresolved_field_fails(self, gate):
        """Test a criterion with no value fails."""
        phase = {"checkpoint": "c", "heuristic": "PV_BS_001", "criteria": ["Velocity ≥ 1"]}
        result = gate.execute(phase, {"endStateClarity": 0.9})
        cr = result.criteria_results[0]
        assert cr.passed is False
        assert cr.message == "velocity: no value found in context or results"

    def test_truthfulness_vetoes(self, gate, telemetry):
        """Test each low-truthfulness executor vetoes the gate."""
        phase = {"checkpoint": "coherence-scan", "heuristic": "PV_PA_001", "criteria": ["Score ≥ 0.1"]}
        context = {
            "truthfulness": 0.9,
            "systemAdherence": 0.9,
            "skill": 0.9,
            "executors": [
                {"name": "Ana", "truthfulness": 0.5},
                {"truthfulness": 0.6},
                {"name": "Bo", "truthfulness": 0.95},
            ],
        }
        result = gate.execute(phase, context)

        assert result.passed is False
        assert result.veto is True
        assert result.severity == GateSeverity.CRITICAL
        assert result.recommendation == GateRecommendation.FIX_REQUIRED
        assert [v.executor for v in result.vetoes] == ["Ana", "Executor 2"]
        assert result.vetoes[0].message == 'Executor "Ana" has truthfulness 0.5 < 0.7 (VETO)'
        assert result.criteria_results == []
        assert "COHERENCE SCAN - VETO TRIGGERED" in result.feedback
        assert "Choose: [FIX VETOES] [ABORT WORKFLOW]" in result.feedback
        assert telemetry.fallbacks[-1]["reason"] == "gate_veto_triggered"

    def test_guardrails_veto(self, gate):
        """Test automation without guardrails vetoes."""
        phase = {"checkpoint": "automation-readiness", "heuristic": "PV_PM_001"}
        result = gate.execute(phase, {"frequency": 10, "standardizable": 0.9})
        assert result.veto is True
        assert result.vetoes[0].type == VetoType.GUARDRAILS
        assert result.vetoes[0].message == "Missing safety guardrails (VETO)"

    def test_guardrails_present(self, gate):
        """Test guardrails under any accepted name avoid the veto."""
        phase = {"checkpoint": "automation-readiness", "heuristic": "PV_PM_001"}
        for context in (
            {"frequency": 10, "standardizable": 0.9, "guardrails": ["rollback"]},
            {"frequency": 10, "standardizable": 0.9, "hasGuardrails": True},
        ):
            result = gate.execute(phase, context)
            assert result.veto is False
            assert result.passed is True

    def test_uses_loaded_mind(self, compiler, mind, telemetry):
        """Test a loaded mind's functions are preferred."""
        mind.load()
        gate = ValidationGate(compiler, mind=mind, telemetry=telemetry)
        result = gate.execute(
            {"checkpoint": "s", "heuristic": "PV_BS_001", "criteria": ["Score ≥ 0.8"]},
            {"endStateClarity": 0.9, "marketAlignment": 0.3},
        )
        assert result.passed is True
        assert gate.enable_veto is True


class TestAxiomCompliance:
    """Test the axiom-compliance validator."""

    PHASE = {
        "checkpoint": "axiom-compliance",
        "validator": "axioma-validator",
        "criteria": ["Overall score ≥ 7.0", "No dimension below 6.0"],
    }

    def test_scores_pass(self, gate):
        """Test provided scores with defaults for missing dimensions."""
        result = gate.execute(self.PHASE, {"axiom_scores": {"Truthfulness": 9, "Coherence": 8}})

        assert result.passed is True
        assert result.validator == "axiom-compliance"
        assert len(result.dimensions) == 10
        assert result.dimensions["Risk Management"] == 7.0
        assert result.score == pytest.approx(7.3)
        assert result.min_score == 7.0

    def test_dimension_below_floor_vetoes(self, gate):
        """Test a dimension below the floor is a veto."""
        result = gate.execute(self.PHASE, {"axiom_scores": {"Risk Management": 5.5}})

        assert result.veto is True
        veto = result.vetoes[0]
        assert veto.type == VetoType.AXIOM_MINIMUM
        assert veto.dimension == "Risk Management"
        assert veto.threshold == 6.0
        assert 'Improve dimension "Risk Management"' in result.feedback
        assert "Identify and mitigate potential risks" in result.feedback

    def test_explicit_zero_is_a_score(self, gate):
        """Test a score of 0 is not replaced by the default."""
        result = gate.execute(self.PHASE, {"axioma": {"Coherence": 0}})
        assert result.dimensions["Coherence"] == 0.0
        assert result.vetoes[0].dimension == "Coherence"

    def test_floor_from_criteria(self, gate):
        """Test the floor criterion sets the veto threshold."""
        phase = dict(self.PHASE, criteria=["No dimension below 5.0"])
        result = gate.execute(phase, {"axiom_scores": {"Risk Management": 5.5}})
        assert result.passed is True
        assert result.criteria_results[0].actual == 5.5

    def test_explicit_min_dimension_score(self, gate):
        """Test min_dimension_score overrides the floor criterion."""
        phase = dict(self.PHASE, min_dimension_score=8.0)
        result = gate.execute(phase, {"axiom_scores": {}})
        assert result.veto is True
        assert len(result.vetoes) == 10

    def test_custom_dimensions(self, gate):
        """Test a checkpoint can name its own dimensions."""
        phase = dict(self.PHASE, dimensions=["Clarity", "Focus"], criteria=["Clarity ≥ 8"])
        result = gate.execute(phase, {"axiom_scores": {"Clarity": 9, "Focus": 7}})
        assert set(result.dimensions) == {"Clarity", "Focus"}
        assert result.passed is True
        assert result.criteria_results[0].actual == 9

    def test_non_numeric_score_is_an_error(self, gate):
        """Test a non-numeric dimension score is reported as an error."""
        result = gate.execute(self.PHASE, {"axiom_scores": {"Coherence": "high"}})
        assert result.error is True
        assert result.recommendation == GateRecommendation.CHECK_CONFIGURATION
        assert result.message == "Score for Coherence must be a number"

    def test_content_is_validated(self, gate):
        """Test raw content is scored through the axiom validator."""
        result = gate.execute(self.PHASE, {"content": "o plano é incoerente"})
        assert set(result.dimensions) == {"existential", "epistemological", "social", "operational"}
        types = {v.type for v in result.vetoes}
        assert VetoType.AXIOM_VETO in types
        assert VetoType.AXIOM_MINIMUM in types

    def test_content_veto_can_be_disabled(self, compiler, telemetry):
        """Test enable_veto=False suppresses the content veto only."""
        gate = ValidationGate(compiler, telemetry=telemetry, enable_veto=False)
        result = gate.execute(self.PHASE, {"content": "o plano é incoerente"})
        types = {v.type for v in result.vetoes}
        assert VetoType.AXIOM_VETO not in types
        assert VetoType.AXIOM_MINIMUM in types


class TestTaskAnatomy:
    """Test the task-anatomy validator."""

    PHASE = {"checkpoint": "task-anatomy-check", "validator": "task-anatomy"}

    def test_complete_tasks_pass(self, gate):
        """Test tasks with every field pass."""
        result = gate.execute(self.PHASE, {"tasks": [FULL_TASK]})
        assert result.passed is True
        assert result.score == 10.0
        assert result.missing_fields == {}

    def test_missing_fields_veto(self, gate):
        """Test each incomplete task vetoes with its missing fields."""
        partial = {"name": "Draft plan", "status": "todo"}
        result = gate.execute(self.PHASE, {"tasks": [FULL_TASK, partial, {}]})

        assert result.veto is True
        assert result.score == pytest.approx(10 / 3)
        assert [v.task for v in result.vetoes] == ["Draft plan", "Task 3"]
        assert "Status" not in result.missing_fields["Draft plan"]
        assert "Description" in result.missing_fields["Draft plan"]
        assert len(result.missing_fields["Task 3"]) == 8
        assert 'Complete Task Anatomy for "Draft plan"' in result.feedback

    def test_custom_required_fields(self, gate):
        """Test required_fields and metric criteria."""
        phase = dict(
            self.PHASE,
            required_fields=["Name", "Status"],
            criteria=["Task anatomy fields present", "Total tasks ≥ 1"],
        )
        result = gate.execute(phase, {"tasks": [{"name": "A", "status": "todo"}]})
        assert result.passed is True

    def test_no_tasks(self, gate):
        """Test an empty task list scores zero and fails a count criterion."""
        phase = dict(self.PHASE, criteria=["Total tasks ≥ 1"])
        result = gate.execute(phase, {"tasks": []})
        assert result.veto is False
        assert result.passed is False
        assert result.score == 0.0

    def test_tasks_must_be_a_list(self, gate):
        """Test a malformed task list is an error."""
        result = gate.execute(self.PHASE, {"tasks": "all of them"})
        assert result.error is True


class TestGateErrors:
    """Test configuration mistakes come back as error results."""

    def test_unknown_validator(self, gate):
        """Test an unknown validator name."""
        result = gate.execute({"checkpoint": "x", "validator": "spellcheck"}, {})
        assert result.error is True
        assert result.passed is False
        assert result.severity == GateSeverity.CRITICAL
        assert result.recommendation == GateRecommendation.CHECK_CONFIGURATION
        assert result.message == "Unknown validator: spellcheck"

    def test_unknown_heuristic(self, gate):
        """Test an unknown heuristic id."""
        result = gate.execute({"checkpoint": "x", "heuristic": "PV_XX_999"}, {})
        assert result.error is True
        assert "PV_XX_999" in result.message

    def test_invalid_criteria(self, gate):
        """Test malformed criteria stop the gate before it runs."""
        result = gate.execute(
            {"checkpoint": "x", "heuristic": "PV_BS_001", "criteria": ["Score ≥", "≥ 1"]},
            {"endStateClarity": 0.9},
        )
        assert result.error is True
        assert "2 invalid criteria" in result.message

    def test_both_targets(self, gate):
        """Test a checkpoint naming a heuristic and a validator."""
        result = gate.execute({"checkpoint": "x", "heuristic": "PV_BS_001", "validator": "task-anatomy"})
        assert result.error is True
        assert result.message.startswith("Invalid checkpoint definition")

    def test_execution_failure(self, gate):
        """Test a heuristic raising on bad input."""
        result = gate.execute({"checkpoint": "x", "heuristic": "PV_BS_001"}, {"endStateClarity": "high"})
        assert result.error is True
        assert result.message.startswith("Heuristic PV_BS_001 execution failed")

    def test_executors_must_be_a_list(self, gate):
        """Test a scalar executors value is an error result."""
        context = {"truthfulness": 0.9, "systemAdherence": 0.9, "skill": 0.9, "executors": 5}
        result = gate.execute({"checkpoint": "coherence-scan", "heuristic": "PV_PA_001"}, context)
        assert result.error is True
        assert result.recommendation == GateRecommendation.CHECK_CONFIGURATION
        assert result.message == "executors must be a list"

    def test_context_must_be_mapping(self, gate):
        """Test a non-mapping context."""
        result = gate.execute({"checkpoint": "x", "heuristic": "PV_BS_001"}, ["not", "a", "mapping"])
        assert result.error is True
        assert result.message == "Gate context must be a mapping"

    def test_error_feedback(self, gate):
        """Test feedback for an error result."""
        result = gate.execute({"checkpoint": "x", "validator": "spellcheck"}, {})
        assert generate_feedback(result) == "X could not be evaluated: Unknown validator: spellcheck"
