"""
plan_mutation.py
----------------
Pure update functions over one lesson-plan unit inside a bimester plan.

Every function returns a new BimesterPlan and leaves its input usable:
- the `plans` list is copied, the targeted unit is replaced by an updated copy,
- sibling units are carried over by reference.

`apply_unit_update` is the single shallow-merge primitive. It never merges
sequences. Append/replace policy per artifact lives in the attach_* helpers
below so the distinction stays visible at each call site.
"""

from typing import Any, List, Mapping, Optional, Union

from escola360.models.planning_model import (
    ARTIFACT_FIELDS,
    BimesterPlan,
    EducationalContent,
    GeneratedAssessment,
    LessonPlanUnit,
    LessonPlanUnitPatch,
    MethodologyStrategy,
    Question,
    Rubric,
    SlideDeck,
)

UnitPatch = Union[LessonPlanUnitPatch, Mapping[str, Any]]

# Carried over from the current unit when a regeneration replaces it
REGENERATION_PRESERVED_FIELDS = ARTIFACT_FIELDS


class PlanIndexError(IndexError):
    """A unit index outside the plan. Indices come from rendered positions, so this is a caller bug."""


class AssessmentEditError(ValueError):
    """A manual assessment edit that cannot be applied to the unit as it stands."""


def check_index(plan: BimesterPlan, index: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise PlanIndexError(f"Unit index must be an int, got {index!r}")
    if not 0 <= index < len(plan.plans):
        raise PlanIndexError(f"Unit index {index} out of range for a plan with {len(plan.plans)} units")


def _as_patch(patch: UnitPatch) -> LessonPlanUnitPatch:
    if isinstance(patch, LessonPlanUnitPatch):
        return patch
    # Raises ValidationError (a ValueError) for unknown fields or malformed values
    return LessonPlanUnitPatch.model_validate(dict(patch))


def apply_unit_update(plan: BimesterPlan, index: int, patch: UnitPatch) -> BimesterPlan:
    """
    Shallow-merge `patch` into plan.plans[index].

    Fields present in the patch overwrite the unit's fields, absent ones are
    left untouched. Raises PlanIndexError when index is out of range.
    """
    check_index(plan, index)
    updates = _as_patch(patch).updates()

    plans = list(plan.plans)
    plans[index] = plans[index].model_copy(update=updates)
    return plan.model_copy(update={"plans": plans})


# -------------------------
# Per-artifact policies
# -------------------------
def attach_educational_text(plan: BimesterPlan, index: int, text: EducationalContent) -> BimesterPlan:
    return apply_unit_update(plan, index, {"educational_text": text})


def append_question_bank(plan: BimesterPlan, index: int, batch: List[Question]) -> BimesterPlan:
    """Append a generated batch after the unit's existing questions (absent bank counts as empty)."""
    check_index(plan, index)
    current = plan.plans[index].question_bank or []
    return apply_unit_update(plan, index, {"question_bank": [*current, *batch]})


def attach_slide_deck(plan: BimesterPlan, index: int, deck: SlideDeck) -> BimesterPlan:
    return apply_unit_update(plan, index, {"slide_deck": deck})


def attach_generated_assessment(plan: BimesterPlan, index: int, assessment: GeneratedAssessment) -> BimesterPlan:
    return apply_unit_update(plan, index, {"generated_assessment": assessment})


def attach_rubric(plan: BimesterPlan, index: int, rubric: Rubric) -> BimesterPlan:
    return apply_unit_update(plan, index, {"rubric": rubric})


def select_strategy(plan: BimesterPlan, index: int, strategy: MethodologyStrategy) -> BimesterPlan:
    return apply_unit_update(plan, index, {"selected_strategy": strategy})


def apply_regeneration(
    plan: BimesterPlan,
    index: int,
    regenerated: LessonPlanUnit,
    strategy: MethodologyStrategy,
) -> BimesterPlan:
    """
    Replace a unit with its regenerated version.

    The regenerated unit only contributes core plan fields. Every attached
    artifact (text, question bank, slides, assessment, rubric) is copied over
    from the current unit, whatever the response contained.
    """
    check_index(plan, index)
    current = plan.plans[index]

    updates = {
        name: getattr(regenerated, name)
        for name in regenerated.model_fields_set
        if name not in REGENERATION_PRESERVED_FIELDS
    }
    for name in REGENERATION_PRESERVED_FIELDS:
        updates[name] = getattr(current, name)
    updates["selected_strategy"] = strategy
    return apply_unit_update(plan, index, updates)


def edit_assessment_question(
    plan: BimesterPlan,
    index: int,
    question_index: int,
    *,
    statement: Optional[str] = None,
    option_index: Optional[int] = None,
    option_value: Optional[str] = None,
) -> BimesterPlan:
    """
    Manual correction of one question of the unit's generated assessment.

    Raises AssessmentEditError when the unit has no assessment yet or the edit
    names nothing to change.
    """
    check_index(plan, index)
    assessment = plan.plans[index].generated_assessment
    if assessment is None:
        raise AssessmentEditError(f"Unit {index} has no generated assessment to edit")
    if statement is None and option_index is None:
        raise AssessmentEditError("Nothing to edit: give a statement or an option index and value")
    if (option_index is None) != (option_value is None):
        raise AssessmentEditError("Option edits need both option_index and option_value")
    if not 0 <= question_index < len(assessment.questions):
        raise IndexError(f"Question index {question_index} out of range")

    question = assessment.questions[question_index]
    changes = {}
    if statement is not None:
        changes["statement"] = statement
    if option_index is not None:
        options = list(question.options or [])
        if not 0 <= option_index < len(options):
            raise IndexError(f"Option index {option_index} out of range")
        options[option_index] = option_value
        changes["options"] = options

    questions = list(assessment.questions)
    questions[question_index] = question.model_copy(update=changes)
    return apply_unit_update(
        plan, index, {"generated_assessment": assessment.model_copy(update={"questions": questions})}
    )
