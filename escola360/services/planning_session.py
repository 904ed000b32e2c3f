"""
planning_session.py
-------------------
Working plan of one user session and the generation actions run against it.

Features:
- Holds the current BimesterPlan and its metadata (grade, subject, bimester, curriculum).
- Tracks in-flight work per (action, unit index); a second request for the same
  key is refused with UnitBusyError, other units proceed independently.
- Regeneration is two-phase: the chosen strategy is written before the remote
  call, the regenerated unit is merged after it. A failed call leaves the
  strategy in place.
- Results are merged into the plan current at resolution time, so concurrent
  work on other units is never lost. A result whose plan was replaced in the
  meantime (load or a new generate_plan) is dropped with a warning.
- Observers registered with on_update receive every new plan value.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from escola360.models.library_model import LibraryItem, LibraryItemType
from escola360.models.planning_model import (
    AssessmentConfig,
    BimesterPlan,
    MethodologyStrategy,
    PlanningMetadata,
    QuestionType,
)
from escola360.services import plan_mutation
from escola360.services.ai_planning_generator import ContentGenerator, clamp_quantities
from escola360.services.library_store import LibraryStore
from escola360.utils.ai_client import AIClientError

# -------------------------
# Logging Configuration
# -------------------------
logger = logging.getLogger("planning_session")
logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class GenerationAction(str, Enum):
    PLAN = "plan"
    REGENERATE = "regen"
    TEXT = "text"
    QUESTIONS = "questions"
    SLIDES = "SLIDE"
    ASSESSMENT = "ASSESSMENT"
    RUBRIC = "RUBRIC"


# User-facing messages, shown as a dismissible notice inviting a retry
FAILURE_MESSAGES: Dict[GenerationAction, str] = {
    GenerationAction.PLAN: "Ocorreu um erro ao gerar o planejamento. O conteúdo pode ser muito extenso, tente novamente.",
    GenerationAction.REGENERATE: "Erro ao regenerar plano com nova metodologia.",
    GenerationAction.TEXT: "Erro ao gerar texto.",
    GenerationAction.QUESTIONS: "Erro ao gerar questões.",
    GenerationAction.SLIDES: "Erro ao gerar SLIDE. Tente novamente.",
    GenerationAction.ASSESSMENT: "Erro ao gerar avaliação.",
    GenerationAction.RUBRIC: "Erro ao gerar rubrica.",
}


# -------------------------
# Exceptions
# -------------------------
class GenerationFailedError(RuntimeError):
    def __init__(self, action: GenerationAction, index: Optional[int] = None):
        self.action = action
        self.index = index
        self.message = FAILURE_MESSAGES[action]
        super().__init__(self.message)


class UnitBusyError(RuntimeError):
    def __init__(self, action: GenerationAction, index: Optional[int]):
        self.action = action
        self.index = index
        super().__init__(f"'{action.value}' already running for unit {index}")


class PlanningContextError(ValueError):
    """The action needs a plan or metadata the session does not have."""


BusyKey = Tuple[GenerationAction, Optional[int]]


class PlanningSession:
    def __init__(
        self,
        generator: ContentGenerator,
        *,
        plan: Optional[BimesterPlan] = None,
        metadata: Optional[PlanningMetadata] = None,
    ):
        self.generator = generator
        self.plan = plan
        self.metadata = metadata or PlanningMetadata()
        self._busy: Set[BusyKey] = set()
        # Bumped whenever the working plan is replaced wholesale
        self._generation = 0
        self._observers: List[Callable[[BimesterPlan], None]] = []

    # -------------------------
    # State
    # -------------------------
    def on_update(self, observer: Callable[[BimesterPlan], None]) -> None:
        self._observers.append(observer)

    def _set_plan(self, plan: BimesterPlan) -> None:
        self.plan = plan
        for observer in self._observers:
            observer(plan)

    def load(self, plan: BimesterPlan, metadata: Optional[PlanningMetadata] = None) -> None:
        """Replace the working plan wholesale (e.g. with a saved library item)."""
        self._generation += 1
        self.plan = plan.model_copy(deep=True)
        if metadata is not None:
            self.metadata = metadata
        self._set_plan(self.plan)

    def is_busy(self, action: GenerationAction, index: Optional[int] = None) -> bool:
        return (action, index) in self._busy

    @property
    def busy(self) -> List[BusyKey]:
        return sorted(self._busy, key=lambda k: (k[0].value, -1 if k[1] is None else k[1]))

    def _claim(self, action: GenerationAction, index: Optional[int]) -> None:
        key = (action, index)
        if key in self._busy:
            raise UnitBusyError(action, index)
        self._busy.add(key)

    def _require(self, *fields: str) -> PlanningMetadata:
        missing = [f for f in fields if not getattr(self.metadata, f)]
        if missing:
            raise PlanningContextError(f"Planning metadata is missing: {', '.join(missing)}")
        return self.metadata

    def _require_plan(self, index: int) -> BimesterPlan:
        if self.plan is None:
            raise PlanningContextError("No plan has been generated in this session")
        # Index errors are programmer errors and surface as PlanIndexError
        plan_mutation.check_index(self.plan, index)
        return self.plan

    async def _run(self, action: GenerationAction, index: Optional[int], call: Callable[[], Awaitable[Any]]):
        self._claim(action, index)
        try:
            return await call()
        except AIClientError as exc:
            logger.exception(f"Generation '{action.value}' failed for unit {index}")
            raise GenerationFailedError(action, index) from exc
        finally:
            self._busy.discard((action, index))

    def _merge(
        self,
        generation: int,
        action: GenerationAction,
        index: Optional[int],
        update: Callable[[BimesterPlan], BimesterPlan],
    ) -> BimesterPlan:
        """Apply a resolved result, unless the plan it was requested for has since been replaced."""
        if generation != self._generation:
            logger.warning(f"Dropping stale '{action.value}' result for unit {index}: working plan was replaced")
            return self.plan
        self._set_plan(update(self.plan))
        return self.plan

    # -------------------------
    # Whole plan
    # -------------------------
    async def generate_plan(
        self, grade: str, subject: str, bimester: str, curriculum: str, custom_context: str = ""
    ) -> BimesterPlan:
        generation = self._generation
        plan = await self._run(
            GenerationAction.PLAN,
            None,
            lambda: self.generator.generate_plan(grade, subject, bimester, curriculum, custom_context),
        )
        if generation != self._generation:
            logger.warning("Dropping stale plan result: working plan was replaced while it was generating")
            return self.plan
        self._generation += 1
        self.metadata = PlanningMetadata(grade=grade, subject=subject, bimester=bimester, curriculum=curriculum)
        self._set_plan(plan)
        return plan

    # -------------------------
    # Unit actions
    # -------------------------
    async def regenerate_unit(self, index: int, strategy: MethodologyStrategy) -> BimesterPlan:
        meta = self._require("grade", "subject", "curriculum")
        plan = self._require_plan(index)
        if self.is_busy(GenerationAction.REGENERATE, index):
            raise UnitBusyError(GenerationAction.REGENERATE, index)

        # Optimistic phase: survives a failed call
        self._set_plan(plan_mutation.select_strategy(plan, index, strategy))
        current_unit = self.plan.plans[index]
        generation = self._generation
        regenerated = await self._run(
            GenerationAction.REGENERATE,
            index,
            lambda: self.generator.regenerate_unit(current_unit, meta.grade, meta.subject, strategy, meta.curriculum),
        )
        return self._merge(
            generation,
            GenerationAction.REGENERATE,
            index,
            lambda plan: plan_mutation.apply_regeneration(plan, index, regenerated, strategy),
        )

    async def generate_text(self, index: int) -> BimesterPlan:
        meta = self._require("grade", "subject")
        topic = self._require_plan(index).plans[index].topic
        generation = self._generation
        text = await self._run(
            GenerationAction.TEXT, index, lambda: self.generator.generate_text(meta.grade, meta.subject, topic)
        )
        return self._merge(
            generation, GenerationAction.TEXT, index, lambda plan: plan_mutation.attach_educational_text(plan, index, text)
        )

    async def generate_question_bank(self, index: int, quantities: Dict[QuestionType, int]) -> BimesterPlan:
        meta = self._require("grade", "subject")
        topic = self._require_plan(index).plans[index].topic
        quantities = clamp_quantities(quantities)
        if not any(quantities.values()):
            raise PlanningContextError("Select at least one question type with a quantity above zero")
        generation = self._generation
        batch = await self._run(
            GenerationAction.QUESTIONS,
            index,
            lambda: self.generator.generate_question_bank(meta.grade, meta.subject, topic, quantities),
        )
        # Bank is read from the plan current at resolution time
        return self._merge(
            generation, GenerationAction.QUESTIONS, index, lambda plan: plan_mutation.append_question_bank(plan, index, batch)
        )

    async def generate_slide_deck(self, index: int) -> BimesterPlan:
        meta = self._require("grade")
        topic = self._require_plan(index).plans[index].topic
        generation = self._generation
        deck = await self._run(
            GenerationAction.SLIDES,
            index,
            lambda: self.generator.generate_slide_deck(topic, meta.grade, meta.subject or ""),
        )
        return self._merge(
            generation, GenerationAction.SLIDES, index, lambda plan: plan_mutation.attach_slide_deck(plan, index, deck)
        )

    async def generate_assessment(self, index: int, config: AssessmentConfig) -> BimesterPlan:
        meta = self._require("grade", "subject", "bimester")
        topic = self._require_plan(index).plans[index].topic
        generation = self._generation
        assessment = await self._run(
            GenerationAction.ASSESSMENT,
            index,
            lambda: self.generator.generate_assessment(meta.grade, meta.subject, topic, meta.bimester, config),
        )
        return self._merge(
            generation,
            GenerationAction.ASSESSMENT,
            index,
            lambda plan: plan_mutation.attach_generated_assessment(plan, index, assessment),
        )

    async def generate_rubric(self, index: int) -> BimesterPlan:
        meta = self._require("grade", "subject")
        unit = self._require_plan(index).plans[index]
        generation = self._generation
        rubric = await self._run(
            GenerationAction.RUBRIC,
            index,
            lambda: self.generator.generate_rubric(meta.grade, meta.subject, unit.topic, unit.methodology),
        )
        return self._merge(
            generation, GenerationAction.RUBRIC, index, lambda plan: plan_mutation.attach_rubric(plan, index, rubric)
        )

    def update_unit(self, index: int, patch: plan_mutation.UnitPatch) -> BimesterPlan:
        """Manual edit of one unit; fields absent from the patch are kept."""
        self._set_plan(plan_mutation.apply_unit_update(self._require_plan(index), index, patch))
        return self.plan

    def edit_assessment_question(
        self,
        index: int,
        question_index: int,
        *,
        statement: Optional[str] = None,
        option_index: Optional[int] = None,
        option_value: Optional[str] = None,
    ) -> BimesterPlan:
        plan = self._require_plan(index)
        self._set_plan(
            plan_mutation.edit_assessment_question(
                plan,
                index,
                question_index,
                statement=statement,
                option_index=option_index,
                option_value=option_value,
            )
        )
        return self.plan

    # -------------------------
    # Library
    # -------------------------
    def default_title(self) -> str:
        meta = self.metadata
        return f"Planejamento {meta.grade} - {meta.subject} - {meta.bimester}"

    def save(self, store: LibraryStore, title: Optional[str] = None) -> LibraryItem:
        if self.plan is None:
            raise PlanningContextError("No plan to save")
        return store.save(
            LibraryItemType.PLANNING,
            title or self.default_title(),
            self.plan,
            self.metadata.model_dump(exclude_none=True),
        )
