import abc
import logging
import random
from typing import Dict, List, Optional

import httpx
from pydantic import TypeAdapter

from escola360.core.config import AIConfig
from escola360.models.planning_model import (
    SLIDE_THEME_NAMES,
    AssessmentConfig,
    BimesterPlan,
    CurriculumStandard,
    EducationalContent,
    GeneratedAssessment,
    LessonPlanUnit,
    MethodologyStrategy,
    Question,
    QuestionType,
    Rubric,
    SlideDeck,
)
from escola360.services import prompts
from escola360.services.response_schemas import (
    BIMESTER_PLANNING_SCHEMA,
    EDUCATIONAL_TEXT_SCHEMA,
    LESSON_PLAN_SCHEMA,
    QUESTION_BANK_SCHEMA,
    RUBRIC_SCHEMA,
    SLIDE_DECK_SCHEMA,
)
from escola360.utils.ai_client import call_ai_model
from escola360.utils.date_utils import br_date

# -------------------------
# Logging
# -------------------------
logger = logging.getLogger("planning_generator")
logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

MAX_QUESTIONS_PER_TYPE = 20
LOWER_ELEMENTARY_PREFIXES = ("1º Ano", "2º Ano", "3º Ano", "4º Ano")

_question_list = TypeAdapter(List[Question])


# -------------------------
# Request defaults
# -------------------------
def is_lower_elementary(grade: Optional[str]) -> bool:
    if not grade:
        return False
    return grade.startswith(LOWER_ELEMENTARY_PREFIXES) and "Fundamental" in grade


def default_question_quantities(grade: Optional[str]) -> Dict[QuestionType, int]:
    """Initial selection of the question bank form: playful activities for 1º-4º ano, else 5 multiple choice."""
    quantities = {qtype: 0 for qtype in QuestionType}
    if is_lower_elementary(grade):
        quantities[QuestionType.PLAYFUL] = 2
    else:
        quantities[QuestionType.MULTIPLE_CHOICE] = 5
    return quantities


def clamp_quantities(quantities: Dict[QuestionType, int]) -> Dict[QuestionType, int]:
    return {QuestionType(k): max(0, min(MAX_QUESTIONS_PER_TYPE, int(v))) for k, v in quantities.items()}


def default_assessment_config() -> AssessmentConfig:
    return AssessmentConfig(date=br_date())


# -------------------------
# Generator port
# -------------------------
class ContentGenerator(abc.ABC):
    """
    Remote authoring capability, one coroutine per artifact kind.

    Each call returns a value validated against the document model or raises
    an AIClientError (GenerationTransportError / GenerationSchemaError).
    No partial results.
    """

    @abc.abstractmethod
    async def generate_plan(
        self, grade: str, subject: str, bimester: str, curriculum: str, custom_context: str = ""
    ) -> BimesterPlan: ...

    @abc.abstractmethod
    async def regenerate_unit(
        self, unit: LessonPlanUnit, grade: str, subject: str, strategy: MethodologyStrategy, curriculum: str
    ) -> LessonPlanUnit: ...

    @abc.abstractmethod
    async def generate_text(self, grade: str, subject: str, topic: str) -> EducationalContent: ...

    @abc.abstractmethod
    async def generate_question_bank(
        self, grade: str, subject: str, topic: str, quantities: Dict[QuestionType, int]
    ) -> List[Question]: ...

    @abc.abstractmethod
    async def generate_slide_deck(self, topic: str, grade: str, subject: str) -> SlideDeck: ...

    @abc.abstractmethod
    async def generate_assessment(
        self, grade: str, subject: str, topic: str, bimester: str, config: AssessmentConfig
    ) -> GeneratedAssessment: ...

    @abc.abstractmethod
    async def generate_rubric(self, grade: str, subject: str, topic: str, methodology: str) -> Rubric: ...


# -------------------------
# LLM-backed implementation
# -------------------------
class AIContentGenerator(ContentGenerator):
    def __init__(
        self,
        config: Optional[AIConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or AIConfig()
        self._http_client = http_client
        self._rng = rng or random.Random()

    async def _call(self, prompt: str, schema: dict, parser, *, system_instruction: Optional[str] = None):
        return await call_ai_model(
            prompt,
            config=self.config,
            response_schema=schema,
            system_instruction=system_instruction,
            schema_parser=parser,
            http_client=self._http_client,
        )

    async def generate_plan(self, grade, subject, bimester, curriculum=CurriculumStandard.BNCC.value, custom_context=""):
        logger.info(f"Generating bimester plan for {subject} ({grade}, {bimester})")
        prompt = prompts.build_bimester_prompt(grade, subject, bimester, curriculum, custom_context)
        plan = await self._call(
            prompt,
            BIMESTER_PLANNING_SCHEMA,
            BimesterPlan.model_validate,
            system_instruction=self.config.system_instruction,
        )
        logger.info(f"Bimester plan generated with {len(plan.plans)} units")
        return plan

    async def regenerate_unit(self, unit, grade, subject, strategy, curriculum):
        strategy = MethodologyStrategy(strategy).value
        logger.info(f"Regenerating unit '{unit.topic}' with strategy '{strategy}'")
        prompt = prompts.build_regeneration_prompt(unit, grade, subject, strategy, curriculum)
        return await self._call(prompt, LESSON_PLAN_SCHEMA, LessonPlanUnit.model_validate)

    async def generate_text(self, grade, subject, topic):
        prompt = prompts.build_educational_text_prompt(grade, subject, topic)
        return await self._call(prompt, EDUCATIONAL_TEXT_SCHEMA, EducationalContent.model_validate)

    async def generate_question_bank(self, grade, subject, topic, quantities):
        quantities = clamp_quantities(quantities)
        if not any(quantities.values()):
            raise ValueError("At least one question type must have a quantity above zero")
        prompt = prompts.build_question_bank_prompt(grade, subject, topic, quantities)
        return await self._call(prompt, QUESTION_BANK_SCHEMA, _question_list.validate_python)

    async def generate_slide_deck(self, topic, grade, subject):
        prompt = prompts.build_slide_deck_prompt(topic, grade, subject)
        deck = await self._call(prompt, SLIDE_DECK_SCHEMA, SlideDeck.model_validate)
        # Visual theme is picked here and persisted with the deck
        return deck.model_copy(update={"theme": self._rng.choice(SLIDE_THEME_NAMES)})

    async def generate_assessment(self, grade, subject, topic, bimester, config):
        prompt = prompts.build_assessment_prompt(grade, subject, topic, bimester, config)
        questions = await self._call(prompt, QUESTION_BANK_SCHEMA, _question_list.validate_python)
        return GeneratedAssessment(
            header=config,
            questions=questions,
            topic=topic,
            grade=grade,
            subject=subject,
            bimester=bimester,
        )

    async def generate_rubric(self, grade, subject, topic, methodology):
        prompt = prompts.build_rubric_prompt(grade, subject, topic, methodology)
        return await self._call(prompt, RUBRIC_SCHEMA, Rubric.model_validate)
