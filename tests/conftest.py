import asyncio
from typing import Dict, List, Optional

import pytest

from escola360.models.planning_model import (
    Activity,
    Assessment,
    AssessmentConfig,
    BimesterPlan,
    BnccSkill,
    EducationalContent,
    GeneratedAssessment,
    GlossaryItem,
    LessonPlanUnit,
    Question,
    QuestionType,
    Rubric,
    RubricCriterion,
    RubricLevel,
    Slide,
    SlideDeck,
    TextbookSection,
)
from escola360.services.ai_planning_generator import ContentGenerator
from escola360.utils.ai_client import GenerationTransportError


def build_unit(topic: str = "Frações", methodology: str = "Aula expositiva dialogada", **extra) -> LessonPlanUnit:
    return LessonPlanUnit(
        topic=topic,
        objectives=[f"Compreender {topic}"],
        content_summary=f"Resumo de {topic}",
        methodology=methodology,
        bncc_skills=[BnccSkill(code="EF05MA03", description="Identificar frações")],
        activities=[Activity(title="Roda de conversa", description="Discussão inicial", duration="20 min")],
        assessments=[Assessment(title="Exercícios", methodology="Lista", criteria="Acertos")],
        **extra,
    )


def build_plan(*topics: str) -> BimesterPlan:
    topics = topics or ("Frações", "Decimais", "Porcentagem")
    return BimesterPlan(overview="Visão geral do bimestre", plans=[build_unit(t) for t in topics])


def build_text(title: str = "Texto base") -> EducationalContent:
    return EducationalContent(
        title=title,
        introduction="Introdução",
        sections=[TextbookSection(subtitle="Parte 1", content="Conteúdo")],
        glossary=[GlossaryItem(term="Fração", definition="Parte de um todo")],
        recommendations=[],
        references=["Livro didático"],
    )


def build_question(statement: str = "Quanto é 1/2 + 1/2?") -> Question:
    return Question(
        type=QuestionType.MULTIPLE_CHOICE,
        statement=statement,
        options=["A) 1", "B) 2", "C) 0", "D) 1/4"],
        correct_answer="A",
        justification="Duas metades formam um inteiro.",
    )


def build_deck(slides: int = 6, theme: Optional[str] = "Indigo") -> SlideDeck:
    return SlideDeck(
        title="Apresentação",
        theme=theme,
        slides=[Slide(title=f"Slide {i + 1}", content="Texto curto") for i in range(slides)],
    )


def build_rubric() -> Rubric:
    return Rubric(
        title="Rubrica",
        criteria=[
            RubricCriterion(
                name="Compreensão",
                levels=[RubricLevel(level_name="Insuficiente", description="Não compreende")],
            )
        ],
    )


def build_assessment(topic: str = "Frações") -> GeneratedAssessment:
    return GeneratedAssessment(
        header=AssessmentConfig(date="01/03/2025"),
        questions=[build_question(), build_question("Quanto é 1/4 + 1/4?")],
        topic=topic,
        grade="5º Ano do Ensino Fundamental",
        subject="Matemática",
        bimester="1º Bimestre",
    )


class FakeGenerator(ContentGenerator):
    """Scriptable generator: canned results, optional failure, optional gate to hold a call open."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail: Dict[str, bool] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.plan = build_plan()
        self.regenerated = build_unit("Frações", methodology="Projeto em grupo")
        self.text = build_text()
        self.questions = [build_question()]
        self.deck = build_deck()
        self.assessment = build_assessment()
        self.rubric = build_rubric()

    async def _respond(self, name: str, value, *args):
        self.calls.append((name, *args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if self.fail.get(name):
            raise GenerationTransportError(f"{name} unavailable")
        return value

    async def generate_plan(self, grade, subject, bimester, curriculum, custom_context=""):
        return await self._respond("plan", self.plan, grade, subject, bimester, curriculum, custom_context)

    async def regenerate_unit(self, unit, grade, subject, strategy, curriculum):
        return await self._respond("regen", self.regenerated, unit.topic, strategy)

    async def generate_text(self, grade, subject, topic):
        return await self._respond("text", self.text, topic)

    async def generate_question_bank(self, grade, subject, topic, quantities):
        return await self._respond("questions", list(self.questions), topic, dict(quantities))

    async def generate_slide_deck(self, topic, grade, subject):
        return await self._respond("slides", self.deck, topic)

    async def generate_assessment(self, grade, subject, topic, bimester, config):
        return await self._respond("assessment", self.assessment, topic, config)

    async def generate_rubric(self, grade, subject, topic, methodology):
        return await self._respond("rubric", self.rubric, topic, methodology)


@pytest.fixture
def plan() -> BimesterPlan:
    return build_plan()


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()
