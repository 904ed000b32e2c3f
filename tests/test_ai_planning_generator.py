import json
import random

import httpx
import pytest

from escola360.core.config import AIConfig
from escola360.models.planning_model import (
    SLIDE_THEME_NAMES,
    AssessmentConfig,
    CurriculumStandard,
    GradeLevel,
    QuestionType,
    Subject,
    available_subjects,
)
from escola360.services import prompts
from escola360.services.ai_planning_generator import (
    AIContentGenerator,
    clamp_quantities,
    default_assessment_config,
    default_question_quantities,
)

QUESTIONS_JSON = [
    {
        "type": "Múltipla Escolha",
        "statement": "Quanto é 2 + 2?",
        "options": ["A) 3", "B) 4", "C) 5", "D) 6"],
        "correctAnswer": "B",
        "justification": "Soma simples.",
        "bnccAlignment": "EF01MA06",
    },
    {"type": "Dissertativa", "statement": "Explique a soma.", "answerKey": "Juntar quantidades."},
]

DECK_JSON = {"title": "Frações", "slides": [{"title": f"Slide {i}", "content": "Texto"} for i in range(6)]}


def _generator(body, seen=None, rng=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(json.loads(request.content))
        text = json.dumps(body, ensure_ascii=False)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = AIConfig(api_key="test-key", provider="google-gemini", max_retries=0)
    return AIContentGenerator(config, http_client=client, rng=rng)


# -------------------------
# Defaults
# -------------------------
def test_default_quantities_for_lower_elementary():
    quantities = default_question_quantities(GradeLevel.EF_3.value)
    assert quantities[QuestionType.PLAYFUL] == 2
    assert quantities[QuestionType.MULTIPLE_CHOICE] == 0


@pytest.mark.parametrize("grade", [GradeLevel.EF_5.value, GradeLevel.EM_1.value, None])
def test_default_quantities_elsewhere(grade):
    quantities = default_question_quantities(grade)
    assert quantities[QuestionType.MULTIPLE_CHOICE] == 5
    assert sum(quantities.values()) == 5


def test_clamp_quantities():
    assert clamp_quantities({"Dissertativa": 25, QuestionType.RESEARCH: -1}) == {
        QuestionType.ESSAY: 20,
        QuestionType.RESEARCH: 0,
    }


def test_default_assessment_config():
    config = default_assessment_config()
    assert config.school_name == "Escola 360"
    assert (config.total_value, config.mc_count, config.mc_value) == (10, 5, 1)
    assert (config.essay_count, config.essay_value) == (2, 2.5)
    assert len(config.date.split("/")) == 3


def test_subjects_depend_on_stage():
    middle = available_subjects(GradeLevel.EF_7.value)
    high = available_subjects(GradeLevel.EM_2.value)
    assert Subject.SCIENCE in middle and Subject.PHYSICS not in middle
    assert Subject.PHYSICS in high and Subject.SCIENCE not in high


# -------------------------
# Prompts
# -------------------------
def test_bncc_instruction_has_no_regional_rule():
    text = prompts.curriculum_instruction(CurriculumStandard.BNCC.value)
    assert "Base Nacional Comum Curricular" in text
    assert "80%" not in text


def test_state_instruction_applies_regional_balance():
    text = prompts.curriculum_instruction(CurriculumStandard.SP.value)
    assert "Currículo Paulista" in text
    assert "Estado de São Paulo" in text
    assert "80% UNIVERSAL" in text


def test_question_bank_prompt_lists_only_requested_types():
    text = prompts.build_question_bank_prompt(
        GradeLevel.EM_1.value, "Física", "Cinemática", {QuestionType.MULTIPLE_CHOICE: 3, QuestionType.ESSAY: 0}
    )
    assert '3 questões do tipo "Múltipla Escolha"' in text
    assert "Dissertativa\"" not in text
    assert "5 alternativas" in text


def test_english_slides_get_language_block():
    assert "AULA DE INGLÊS" in prompts.build_slide_deck_prompt("Verb to be", GradeLevel.EF_6.value, "Inglês")
    assert "AULA DE INGLÊS" not in prompts.build_slide_deck_prompt("Frações", GradeLevel.EF_6.value, "Matemática")


def test_bimester_prompt_includes_custom_context():
    text = prompts.build_bimester_prompt(
        GradeLevel.EF_5.value, "Matemática", "2º Bimestre", CurriculumStandard.BNCC.value, "Turma com 40 alunos"
    )
    assert '"Turma com 40 alunos"' in text
    assert "2º Bimestre" in text


# -------------------------
# Generator
# -------------------------
@pytest.mark.asyncio
async def test_slide_deck_gets_a_theme():
    generator = _generator(DECK_JSON, rng=random.Random(7))
    deck = await generator.generate_slide_deck("Frações", GradeLevel.EF_5.value, "Matemática")

    assert deck.theme in SLIDE_THEME_NAMES
    assert len(deck.slides) == 6


@pytest.mark.asyncio
async def test_question_bank_is_parsed_as_list():
    seen = []
    generator = _generator(QUESTIONS_JSON, seen)
    questions = await generator.generate_question_bank(
        GradeLevel.EF_5.value, "Matemática", "Soma", {QuestionType.MULTIPLE_CHOICE: 1, QuestionType.ESSAY: 1}
    )

    assert [q.type for q in questions] == ["Múltipla Escolha", "Dissertativa"]
    assert questions[0].correct_answer == "B"
    assert seen[0]["generationConfig"]["responseSchema"]["type"] == "ARRAY"


@pytest.mark.asyncio
async def test_question_bank_rejects_all_zero_quantities():
    generator = _generator(QUESTIONS_JSON)
    with pytest.raises(ValueError):
        await generator.generate_question_bank(GradeLevel.EF_5.value, "Matemática", "Soma", {QuestionType.ESSAY: 0})


@pytest.mark.asyncio
async def test_assessment_carries_header_and_context():
    generator = _generator(QUESTIONS_JSON)
    config = AssessmentConfig(professor_name="Carla", date="05/04/2025", mc_count=1, essay_count=1)

    assessment = await generator.generate_assessment(
        GradeLevel.EF_5.value, "Matemática", "Soma", "1º Bimestre", config
    )

    assert assessment.header.professor_name == "Carla"
    assert assessment.topic == "Soma"
    assert assessment.bimester == "1º Bimestre"
    assert len(assessment.questions) == 2
