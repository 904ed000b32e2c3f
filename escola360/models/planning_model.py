from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# -------------------------
# Catalogs
# -------------------------
class GradeLevel(str, Enum):
    EF_1 = "1º Ano do Ensino Fundamental"
    EF_2 = "2º Ano do Ensino Fundamental"
    EF_3 = "3º Ano do Ensino Fundamental"
    EF_4 = "4º Ano do Ensino Fundamental"
    EF_5 = "5º Ano do Ensino Fundamental"
    EF_6 = "6º Ano do Ensino Fundamental"
    EF_7 = "7º Ano do Ensino Fundamental"
    EF_8 = "8º Ano do Ensino Fundamental"
    EF_9 = "9º Ano do Ensino Fundamental"
    EM_1 = "1º Ano do Ensino Médio"
    EM_2 = "2º Ano do Ensino Médio"
    EM_3 = "3º Ano do Ensino Médio"


class Subject(str, Enum):
    PORTUGUESE = "Língua Portuguesa"
    MATH = "Matemática"
    HISTORY = "História"
    GEOGRAPHY = "Geografia"
    SCIENCE = "Ciências"
    ARTS = "Artes"
    PHYSICAL_ED = "Educação Física"
    ENGLISH = "Inglês"
    PHYSICS = "Física"
    CHEMISTRY = "Química"
    BIOLOGY = "Biologia"
    SOCIOLOGY = "Sociologia"
    PHILOSOPHY = "Filosofia"
    RELIGION = "Ensino Religioso"
    FORMATIVE_ITINERARIES = "Itinerários Formativos"


class Bimester(str, Enum):
    FIRST = "1º Bimestre"
    SECOND = "2º Bimestre"
    THIRD = "3º Bimestre"
    FOURTH = "4º Bimestre"


class CurriculumStandard(str, Enum):
    BNCC = "BNCC (Padrão Nacional)"
    # Norte
    AC = "Acre (Referencial Curricular do Acre)"
    AP = "Amapá (Referencial Curricular Amapaense)"
    AM = "Amazonas (Referencial Curricular Amazonense)"
    PA = "Pará (Documento Curricular do Pará)"
    RO = "Rondônia (Referencial Curricular de Rondônia)"
    RR = "Roraima (Documento Curricular de Roraima)"
    TO = "Tocantins (DCT - Documento Curricular do Tocantins)"
    # Nordeste
    AL = "Alagoas (Referencial Curricular de Alagoas)"
    BA = "Bahia (DCRC - Documento Curricular Referencial da Bahia)"
    CE = "Ceará (DCRC - Documento Curricular Referencial do Ceará)"
    MA = "Maranhão (Documento Curricular do Território Maranhense)"
    PB = "Paraíba (Proposta Curricular do Estado da Paraíba)"
    PE = "Pernambuco (Currículo de Pernambuco)"
    PI = "Piauí (Currículo do Piauí)"
    RN = "Rio Grande do Norte (Documento Curricular do RN)"
    SE = "Sergipe (Currículo de Sergipe)"
    # Centro-Oeste
    DF = "Distrito Federal (Currículo em Movimento)"
    GO = "Goiás (DC-GO - Documento Curricular de Goiás)"
    MT = "Mato Grosso (DRC-MT)"
    MS = "Mato Grosso do Sul (Referencial Curricular de MS)"
    # Sudeste
    ES = "Espírito Santo (Currículo do Espírito Santo)"
    MG = "Minas Gerais (CRMG - Currículo Referência de Minas Gerais)"
    RJ = "Rio de Janeiro (Documento Curricular do Rio de Janeiro)"
    SP = "São Paulo (Currículo Paulista)"
    # Sul
    PR = "Paraná (Referencial Curricular do Paraná)"
    RS = "Rio Grande do Sul (Referencial Curricular Gaúcho)"
    SC = "Santa Catarina (Currículo Base da Educação Infantil e Ensino Fundamental do Território Catarinense)"


class MethodologyStrategy(str, Enum):
    TRADITIONAL = "Expositiva Dialogada (Padrão)"
    PBL = "PBL - Aprendizagem Baseada em Projetos"
    GAMIFICATION = "Gamificação"
    FLIPPED_CLASSROOM = "Sala de Aula Invertida"
    HYBRID = "Ensino Híbrido (Rotação por Estações)"
    STORYTELLING = "Storytelling (Narrativa)"
    PEER_INSTRUCTION = "Instruction by Peers (Instrução por Pares)"
    STEAM = "STEAM (Science, Tech, Eng, Arts, Math)"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "Múltipla Escolha"
    ESSAY = "Dissertativa"
    RESEARCH = "Pesquisa"
    PLAYFUL = "Atividade Lúdica"


class RecommendationType(str, Enum):
    VIDEO = "VIDEO"
    BOOK = "BOOK"
    ARTICLE = "ARTICLE"
    SITE = "SITE"


SLIDE_THEME_NAMES = ["Indigo", "Emerald", "Violet", "Amber", "Rose"]


def is_high_school(grade: str) -> bool:
    return "Ensino Médio" in grade


def available_subjects(grade: str) -> List[Subject]:
    """Subjects offered for a grade: high school swaps Ciências/Ensino Religioso for the split sciences."""
    common = [
        Subject.PORTUGUESE,
        Subject.MATH,
        Subject.HISTORY,
        Subject.GEOGRAPHY,
        Subject.ARTS,
        Subject.PHYSICAL_ED,
        Subject.ENGLISH,
    ]
    if is_high_school(grade):
        return common + [
            Subject.PHYSICS,
            Subject.CHEMISTRY,
            Subject.BIOLOGY,
            Subject.SOCIOLOGY,
            Subject.PHILOSOPHY,
            Subject.FORMATIVE_ITINERARIES,
        ]
    return common + [Subject.SCIENCE, Subject.RELIGION]


# -------------------------
# Base model: snake_case attributes, wire aliases where the stored records use camelCase
# -------------------------
class DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


# -------------------------
# Lesson plan building blocks
# -------------------------
class BnccSkill(DocumentModel):
    code: str
    description: str


class Activity(DocumentModel):
    title: str
    description: str
    duration: str


class Assessment(DocumentModel):
    title: str
    methodology: str
    criteria: str


class InclusionAdaptations(DocumentModel):
    general: str
    adhd: str  # TDAH
    autism: str  # TEA
    dyslexia: str
    high_abilities: str  # Altas Habilidades/Superdotação


class InterdisciplinaryConnection(DocumentModel):
    subject: str
    description: str


# -------------------------
# Attachable artifacts
# -------------------------
class RubricLevel(DocumentModel):
    level_name: str = Field(..., alias="levelName")
    description: str


class RubricCriterion(DocumentModel):
    name: str
    levels: List[RubricLevel]


class Rubric(DocumentModel):
    title: str
    criteria: List[RubricCriterion]


class Question(DocumentModel):
    type: QuestionType
    statement: str
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    justification: Optional[str] = None
    answer_key: Optional[str] = Field(default=None, alias="answerKey")
    bncc_alignment: Optional[str] = Field(default=None, alias="bnccAlignment")


class TextbookSection(DocumentModel):
    subtitle: str
    content: str


class Recommendation(DocumentModel):
    type: RecommendationType
    title: str
    author_or_source: Optional[str] = Field(default=None, alias="authorOrSource")
    description: Optional[str] = None


class GlossaryItem(DocumentModel):
    term: str
    definition: str


class EducationalContent(DocumentModel):
    title: str
    introduction: str
    sections: List[TextbookSection]
    glossary: List[GlossaryItem]
    recommendations: List[Recommendation]
    references: List[str]


class Slide(DocumentModel):
    title: str
    content: str


class SlideDeck(DocumentModel):
    title: str
    theme: Optional[str] = None
    slides: List[Slide]


class AssessmentConfig(DocumentModel):
    school_name: str = Field(default="Escola 360", alias="schoolName")
    professor_name: str = Field(default="", alias="professorName")
    date: str = ""  # dd/mm/yyyy, printed as-is on the header
    total_value: float = Field(default=10, alias="totalValue")
    mc_count: int = Field(default=5, ge=0, alias="mcCount")
    mc_value: float = Field(default=1, alias="mcValue")
    essay_count: int = Field(default=2, ge=0, alias="essayCount")
    essay_value: float = Field(default=2.5, alias="essayValue")


class GeneratedAssessment(DocumentModel):
    header: AssessmentConfig
    questions: List[Question]
    topic: str
    grade: str
    subject: str
    bimester: str


# -------------------------
# Aggregates
# -------------------------
ARTIFACT_FIELDS = ("educational_text", "question_bank", "slide_deck", "generated_assessment", "rubric")


class LessonPlanUnit(DocumentModel):
    topic: str
    objectives: List[str]
    content_summary: str
    methodology: str
    selected_strategy: Optional[MethodologyStrategy] = Field(default=None, alias="selectedStrategy")
    bncc_skills: List[BnccSkill]
    activities: List[Activity]
    assessments: List[Assessment]

    inclusion: Optional[InclusionAdaptations] = None
    interdisciplinary: Optional[List[InterdisciplinaryConnection]] = None

    # Generated content, attached after the plan exists
    educational_text: Optional[EducationalContent] = Field(default=None, alias="educationalText")
    question_bank: Optional[List[Question]] = Field(default=None, alias="questionBank")
    slide_deck: Optional[SlideDeck] = Field(default=None, alias="slideDeck")
    generated_assessment: Optional[GeneratedAssessment] = Field(default=None, alias="generatedAssessment")
    rubric: Optional[Rubric] = None


class LessonPlanUnitPatch(DocumentModel):
    """Partial unit: only the fields explicitly set are applied."""

    topic: Optional[str] = None
    objectives: Optional[List[str]] = None
    content_summary: Optional[str] = None
    methodology: Optional[str] = None
    selected_strategy: Optional[MethodologyStrategy] = Field(default=None, alias="selectedStrategy")
    bncc_skills: Optional[List[BnccSkill]] = None
    activities: Optional[List[Activity]] = None
    assessments: Optional[List[Assessment]] = None
    inclusion: Optional[InclusionAdaptations] = None
    interdisciplinary: Optional[List[InterdisciplinaryConnection]] = None
    educational_text: Optional[EducationalContent] = Field(default=None, alias="educationalText")
    question_bank: Optional[List[Question]] = Field(default=None, alias="questionBank")
    slide_deck: Optional[SlideDeck] = Field(default=None, alias="slideDeck")
    generated_assessment: Optional[GeneratedAssessment] = Field(default=None, alias="generatedAssessment")
    rubric: Optional[Rubric] = None

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, extra="forbid")

    def updates(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class BimesterPlan(DocumentModel):
    overview: str
    plans: List[LessonPlanUnit]


class PlanningMetadata(DocumentModel):
    """Context of a generated plan; stored with library items as free-form metadata."""

    grade: Optional[str] = None
    subject: Optional[str] = None
    bimester: Optional[str] = None
    curriculum: Optional[str] = None
