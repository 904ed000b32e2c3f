from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, List, Optional
import logging

from escola360.api.deps import get_library_store, get_planning_session
from escola360.core.security import User, get_current_user
from escola360.models.library_model import LibraryItem
from escola360.models.planning_model import (
    SLIDE_THEME_NAMES,
    AssessmentConfig,
    Bimester,
    BimesterPlan,
    CurriculumStandard,
    GradeLevel,
    LessonPlanUnitPatch,
    MethodologyStrategy,
    PlanningMetadata,
    QuestionType,
    Subject,
    available_subjects,
)
from escola360.services.ai_planning_generator import default_assessment_config, default_question_quantities
from escola360.services.library_store import LibraryStore, StorageError
from escola360.services.plan_mutation import AssessmentEditError, PlanIndexError
from escola360.services.planning_session import (
    GenerationFailedError,
    PlanningContextError,
    PlanningSession,
    UnitBusyError,
)

router = APIRouter()

# -------------------------
# Logging Configuration
# -------------------------
logger = logging.getLogger("planning_api")
logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


# -------------------------
# Request Models
# -------------------------
class GeneratePlanRequest(BaseModel):
    grade: GradeLevel
    subject: Subject
    bimester: Bimester
    curriculum: CurriculumStandard = CurriculumStandard.BNCC
    custom_context: str = Field(default="", alias="customContext")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def subject_offered_for_grade(self):
        if self.subject not in available_subjects(self.grade.value):
            raise ValueError(f"'{self.subject.value}' is not offered for '{self.grade.value}'")
        return self


class RegenerateRequest(BaseModel):
    strategy: MethodologyStrategy


class QuestionBankRequest(BaseModel):
    quantities: Optional[Dict[QuestionType, int]] = None


class AssessmentRequest(BaseModel):
    config: Optional[AssessmentConfig] = None


class AssessmentEditRequest(BaseModel):
    statement: Optional[str] = None
    option_index: Optional[int] = Field(default=None, alias="optionIndex")
    option_value: Optional[str] = Field(default=None, alias="optionValue")

    model_config = ConfigDict(populate_by_name=True)


class LoadPlanRequest(BaseModel):
    planning: BimesterPlan
    metadata: PlanningMetadata = Field(default_factory=PlanningMetadata)


class SaveRequest(BaseModel):
    title: Optional[str] = None


# -------------------------
# Response Models
# -------------------------
class PlanningResponse(BaseModel):
    planning: Optional[BimesterPlan] = None
    metadata: PlanningMetadata
    busy: List[str] = []


def _response(session: PlanningSession) -> PlanningResponse:
    return PlanningResponse(
        planning=session.plan,
        metadata=session.metadata,
        busy=[f"{action.value}-{index}" if index is not None else action.value for action, index in session.busy],
    )


# -------------------------
# Helper: translate session errors into HTTP errors
# -------------------------
def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, GenerationFailedError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"action": exc.action.value, "index": exc.index, "message": exc.message},
        )
    if isinstance(exc, UnitBusyError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PlanIndexError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    # Missing context, or an assessment edit that does not apply
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


SESSION_ERRORS = (GenerationFailedError, UnitBusyError, PlanningContextError, AssessmentEditError, IndexError)


# -------------------------
# Catalog
# -------------------------
@router.get("/catalog")
def catalog():
    return {
        "grades": [g.value for g in GradeLevel],
        "subjects": [s.value for s in Subject],
        "bimesters": [b.value for b in Bimester],
        "curricula": [c.value for c in CurriculumStandard],
        "strategies": [m.value for m in MethodologyStrategy],
        "questionTypes": [q.value for q in QuestionType],
        "slideThemes": SLIDE_THEME_NAMES,
    }


@router.get("/catalog/subjects")
def catalog_subjects(grade: GradeLevel = Query(...)):
    return {
        "grade": grade.value,
        "subjects": [s.value for s in available_subjects(grade.value)],
        "defaultQuestionQuantities": {q.value: n for q, n in default_question_quantities(grade.value).items()},
    }


# -------------------------
# Working plan
# -------------------------
@router.post("/planning", response_model=PlanningResponse, response_model_exclude_none=True)
async def generate_planning(
    req: GeneratePlanRequest,
    user: User = Depends(get_current_user),
    session: PlanningSession = Depends(get_planning_session),
):
    """Generate a full bimester plan and make it the session's working plan."""
    try:
        await session.generate_plan(
            req.grade.value, req.subject.value, req.bimester.value, req.curriculum.value, req.custom_context
        )
    except SESSION_ERRORS as e:
        raise _http_error(e)

    logger.info(f"Bimester plan generated for {req.subject.value} ({req.grade.value}) by {user.email}")
    return _response(session)


@router.get("/planning", response_model=PlanningResponse, response_model_exclude_none=True)
async def get_planning(session: PlanningSession = Depends(get_planning_session)):
    return _response(session)


@router.put("/planning", response_model=PlanningResponse, response_model_exclude_none=True)
async def load_planning(req: LoadPlanRequest, session: PlanningSession = Depends(get_planning_session)):
    """Replace the working plan, e.g. to keep editing a plan opened from the library."""
    session.load(req.planning, req.metadata)
    return _response(session)


@router.patch("/planning/units/{index}", response_model=PlanningResponse, response_model_exclude_none=True)
async def update_unit(
    index: int, patch: LessonPlanUnitPatch, session: PlanningSession = Depends(get_planning_session)
):
    """Manual edit of one unit: fields present in the body overwrite, absent ones are kept."""
    try:
        session.update_unit(index, patch)
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.post("/planning/units/{index}/regenerate", response_model=PlanningResponse, response_model_exclude_none=True)
async def regenerate_unit(
    index: int, req: RegenerateRequest, session: PlanningSession = Depends(get_planning_session)
):
    try:
        await session.regenerate_unit(index, req.strategy)
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.post("/planning/units/{index}/text", response_model=PlanningResponse, response_model_exclude_none=True)
async def generate_text(index: int, session: PlanningSession = Depends(get_planning_session)):
    try:
        await session.generate_text(index)
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.post("/planning/units/{index}/questions", response_model=PlanningResponse, response_model_exclude_none=True)
async def generate_questions(
    index: int, req: QuestionBankRequest, session: PlanningSession = Depends(get_planning_session)
):
    quantities = req.quantities or default_question_quantities(session.metadata.grade)
    try:
        await session.generate_question_bank(index, quantities)
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.post("/planning/units/{index}/slides", response_model=PlanningResponse, response_model_exclude_none=True)
async def generate_slides(index: int, session: PlanningSession = Depends(get_planning_session)):
    try:
        await session.generate_slide_deck(index)
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.post("/planning/units/{index}/assessment", response_model=PlanningResponse, response_model_exclude_none=True)
async def generate_assessment(
    index: int, req: AssessmentRequest, session: PlanningSession = Depends(get_planning_session)
):
    try:
        await session.generate_assessment(index, req.config or default_assessment_config())
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.post("/planning/units/{index}/rubric", response_model=PlanningResponse, response_model_exclude_none=True)
async def generate_rubric(index: int, session: PlanningSession = Depends(get_planning_session)):
    try:
        await session.generate_rubric(index)
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


@router.patch(
    "/planning/units/{index}/assessment/questions/{question_index}",
    response_model=PlanningResponse,
    response_model_exclude_none=True,
)
async def edit_assessment_question(
    index: int,
    question_index: int,
    req: AssessmentEditRequest,
    session: PlanningSession = Depends(get_planning_session),
):
    try:
        session.edit_assessment_question(
            index,
            question_index,
            statement=req.statement,
            option_index=req.option_index,
            option_value=req.option_value,
        )
    except SESSION_ERRORS as e:
        raise _http_error(e)
    return _response(session)


# -------------------------
# Save to library
# -------------------------
@router.post(
    "/planning/save",
    response_model=LibraryItem,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def save_planning(
    req: SaveRequest,
    session: PlanningSession = Depends(get_planning_session),
    store: LibraryStore = Depends(get_library_store),
):
    try:
        item = session.save(store, req.title)
    except PlanningContextError as e:
        raise _http_error(e)
    except StorageError as e:
        logger.exception("Failed to save plan to the library")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Library save failed: {e}")
    return item
