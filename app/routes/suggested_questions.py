import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import field_validator
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..database import get_db
from ..models import SuggestedQuestion, User
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Suggested Questions"])


class SuggestedQuestionCreate(CamelModel):
    question: str
    category: str
    property_type: Optional[str] = None
    is_general_question: bool = True
    display_order: int = 0
    is_active: bool = True


class SuggestedQuestionUpdate(CamelModel):
    question: Optional[str] = None
    category: Optional[str] = None
    property_type: Optional[str] = None
    is_general_question: Optional[bool] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("question", "category", "is_general_question", "display_order", "is_active")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class SuggestedQuestionResponse(CamelModel):
    id: int
    question: str
    category: str
    property_type: Optional[str] = None
    is_general_question: bool
    display_order: int
    click_count: int
    is_active: bool


def _get_question(db: Session, question_id: int) -> SuggestedQuestion:
    question = db.query(SuggestedQuestion).filter(SuggestedQuestion.id == question_id).first()
    if not question:
        raise HTTPException(status_code=404, detail="Suggested question not found")
    return question


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/suggested-questions", response_model=list[SuggestedQuestionResponse])
async def get_suggested_questions(
    category: Optional[str] = Query(None),
    propertyType: Optional[str] = Query(None),
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
):
    query = db.query(SuggestedQuestion).filter(SuggestedQuestion.is_active.is_(True))
    if category:
        query = query.filter(SuggestedQuestion.category == category)
    if propertyType:
        query = query.filter(
            or_(
                SuggestedQuestion.property_type == propertyType,
                SuggestedQuestion.is_general_question.is_(True),
            )
        )
    return (
        query.order_by(SuggestedQuestion.display_order.asc(), SuggestedQuestion.id.asc())
        .limit(limit)
        .all()
    )


@router.get("/suggested-questions/popular", response_model=list[SuggestedQuestionResponse])
async def get_popular_questions(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return (
        db.query(SuggestedQuestion)
        .filter(SuggestedQuestion.is_active.is_(True))
        .order_by(SuggestedQuestion.click_count.desc(), SuggestedQuestion.id.asc())
        .limit(limit)
        .all()
    )


@router.post("/suggested-questions/{question_id}/click", status_code=204)
async def record_question_click(question_id: int, db: Session = Depends(get_db)):
    question = _get_question(db, question_id)
    question.click_count = (question.click_count or 0) + 1
    db.commit()
    return Response(status_code=204)


# ============================================================================
# ADMIN
# ============================================================================


@router.post(
    "/admin/suggested-questions", response_model=SuggestedQuestionResponse, status_code=201
)
async def create_suggested_question(
    data: SuggestedQuestionCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question = SuggestedQuestion(**data.model_dump())
    db.add(question)
    db.commit()
    db.refresh(question)
    logger.info(f"✅ Suggested question {question.id} created by admin {admin.id}")
    return question


@router.put("/admin/suggested-questions/{question_id}", response_model=SuggestedQuestionResponse)
async def update_suggested_question(
    question_id: int,
    data: SuggestedQuestionUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question = _get_question(db, question_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(question, key, value)
    db.commit()
    db.refresh(question)
    return question


@router.delete("/admin/suggested-questions/{question_id}", status_code=204)
async def delete_suggested_question(
    question_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question = _get_question(db, question_id)
    db.delete(question)
    db.commit()
    return Response(status_code=204)
