import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import PropertyDraft, User
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drafts", tags=["Drafts"])


class DraftCreate(CamelModel):
    name: Optional[str] = None
    form_data: dict[str, Any]


class DraftUpdate(CamelModel):
    name: Optional[str] = None
    form_data: Optional[dict[str, Any]] = None


class DraftResponse(CamelModel):
    id: int
    user_id: int
    name: Optional[str] = None
    form_data: dict[str, Any]
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None


def _get_owned_draft(db: Session, draft_id: int, user: User) -> PropertyDraft:
    draft = (
        db.query(PropertyDraft)
        .filter(PropertyDraft.id == draft_id, PropertyDraft.user_id == user.id)
        .first()
    )
    if not draft:
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft


@router.get("", response_model=list[DraftResponse])
async def get_drafts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return (
        db.query(PropertyDraft)
        .filter(PropertyDraft.user_id == current_user.id)
        .order_by(PropertyDraft.last_updated.desc(), PropertyDraft.id.desc())
        .all()
    )


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _get_owned_draft(db, draft_id, current_user)


@router.post("", response_model=DraftResponse, status_code=201)
async def create_draft(
    data: DraftCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    draft = PropertyDraft(
        user_id=current_user.id,
        name=data.name or data.form_data.get("title") or "Untitled draft",
        form_data=data.form_data,
    )
    db.add(draft)
    db.commit()
    db.refresh(draft)
    logger.info(f"📝 Draft {draft.id} saved for user {current_user.id}")
    return draft


@router.put("/{draft_id}", response_model=DraftResponse)
async def update_draft(
    draft_id: int,
    data: DraftUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    draft = _get_owned_draft(db, draft_id, current_user)
    if data.name is not None:
        draft.name = data.name
    if data.form_data is not None:
        draft.form_data = data.form_data
    draft.last_updated = datetime.utcnow()
    db.commit()
    db.refresh(draft)
    return draft


@router.delete("/{draft_id}", status_code=204)
async def delete_draft(
    draft_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    draft = _get_owned_draft(db, draft_id, current_user)
    db.delete(draft)
    db.commit()
    return Response(status_code=204)
