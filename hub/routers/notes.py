# hub/routers/notes.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from hub.core.enums import NoteVisibility, UserRole
from hub.database import get_db
from hub.models import Note, User
from hub.schemas.notes import NoteCreate, NoteList, NoteResponse, NoteUpdate
from hub.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


def _visible_to(user: User):
    # Global notes plus the user's own private ones
    return or_(
        Note.visibility == NoteVisibility.GLOBAL,
        and_(Note.visibility == NoteVisibility.SELF, Note.created_by == user.id),
    )


def _get_visible_or_404(db: Session, note_id: int, user: User) -> Note:
    note = db.query(Note).filter(Note.id == note_id, _visible_to(user)).first()
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


@router.get("/", response_model=NoteList)
def read_notes(
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    notes = (
        db.query(Note)
        .filter(_visible_to(current_user))
        .order_by(Note.created_at.desc(), Note.id.desc())
        .all()
    )
    return {"notes": notes}


@router.post("/", response_model=NoteResponse, status_code=201)
def create_note(
    note_in: NoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    body = (note_in.body or "").strip()
    if not body:
        raise HTTPException(status_code=400, detail="Note body is required")

    note = Note(
        body=body,
        visibility=note_in.visibility,
        reminder_date=note_in.reminder_date,
        is_resolved=False,
        created_by=current_user.id,
        created_by_username=current_user.username,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return {"note": note}


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: int,
    note_in: NoteUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    note = _get_visible_or_404(db, note_id, current_user)

    if note_in.action == "resolve":
        note.is_resolved = True
        note.resolved_by = current_user.id
        note.resolved_at = datetime.now(timezone.utc)
    elif note_in.action == "unresolve":
        note.is_resolved = False
        note.resolved_by = None
        note.resolved_at = None
    else:
        update_data = note_in.model_dump(exclude_unset=True, exclude={"action"})
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "body" in update_data:
            update_data["body"] = (update_data["body"] or "").strip()
            if not update_data["body"]:
                raise HTTPException(status_code=400, detail="Note body cannot be empty")
        if "visibility" in update_data and update_data["visibility"] is None:
            raise HTTPException(status_code=400, detail="Visibility must be 'self' or 'global'")
        for field, value in update_data.items():
            setattr(note, field, value)

    db.commit()
    db.refresh(note)
    return {"note": note}


@router.delete("/{note_id}")
def delete_note(
    note_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    note = _get_visible_or_404(db, note_id, current_user)
    if note.created_by != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="You can only delete your own notes")

    db.delete(note)
    db.commit()
    logger.info("Note %s deleted by %s", note_id, current_user.username)
    return {"success": True}
