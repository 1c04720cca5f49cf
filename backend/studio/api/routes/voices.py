import uuid
from typing import Any

from fastapi import APIRouter, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.core.errors import ConflictError
from studio.crud import delete_record, get_or_404, update_record
from studio.models import Message, Project, Voice, VoiceCreate, VoicePublic, VoiceUpdate

router = APIRouter()


@router.post("", response_model=VoicePublic, status_code=201)
def create_voice(*, session: SessionDep, voice_in: VoiceCreate) -> Any:
    get_or_404(session, Project, voice_in.project_id, "Project")
    voice = Voice.model_validate(voice_in)
    session.add(voice)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError(f"Voice {voice_in.voice_id} already exists") from e
    session.refresh(voice)
    return voice


@router.get("", response_model=list[VoicePublic])
def read_voices(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    character_id: uuid.UUID | None = Query(default=None, alias="characterId"),
) -> Any:
    statement = select(Voice)
    if project_id:
        statement = statement.where(Voice.project_id == project_id)
    if character_id:
        statement = statement.where(Voice.character_id == character_id)
    return session.exec(statement.order_by(col(Voice.name))).all()


@router.get("/{id}", response_model=VoicePublic)
def read_voice(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Voice, id, "Voice")


@router.put("/{id}", response_model=VoicePublic)
def update_voice(*, id: uuid.UUID, session: SessionDep, voice_in: VoiceUpdate) -> Any:
    voice = get_or_404(session, Voice, id, "Voice")
    return update_record(session=session, db_obj=voice, obj_in=voice_in)


@router.delete("/{id}")
def delete_voice(id: uuid.UUID, session: SessionDep) -> Message:
    voice = get_or_404(session, Voice, id, "Voice")
    delete_record(session=session, db_obj=voice)
    return Message(message="Voice deleted successfully")
