import uuid
from typing import Any

from fastapi import APIRouter, Query, Response
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.core.errors import BadRequestError
from studio.crud import (
    create_timeline_entry,
    delete_record,
    get_or_404,
    summarize_timeline,
    update_record,
)
from studio.models import (
    AvatarTimelineEntry,
    AvatarTimelineEntryCreate,
    AvatarTimelineEntryPublic,
    AvatarTimelineEntryUpdate,
    Character,
)

router = APIRouter()


def _require_character(character_id: uuid.UUID | None) -> uuid.UUID:
    if character_id is None:
        raise BadRequestError("characterId is required")
    return character_id


@router.get("", response_model=list[AvatarTimelineEntryPublic])
def read_timeline(
    session: SessionDep,
    character_id: uuid.UUID | None = Query(default=None, alias="characterId"),
    scene_id: uuid.UUID | None = Query(default=None, alias="sceneId"),
    act_id: uuid.UUID | None = Query(default=None, alias="actId"),
    transformation_type: str | None = Query(default=None, alias="transformationType"),
    milestones_only: bool = Query(default=False, alias="milestonesOnly"),
) -> Any:
    statement = select(AvatarTimelineEntry).where(
        AvatarTimelineEntry.character_id == _require_character(character_id)
    )
    if scene_id:
        statement = statement.where(AvatarTimelineEntry.scene_id == scene_id)
    if act_id:
        statement = statement.where(AvatarTimelineEntry.act_id == act_id)
    if transformation_type:
        statement = statement.where(AvatarTimelineEntry.transformation_type == transformation_type)
    if milestones_only:
        statement = statement.where(AvatarTimelineEntry.is_milestone == True)  # noqa: E712
    statement = statement.order_by(
        col(AvatarTimelineEntry.timeline_order), col(AvatarTimelineEntry.created_at)
    )
    return session.exec(statement).all()


@router.post("", response_model=AvatarTimelineEntryPublic, status_code=201)
def create_entry(*, session: SessionDep, entry_in: AvatarTimelineEntryCreate) -> Any:
    get_or_404(session, Character, entry_in.character_id, "Character")
    return create_timeline_entry(session=session, entry_in=entry_in)


@router.get("/summary")
def read_timeline_summary(
    session: SessionDep,
    character_id: uuid.UUID | None = Query(default=None, alias="characterId"),
) -> Any:
    character_id = _require_character(character_id)
    entries = session.exec(
        select(AvatarTimelineEntry)
        .where(AvatarTimelineEntry.character_id == character_id)
        .order_by(col(AvatarTimelineEntry.timeline_order), col(AvatarTimelineEntry.created_at))
    ).all()
    return summarize_timeline(character_id, list(entries))


@router.get("/{entry_id}", response_model=AvatarTimelineEntryPublic)
def read_entry(entry_id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, AvatarTimelineEntry, entry_id, "Timeline entry")


@router.patch("/{entry_id}", response_model=AvatarTimelineEntryPublic)
def update_entry(
    *, entry_id: uuid.UUID, session: SessionDep, entry_in: AvatarTimelineEntryUpdate
) -> Any:
    data = entry_in.model_dump(exclude_unset=True)
    if not data:
        raise BadRequestError("No valid fields to update")
    entry = get_or_404(session, AvatarTimelineEntry, entry_id, "Timeline entry")
    return update_record(session=session, db_obj=entry, obj_in=data)


@router.delete("/{entry_id}", status_code=204)
def delete_entry(entry_id: uuid.UUID, session: SessionDep) -> Response:
    entry = get_or_404(session, AvatarTimelineEntry, entry_id, "Timeline entry")
    delete_record(session=session, db_obj=entry)
    return Response(status_code=204)
