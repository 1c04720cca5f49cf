import uuid
from typing import Any

from fastapi import APIRouter, Query
from sqlalchemy import or_
from sqlalchemy.orm import aliased
from sqlmodel import Session, col, select

from studio.api.deps import SessionDep
from studio.core.errors import BadRequestError
from studio.crud import create_record, delete_record, get_or_404, update_record
from studio.models import (
    Beat,
    BeatCreate,
    BeatDependency,
    BeatDependencyCreate,
    BeatDependencyPublic,
    BeatDependencyWithNames,
    BeatPacingSuggestion,
    BeatPacingSuggestionCreate,
    BeatPacingSuggestionPublic,
    BeatPacingSuggestionUpdate,
    BeatPublic,
    BeatUpdate,
    Message,
)

router = APIRouter()
dependencies_router = APIRouter()
pacing_router = APIRouter()


def _require_scope(project_id: uuid.UUID | None, beat_id: uuid.UUID | None) -> None:
    if not project_id and not beat_id:
        raise BadRequestError("Either projectId or beatId is required")


# Beats

@router.post("", response_model=BeatPublic, status_code=201)
def create_beat(*, session: SessionDep, beat_in: BeatCreate) -> Any:
    return create_record(session=session, model=Beat, obj_in=beat_in)


@router.get("", response_model=list[BeatPublic])
def read_beats(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    act_id: uuid.UUID | None = Query(default=None, alias="actId"),
) -> Any:
    statement = select(Beat)
    if project_id:
        statement = statement.where(Beat.project_id == project_id)
    if act_id:
        statement = statement.where(Beat.act_id == act_id)
    return session.exec(statement.order_by(col(Beat.order))).all()


@router.get("/{id}", response_model=BeatPublic)
def read_beat(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Beat, id, "Beat")


@router.put("/{id}", response_model=BeatPublic)
def update_beat(*, id: uuid.UUID, session: SessionDep, beat_in: BeatUpdate) -> Any:
    beat = get_or_404(session, Beat, id, "Beat")
    return update_record(session=session, db_obj=beat, obj_in=beat_in)


@router.delete("/{id}")
def delete_beat(id: uuid.UUID, session: SessionDep) -> Message:
    beat = get_or_404(session, Beat, id, "Beat")
    delete_record(session=session, db_obj=beat)
    return Message(message="Beat deleted successfully")


# Dependencies between beats

@dependencies_router.get("", response_model=list[BeatDependencyWithNames])
def read_dependencies(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    beat_id: uuid.UUID | None = Query(default=None, alias="beatId"),
) -> Any:
    _require_scope(project_id, beat_id)
    source = aliased(Beat)
    target = aliased(Beat)
    statement = (
        select(BeatDependency, source.name, target.name)
        .outerjoin(source, BeatDependency.source_beat_id == source.id)
        .outerjoin(target, BeatDependency.target_beat_id == target.id)
    )
    if beat_id:
        statement = statement.where(
            or_(BeatDependency.source_beat_id == beat_id, BeatDependency.target_beat_id == beat_id)
        )
    else:
        statement = statement.where(source.project_id == project_id)

    return [
        BeatDependencyWithNames.model_validate(
            dependency, update={"source_name": source_name, "target_name": target_name}
        )
        for dependency, source_name, target_name in session.exec(statement).all()
    ]


@dependencies_router.post("", response_model=BeatDependencyPublic, status_code=201)
def create_dependency(*, session: SessionDep, dependency_in: BeatDependencyCreate) -> Any:
    get_or_404(session, Beat, dependency_in.source_beat_id, "Source beat")
    get_or_404(session, Beat, dependency_in.target_beat_id, "Target beat")
    return create_record(session=session, model=BeatDependency, obj_in=dependency_in)


@dependencies_router.delete("")
def delete_dependency(session: SessionDep, id: uuid.UUID | None = None) -> Any:
    if id is None:
        raise BadRequestError("Dependency id is required")
    dependency = session.get(BeatDependency, id)
    if dependency:
        delete_record(session=session, db_obj=dependency)
    return {"success": True}


# Pacing suggestions

def _with_beat_name(session: Session, suggestion: BeatPacingSuggestion) -> BeatPacingSuggestionPublic:
    beat = session.get(Beat, suggestion.beat_id)
    return BeatPacingSuggestionPublic.model_validate(
        suggestion, update={"beat_name": beat.name if beat else None}
    )


@pacing_router.get("", response_model=list[BeatPacingSuggestionPublic])
def read_pacing_suggestions(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    beat_id: uuid.UUID | None = Query(default=None, alias="beatId"),
    applied: bool | None = None,
) -> Any:
    _require_scope(project_id, beat_id)
    statement = select(BeatPacingSuggestion, Beat.name).outerjoin(
        Beat, BeatPacingSuggestion.beat_id == Beat.id
    )
    if beat_id:
        statement = statement.where(BeatPacingSuggestion.beat_id == beat_id)
    else:
        statement = statement.where(BeatPacingSuggestion.project_id == project_id)
    if applied is not None:
        statement = statement.where(BeatPacingSuggestion.applied == applied)
    statement = statement.order_by(
        col(BeatPacingSuggestion.confidence).desc(),
        col(BeatPacingSuggestion.created_at).desc(),
    )

    return [
        BeatPacingSuggestionPublic.model_validate(suggestion, update={"beat_name": beat_name})
        for suggestion, beat_name in session.exec(statement).all()
    ]


@pacing_router.post("", response_model=BeatPacingSuggestionPublic, status_code=201)
def create_pacing_suggestion(
    *, session: SessionDep, suggestion_in: BeatPacingSuggestionCreate
) -> Any:
    get_or_404(session, Beat, suggestion_in.beat_id, "Beat")
    suggestion = create_record(session=session, model=BeatPacingSuggestion, obj_in=suggestion_in)
    return _with_beat_name(session, suggestion)


@pacing_router.put("", response_model=BeatPacingSuggestionPublic)
def update_pacing_suggestion(
    *,
    session: SessionDep,
    suggestion_in: BeatPacingSuggestionUpdate,
    id: uuid.UUID | None = None,
) -> Any:
    if id is None:
        raise BadRequestError("Suggestion id is required")
    suggestion = get_or_404(session, BeatPacingSuggestion, id, "Pacing suggestion")
    suggestion = update_record(
        session=session, db_obj=suggestion, obj_in={"applied": suggestion_in.applied}
    )
    return _with_beat_name(session, suggestion)


@pacing_router.delete("")
def delete_pacing_suggestion(session: SessionDep, id: uuid.UUID | None = None) -> Any:
    if id is None:
        raise BadRequestError("Suggestion id is required")
    suggestion = session.get(BeatPacingSuggestion, id)
    if suggestion:
        delete_record(session=session, db_obj=suggestion)
    return {"success": True}
