import uuid
from typing import Any

from fastapi import APIRouter, Query
from sqlmodel import Session, col, select

from studio.api.deps import SessionDep
from studio.core.errors import BadRequestError
from studio.crud import (
    create_record,
    create_scene_choice,
    delete_record,
    get_or_404,
    reorder_scene_choices,
    update_record,
)
from studio.models import (
    Act,
    Message,
    Scene,
    SceneChoice,
    SceneChoiceCreate,
    SceneChoicePublic,
    SceneChoiceReorder,
    SceneChoiceUpdate,
    SceneCreate,
    ScenePublic,
    SceneUpdate,
)

router = APIRouter()
choices_router = APIRouter()


def _check_act(session: Session, act_id: uuid.UUID, project_id: uuid.UUID) -> None:
    act = get_or_404(session, Act, act_id, "Act")
    if act.project_id != project_id:
        raise BadRequestError("Act does not belong to the scene's project")


@router.post("", response_model=ScenePublic, status_code=201)
def create_scene(*, session: SessionDep, scene_in: SceneCreate) -> Any:
    _check_act(session, scene_in.act_id, scene_in.project_id)
    return create_record(session=session, model=Scene, obj_in=scene_in)


@router.get("", response_model=list[ScenePublic])
def read_scenes(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    act_id: uuid.UUID | None = Query(default=None, alias="actId"),
) -> Any:
    statement = select(Scene)
    if project_id:
        statement = statement.where(Scene.project_id == project_id)
    if act_id:
        statement = statement.where(Scene.act_id == act_id)
    return session.exec(statement.order_by(col(Scene.order))).all()


@router.get("/{id}", response_model=ScenePublic)
def read_scene(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Scene, id, "Scene")


@router.put("/{id}", response_model=ScenePublic)
def update_scene(*, id: uuid.UUID, session: SessionDep, scene_in: SceneUpdate) -> Any:
    scene = get_or_404(session, Scene, id, "Scene")
    if scene_in.act_id is not None:
        _check_act(session, scene_in.act_id, scene.project_id)
    return update_record(session=session, db_obj=scene, obj_in=scene_in)


@router.delete("/{id}")
def delete_scene(id: uuid.UUID, session: SessionDep) -> Message:
    scene = get_or_404(session, Scene, id, "Scene")
    delete_record(session=session, db_obj=scene)
    return Message(message="Scene deleted successfully")


# Scene choices: branching links between scenes

@choices_router.get("", response_model=list[SceneChoicePublic])
def read_scene_choices(
    session: SessionDep,
    scene_id: uuid.UUID | None = None,
    project_id: uuid.UUID | None = None,
    target_scene_id: uuid.UUID | None = None,
) -> Any:
    statement = select(SceneChoice)
    if scene_id:
        statement = statement.where(SceneChoice.scene_id == scene_id)
    if project_id:
        statement = statement.where(SceneChoice.project_id == project_id)
    if target_scene_id:
        statement = statement.where(SceneChoice.target_scene_id == target_scene_id)
    return session.exec(statement.order_by(col(SceneChoice.order))).all()


@choices_router.post("", response_model=SceneChoicePublic, status_code=201)
def create_choice(*, session: SessionDep, choice_in: SceneChoiceCreate) -> Any:
    if not choice_in.label.strip():
        raise BadRequestError("label is required and must be a non-empty string")
    get_or_404(session, Scene, choice_in.scene_id, "Scene")
    return create_scene_choice(session=session, choice_in=choice_in)


@choices_router.put("", response_model=SceneChoicePublic)
def update_choice(*, session: SessionDep, choice_in: SceneChoiceUpdate) -> Any:
    choice = get_or_404(session, SceneChoice, choice_in.id, "Scene choice")
    data = choice_in.model_dump(exclude_unset=True, exclude={"id"})
    if "label" in data:
        if not data["label"] or not data["label"].strip():
            raise BadRequestError("label must be a non-empty string")
        data["label"] = data["label"].strip()
    if "meta" in data and data["meta"] is None:
        data["meta"] = {}
    return update_record(session=session, db_obj=choice, obj_in=data)


@choices_router.delete("")
def delete_choice(session: SessionDep, id: uuid.UUID | None = None) -> Any:
    if id is None:
        raise BadRequestError("id is required")
    choice = get_or_404(session, SceneChoice, id, "Scene choice")
    delete_record(session=session, db_obj=choice)
    return {"success": True, "id": id}


@choices_router.patch("", response_model=list[SceneChoicePublic])
def reorder_choices(*, session: SessionDep, reorder_in: SceneChoiceReorder) -> Any:
    return reorder_scene_choices(
        session=session, scene_id=reorder_in.scene_id, choice_ids=reorder_in.choice_ids
    )
