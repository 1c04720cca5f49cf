import uuid
from typing import Any

from fastapi import APIRouter, Query
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.crud import create_record, delete_record, get_or_404, update_record
from studio.models import (
    Act,
    ActCreate,
    ActPublic,
    ActUpdate,
    Message,
    Project,
    ProjectCreate,
    ProjectPublic,
    ProjectUpdate,
)

router = APIRouter()
acts_router = APIRouter()


@router.post("", response_model=ProjectPublic, status_code=201)
def create_project(*, session: SessionDep, project_in: ProjectCreate) -> Any:
    return create_record(session=session, model=Project, obj_in=project_in)


@router.get("", response_model=list[ProjectPublic])
def read_projects(session: SessionDep) -> Any:
    return session.exec(select(Project).order_by(col(Project.created_at).desc())).all()


@router.get("/{id}", response_model=ProjectPublic)
def read_project(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Project, id, "Project")


@router.put("/{id}", response_model=ProjectPublic)
def update_project(*, id: uuid.UUID, session: SessionDep, project_in: ProjectUpdate) -> Any:
    project = get_or_404(session, Project, id, "Project")
    return update_record(session=session, db_obj=project, obj_in=project_in)


@router.delete("/{id}")
def delete_project(id: uuid.UUID, session: SessionDep) -> Message:
    project = get_or_404(session, Project, id, "Project")
    delete_record(session=session, db_obj=project)
    return Message(message="Project deleted successfully")


@router.get("/{id}/acts", response_model=list[ActPublic])
def read_project_acts(id: uuid.UUID, session: SessionDep) -> Any:
    get_or_404(session, Project, id, "Project")
    return session.exec(select(Act).where(Act.project_id == id).order_by(col(Act.order))).all()


@acts_router.post("", response_model=ActPublic, status_code=201)
def create_act(*, session: SessionDep, act_in: ActCreate) -> Any:
    get_or_404(session, Project, act_in.project_id, "Project")
    return create_record(session=session, model=Act, obj_in=act_in)


@acts_router.get("", response_model=list[ActPublic])
def read_acts(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
) -> Any:
    statement = select(Act)
    if project_id:
        statement = statement.where(Act.project_id == project_id)
    return session.exec(statement.order_by(col(Act.order))).all()


@acts_router.get("/{id}", response_model=ActPublic)
def read_act(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Act, id, "Act")


@acts_router.put("/{id}", response_model=ActPublic)
def update_act(*, id: uuid.UUID, session: SessionDep, act_in: ActUpdate) -> Any:
    act = get_or_404(session, Act, id, "Act")
    return update_record(session=session, db_obj=act, obj_in=act_in)


@acts_router.delete("/{id}")
def delete_act(id: uuid.UUID, session: SessionDep) -> Message:
    act = get_or_404(session, Act, id, "Act")
    delete_record(session=session, db_obj=act)
    return Message(message="Act deleted successfully")
