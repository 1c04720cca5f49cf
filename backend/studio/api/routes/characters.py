import uuid
from typing import Any

from fastapi import APIRouter, Query
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.crud import create_record, delete_record, get_or_404, update_record
from studio.models import (
    Character,
    CharacterCreate,
    CharacterPublic,
    CharacterUpdate,
    Message,
    Project,
    Trait,
    TraitCreate,
    TraitPublic,
    TraitUpdate,
)

router = APIRouter()
traits_router = APIRouter()


@router.post("", response_model=CharacterPublic, status_code=201)
def create_character(*, session: SessionDep, character_in: CharacterCreate) -> Any:
    get_or_404(session, Project, character_in.project_id, "Project")
    return create_record(session=session, model=Character, obj_in=character_in)


@router.get("", response_model=list[CharacterPublic])
def read_characters(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    faction_id: uuid.UUID | None = Query(default=None, alias="factionId"),
) -> Any:
    statement = select(Character)
    if project_id:
        statement = statement.where(Character.project_id == project_id)
    if faction_id:
        statement = statement.where(Character.faction_id == faction_id)
    return session.exec(statement.order_by(col(Character.name))).all()


@router.get("/{id}", response_model=CharacterPublic)
def read_character(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Character, id, "Character")


@router.put("/{id}", response_model=CharacterPublic)
def update_character(*, id: uuid.UUID, session: SessionDep, character_in: CharacterUpdate) -> Any:
    character = get_or_404(session, Character, id, "Character")
    return update_record(session=session, db_obj=character, obj_in=character_in)


@router.delete("/{id}")
def delete_character(id: uuid.UUID, session: SessionDep) -> Message:
    character = get_or_404(session, Character, id, "Character")
    delete_record(session=session, db_obj=character)
    return Message(message="Character deleted successfully")


@router.get("/{id}/traits", response_model=list[TraitPublic])
def read_character_traits(id: uuid.UUID, session: SessionDep) -> Any:
    get_or_404(session, Character, id, "Character")
    return session.exec(
        select(Trait).where(Trait.character_id == id).order_by(col(Trait.created_at))
    ).all()


@traits_router.post("", response_model=TraitPublic, status_code=201)
def create_trait(*, session: SessionDep, trait_in: TraitCreate) -> Any:
    get_or_404(session, Character, trait_in.character_id, "Character")
    return create_record(session=session, model=Trait, obj_in=trait_in)


@traits_router.get("", response_model=list[TraitPublic])
def read_traits(
    session: SessionDep,
    character_id: uuid.UUID | None = Query(default=None, alias="characterId"),
) -> Any:
    statement = select(Trait)
    if character_id:
        statement = statement.where(Trait.character_id == character_id)
    return session.exec(statement.order_by(col(Trait.created_at))).all()


@traits_router.get("/{id}", response_model=TraitPublic)
def read_trait(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Trait, id, "Trait")


@traits_router.put("/{id}", response_model=TraitPublic)
def update_trait(*, id: uuid.UUID, session: SessionDep, trait_in: TraitUpdate) -> Any:
    trait = get_or_404(session, Trait, id, "Trait")
    return update_record(session=session, db_obj=trait, obj_in=trait_in)


@traits_router.delete("/{id}")
def delete_trait(id: uuid.UUID, session: SessionDep) -> Message:
    trait = get_or_404(session, Trait, id, "Trait")
    delete_record(session=session, db_obj=trait)
    return Message(message="Trait deleted successfully")
