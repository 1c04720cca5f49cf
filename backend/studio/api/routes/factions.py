import uuid
from typing import Any

from fastapi import APIRouter, Query
from sqlalchemy import or_
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.crud import (
    create_record,
    delete_record,
    get_faction_summary,
    get_or_404,
    update_record,
)
from studio.models import (
    Faction,
    FactionAchievement,
    FactionAchievementCreate,
    FactionAchievementPublic,
    FactionAchievementUpdate,
    FactionCreate,
    FactionEvent,
    FactionEventCreate,
    FactionEventPublic,
    FactionEventUpdate,
    FactionLore,
    FactionLoreCreate,
    FactionLorePublic,
    FactionLoreUpdate,
    FactionMedia,
    FactionMediaCreate,
    FactionMediaPublic,
    FactionMediaUpdate,
    FactionPublic,
    FactionRelationship,
    FactionRelationshipCreate,
    FactionRelationshipPublic,
    FactionRelationshipUpdate,
    FactionUpdate,
    Message,
    Project,
)

router = APIRouter()
relationships_router = APIRouter()
lore_router = APIRouter()
media_router = APIRouter()
achievements_router = APIRouter()
events_router = APIRouter()


# Factions

@router.post("", response_model=FactionPublic, status_code=201)
def create_faction(*, session: SessionDep, faction_in: FactionCreate) -> Any:
    get_or_404(session, Project, faction_in.project_id, "Project")
    return create_record(session=session, model=Faction, obj_in=faction_in)


@router.get("", response_model=list[FactionPublic])
def read_factions(
    session: SessionDep,
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
) -> Any:
    statement = select(Faction)
    if project_id:
        statement = statement.where(Faction.project_id == project_id)
    return session.exec(statement.order_by(col(Faction.name))).all()


@router.get("/{id}", response_model=FactionPublic)
def read_faction(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Faction, id, "Faction")


@router.get("/{id}/summary")
def read_faction_summary(id: uuid.UUID, session: SessionDep) -> Any:
    """Faction with its members, relationships, media, lore, achievements and events."""
    summary = get_faction_summary(session=session, faction_id=id)
    summary["faction"] = FactionPublic.model_validate(summary["faction"])
    return summary


@router.put("/{id}", response_model=FactionPublic)
def update_faction(*, id: uuid.UUID, session: SessionDep, faction_in: FactionUpdate) -> Any:
    faction = get_or_404(session, Faction, id, "Faction")
    return update_record(session=session, db_obj=faction, obj_in=faction_in)


@router.delete("/{id}")
def delete_faction(id: uuid.UUID, session: SessionDep) -> Message:
    faction = get_or_404(session, Faction, id, "Faction")
    delete_record(session=session, db_obj=faction)
    return Message(message="Faction deleted successfully")


# Relationships

@relationships_router.post("", response_model=FactionRelationshipPublic, status_code=201)
def create_relationship(*, session: SessionDep, relationship_in: FactionRelationshipCreate) -> Any:
    get_or_404(session, Faction, relationship_in.faction_a_id, "Faction")
    get_or_404(session, Faction, relationship_in.faction_b_id, "Faction")
    return create_record(session=session, model=FactionRelationship, obj_in=relationship_in)


@relationships_router.get("", response_model=list[FactionRelationshipPublic])
def read_relationships(
    session: SessionDep,
    faction_id: uuid.UUID | None = Query(default=None, alias="factionId"),
) -> Any:
    statement = select(FactionRelationship)
    if faction_id:
        statement = statement.where(
            or_(
                FactionRelationship.faction_a_id == faction_id,
                FactionRelationship.faction_b_id == faction_id,
            )
        )
    return session.exec(statement.order_by(col(FactionRelationship.created_at))).all()


@relationships_router.get("/{id}", response_model=FactionRelationshipPublic)
def read_relationship(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, FactionRelationship, id, "Faction relationship")


@relationships_router.put("/{id}", response_model=FactionRelationshipPublic)
def update_relationship(
    *, id: uuid.UUID, session: SessionDep, relationship_in: FactionRelationshipUpdate
) -> Any:
    relationship = get_or_404(session, FactionRelationship, id, "Faction relationship")
    return update_record(session=session, db_obj=relationship, obj_in=relationship_in)


@relationships_router.delete("/{id}")
def delete_relationship(id: uuid.UUID, session: SessionDep) -> Message:
    relationship = get_or_404(session, FactionRelationship, id, "Faction relationship")
    delete_record(session=session, db_obj=relationship)
    return Message(message="Faction relationship deleted successfully")


# Lore

@lore_router.post("", response_model=FactionLorePublic, status_code=201)
def create_lore(*, session: SessionDep, lore_in: FactionLoreCreate) -> Any:
    get_or_404(session, Faction, lore_in.faction_id, "Faction")
    return create_record(session=session, model=FactionLore, obj_in=lore_in)


@lore_router.get("", response_model=list[FactionLorePublic])
def read_lore_entries(
    session: SessionDep,
    faction_id: uuid.UUID | None = Query(default=None, alias="factionId"),
    category: str | None = None,
) -> Any:
    statement = select(FactionLore)
    if faction_id:
        statement = statement.where(FactionLore.faction_id == faction_id)
    if category:
        statement = statement.where(FactionLore.category == category)
    return session.exec(statement.order_by(col(FactionLore.created_at).desc())).all()


@lore_router.get("/{id}", response_model=FactionLorePublic)
def read_lore(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, FactionLore, id, "Lore entry")


@lore_router.put("/{id}", response_model=FactionLorePublic)
def update_lore(*, id: uuid.UUID, session: SessionDep, lore_in: FactionLoreUpdate) -> Any:
    lore = get_or_404(session, FactionLore, id, "Lore entry")
    return update_record(session=session, db_obj=lore, obj_in=lore_in)


@lore_router.delete("/{id}")
def delete_lore(id: uuid.UUID, session: SessionDep) -> Message:
    lore = get_or_404(session, FactionLore, id, "Lore entry")
    delete_record(session=session, db_obj=lore)
    return Message(message="Lore entry deleted successfully")


# Media

@media_router.post("", response_model=FactionMediaPublic, status_code=201)
def create_media(*, session: SessionDep, media_in: FactionMediaCreate) -> Any:
    get_or_404(session, Faction, media_in.faction_id, "Faction")
    return create_record(session=session, model=FactionMedia, obj_in=media_in)


@media_router.get("", response_model=list[FactionMediaPublic])
def read_media_items(
    session: SessionDep,
    faction_id: uuid.UUID | None = Query(default=None, alias="factionId"),
) -> Any:
    statement = select(FactionMedia)
    if faction_id:
        statement = statement.where(FactionMedia.faction_id == faction_id)
    return session.exec(statement.order_by(col(FactionMedia.uploaded_at).desc())).all()


@media_router.get("/{id}", response_model=FactionMediaPublic)
def read_media(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, FactionMedia, id, "Media")


@media_router.put("/{id}", response_model=FactionMediaPublic)
def update_media(*, id: uuid.UUID, session: SessionDep, media_in: FactionMediaUpdate) -> Any:
    media = get_or_404(session, FactionMedia, id, "Media")
    return update_record(session=session, db_obj=media, obj_in=media_in)


@media_router.delete("/{id}")
def delete_media(id: uuid.UUID, session: SessionDep) -> Message:
    media = get_or_404(session, FactionMedia, id, "Media")
    delete_record(session=session, db_obj=media)
    return Message(message="Media deleted successfully")


# Achievements

@achievements_router.post("", response_model=FactionAchievementPublic, status_code=201)
def create_achievement(*, session: SessionDep, achievement_in: FactionAchievementCreate) -> Any:
    get_or_404(session, Faction, achievement_in.faction_id, "Faction")
    return create_record(session=session, model=FactionAchievement, obj_in=achievement_in)


@achievements_router.get("", response_model=list[FactionAchievementPublic])
def read_achievements(
    session: SessionDep,
    faction_id: uuid.UUID | None = Query(default=None, alias="factionId"),
) -> Any:
    statement = select(FactionAchievement)
    if faction_id:
        statement = statement.where(FactionAchievement.faction_id == faction_id)
    return session.exec(statement.order_by(col(FactionAchievement.earned_date).desc())).all()


@achievements_router.get("/{id}", response_model=FactionAchievementPublic)
def read_achievement(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, FactionAchievement, id, "Achievement")


@achievements_router.put("/{id}", response_model=FactionAchievementPublic)
def update_achievement(
    *, id: uuid.UUID, session: SessionDep, achievement_in: FactionAchievementUpdate
) -> Any:
    achievement = get_or_404(session, FactionAchievement, id, "Achievement")
    return update_record(session=session, db_obj=achievement, obj_in=achievement_in)


@achievements_router.delete("/{id}")
def delete_achievement(id: uuid.UUID, session: SessionDep) -> Message:
    achievement = get_or_404(session, FactionAchievement, id, "Achievement")
    delete_record(session=session, db_obj=achievement)
    return Message(message="Achievement deleted successfully")


# Events

@events_router.post("", response_model=FactionEventPublic, status_code=201)
def create_event(*, session: SessionDep, event_in: FactionEventCreate) -> Any:
    get_or_404(session, Faction, event_in.faction_id, "Faction")
    return create_record(session=session, model=FactionEvent, obj_in=event_in)


@events_router.get("", response_model=list[FactionEventPublic])
def read_events(
    session: SessionDep,
    faction_id: uuid.UUID | None = Query(default=None, alias="factionId"),
) -> Any:
    statement = select(FactionEvent)
    if faction_id:
        statement = statement.where(FactionEvent.faction_id == faction_id)
    return session.exec(statement.order_by(col(FactionEvent.date))).all()


@events_router.get("/{id}", response_model=FactionEventPublic)
def read_event(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, FactionEvent, id, "Event")


@events_router.put("/{id}", response_model=FactionEventPublic)
def update_event(*, id: uuid.UUID, session: SessionDep, event_in: FactionEventUpdate) -> Any:
    event = get_or_404(session, FactionEvent, id, "Event")
    return update_record(session=session, db_obj=event, obj_in=event_in)


@events_router.delete("/{id}")
def delete_event(id: uuid.UUID, session: SessionDep) -> Message:
    event = get_or_404(session, FactionEvent, id, "Event")
    delete_record(session=session, db_obj=event)
    return Message(message="Event deleted successfully")
