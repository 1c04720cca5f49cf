import logging
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, col, select

from studio.core.errors import ConflictError, NotFoundError
from studio.models import (
    AvatarTimelineEntry,
    AvatarTimelineEntryCreate,
    Character,
    CharacterAccessory,
    CharacterAccessoryUpdate,
    CharacterOutfit,
    CharacterOutfitCreate,
    CharacterOutfitUpdate,
    Faction,
    FactionAchievement,
    FactionEvent,
    FactionLore,
    FactionMedia,
    FactionRelationship,
    OutfitAccessory,
    OutfitAccessoryCreate,
    SceneChoice,
    SceneChoiceCreate,
    get_datetime_utc,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


def get_or_404(session: Session, model: type[ModelT], id: uuid.UUID, label: str) -> ModelT:
    db_obj = session.get(model, id)
    if not db_obj:
        raise NotFoundError(f"{label} not found")
    return db_obj


def create_record(
    *, session: Session, model: type[ModelT], obj_in: SQLModel, update: dict | None = None
) -> ModelT:
    db_obj = model.model_validate(obj_in, update=update)
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def update_record(*, session: Session, db_obj: ModelT, obj_in: SQLModel | dict) -> ModelT:
    data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
    extra_data = {}
    if "updated_at" in type(db_obj).model_fields:
        extra_data["updated_at"] = get_datetime_utc()
    db_obj.sqlmodel_update(data, update=extra_data)
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def delete_record(*, session: Session, db_obj: SQLModel) -> None:
    session.delete(db_obj)
    session.commit()


# Scene choices

def next_choice_order(*, session: Session, scene_id: uuid.UUID) -> int:
    current_max = session.exec(
        select(func.max(SceneChoice.order)).where(SceneChoice.scene_id == scene_id)
    ).one()
    return 0 if current_max is None else current_max + 1


def list_scene_choices(*, session: Session, scene_id: uuid.UUID) -> list[SceneChoice]:
    statement = (
        select(SceneChoice)
        .where(SceneChoice.scene_id == scene_id)
        .order_by(col(SceneChoice.order))
    )
    return list(session.exec(statement).all())


def create_scene_choice(*, session: Session, choice_in: SceneChoiceCreate) -> SceneChoice:
    order = choice_in.order
    if order is None:
        order = next_choice_order(session=session, scene_id=choice_in.scene_id)
    db_choice = SceneChoice.model_validate(
        choice_in,
        update={
            "label": choice_in.label.strip(),
            "order": order,
            "meta": choice_in.meta or {},
        },
    )
    session.add(db_choice)
    session.commit()
    session.refresh(db_choice)
    return db_choice


def reorder_scene_choices(
    *, session: Session, scene_id: uuid.UUID, choice_ids: list[uuid.UUID]
) -> list[SceneChoice]:
    """Assign orders 0..n-1 following `choice_ids`; ids from other scenes are left alone."""
    now = get_datetime_utc()
    for index, choice_id in enumerate(choice_ids):
        db_choice = session.get(SceneChoice, choice_id)
        if db_choice is None or db_choice.scene_id != scene_id:
            continue
        db_choice.order = index
        db_choice.updated_at = now
        session.add(db_choice)
    session.commit()
    return list_scene_choices(session=session, scene_id=scene_id)


# Factions

def _faction_members(session: Session, faction_id: uuid.UUID) -> list[dict[str, Any]]:
    rows = session.exec(
        select(Character).where(Character.faction_id == faction_id).order_by(col(Character.name))
    ).all()
    return [
        {"id": c.id, "name": c.name, "avatar_url": c.avatar_url, "faction_id": c.faction_id}
        for c in rows
    ]


def _faction_relationships(session: Session, faction_id: uuid.UUID) -> list[FactionRelationship]:
    return list(session.exec(
        select(FactionRelationship).where(
            or_(
                FactionRelationship.faction_a_id == faction_id,
                FactionRelationship.faction_b_id == faction_id,
            )
        )
    ).all())


def _faction_media(session: Session, faction_id: uuid.UUID) -> list[FactionMedia]:
    return list(session.exec(
        select(FactionMedia)
        .where(FactionMedia.faction_id == faction_id)
        .order_by(col(FactionMedia.uploaded_at).desc())
    ).all())


def _faction_lore(session: Session, faction_id: uuid.UUID) -> list[FactionLore]:
    return list(session.exec(
        select(FactionLore)
        .where(FactionLore.faction_id == faction_id)
        .order_by(col(FactionLore.created_at).desc())
    ).all())


def _faction_achievements(session: Session, faction_id: uuid.UUID) -> list[FactionAchievement]:
    return list(session.exec(
        select(FactionAchievement)
        .where(FactionAchievement.faction_id == faction_id)
        .order_by(col(FactionAchievement.earned_date).desc())
    ).all())


def _faction_events(session: Session, faction_id: uuid.UUID) -> list[FactionEvent]:
    return list(session.exec(
        select(FactionEvent)
        .where(FactionEvent.faction_id == faction_id)
        .order_by(col(FactionEvent.date))
    ).all())


def _faction_section(
    session: Session,
    label: str,
    faction_id: uuid.UUID,
    query: Callable[[Session, uuid.UUID], list[Any]],
) -> list[Any]:
    """Run one summary section. A failed query is logged and rolled back so later sections still run."""
    try:
        return query(session, faction_id)
    except SQLAlchemyError as e:
        logger.warning("Error fetching faction %s for %s: %s", label, faction_id, e)
        session.rollback()
        return []


def get_faction_summary(*, session: Session, faction_id: uuid.UUID) -> dict[str, Any]:
    faction = get_or_404(session, Faction, faction_id, "Faction")
    sections = {
        "members": _faction_members,
        "relationships": _faction_relationships,
        "media": _faction_media,
        "lore": _faction_lore,
        "achievements": _faction_achievements,
        "events": _faction_events,
    }
    summary: dict[str, Any] = {
        label: _faction_section(session, label, faction_id, query)
        for label, query in sections.items()
    }
    return {"faction": faction, **summary}


# Wardrobe

def _clear_other_defaults(*, session: Session, character_id: uuid.UUID, keep_id: uuid.UUID) -> None:
    others = session.exec(
        select(CharacterOutfit).where(
            CharacterOutfit.character_id == character_id,
            CharacterOutfit.is_default == True,  # noqa: E712
            CharacterOutfit.id != keep_id,
        )
    ).all()
    for outfit in others:
        outfit.is_default = False
        session.add(outfit)


def create_outfit(*, session: Session, outfit_in: CharacterOutfitCreate) -> CharacterOutfit:
    """A character has at most one default outfit; a new default demotes the old one."""
    db_outfit = CharacterOutfit.model_validate(outfit_in)
    session.add(db_outfit)
    if db_outfit.is_default:
        _clear_other_defaults(session=session, character_id=db_outfit.character_id, keep_id=db_outfit.id)
    session.commit()
    session.refresh(db_outfit)
    return db_outfit


def update_outfit(
    *, session: Session, db_outfit: CharacterOutfit, outfit_in: CharacterOutfitUpdate
) -> CharacterOutfit:
    data = outfit_in.model_dump(exclude_unset=True)
    if data.get("is_default"):
        _clear_other_defaults(session=session, character_id=db_outfit.character_id, keep_id=db_outfit.id)
    return update_record(session=session, db_obj=db_outfit, obj_in=data)


def update_accessory(
    *, session: Session, db_accessory: CharacterAccessory, accessory_in: CharacterAccessoryUpdate
) -> CharacterAccessory:
    data = accessory_in.model_dump(exclude_unset=True)
    new_state = data.get("current_state")
    if new_state is not None and new_state != db_accessory.current_state:
        data["state_changed_at"] = get_datetime_utc()
    return update_record(session=session, db_obj=db_accessory, obj_in=data)


def link_accessory_to_outfit(
    *, session: Session, outfit_id: uuid.UUID, link_in: OutfitAccessoryCreate
) -> OutfitAccessory:
    db_link = OutfitAccessory.model_validate(link_in, update={"outfit_id": outfit_id})
    session.add(db_link)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if "unique" in str(e.orig).lower():
            raise ConflictError("Accessory already linked to this outfit") from e
        raise
    session.refresh(db_link)
    return db_link


# Avatar timeline

def next_timeline_order(*, session: Session, character_id: uuid.UUID) -> int:
    current_max = session.exec(
        select(func.max(AvatarTimelineEntry.timeline_order)).where(
            AvatarTimelineEntry.character_id == character_id
        )
    ).one()
    return 0 if current_max is None else current_max + 1


def create_timeline_entry(
    *, session: Session, entry_in: AvatarTimelineEntryCreate
) -> AvatarTimelineEntry:
    order = entry_in.timeline_order
    if order is None:
        order = next_timeline_order(session=session, character_id=entry_in.character_id)
    db_entry = AvatarTimelineEntry.model_validate(entry_in, update={"timeline_order": order})
    session.add(db_entry)
    session.commit()
    session.refresh(db_entry)
    return db_entry


def summarize_timeline(character_id: uuid.UUID, entries: list[AvatarTimelineEntry]) -> dict[str, Any]:
    """Evolution summary for entries already sorted by `timeline_order`."""
    if not entries:
        return {
            "characterId": character_id,
            "totalEntries": 0,
            "milestoneCount": 0,
            "transformationBreakdown": {},
            "ageStageProgression": [],
            "firstEntry": None,
            "latestEntry": None,
            "actsSpanned": 0,
            "scenesSpanned": 0,
        }

    breakdown: dict[str, int] = {}
    for entry in entries:
        key = entry.transformation_type or "unknown"
        breakdown[key] = breakdown.get(key, 0) + 1

    def brief(entry: AvatarTimelineEntry) -> dict[str, Any]:
        return {"id": entry.id, "avatarUrl": entry.avatar_url, "createdAt": entry.created_at}

    return {
        "characterId": character_id,
        "totalEntries": len(entries),
        "milestoneCount": sum(1 for e in entries if e.is_milestone),
        "transformationBreakdown": breakdown,
        "ageStageProgression": [
            {"stage": e.age_stage, "entryId": e.id, "timestamp": e.created_at}
            for e in entries
            if e.age_stage
        ],
        "firstEntry": brief(entries[0]),
        "latestEntry": brief(entries[-1]),
        "actsSpanned": len({e.act_id for e in entries if e.act_id}),
        "scenesSpanned": len({e.scene_id for e in entries if e.scene_id}),
    }
