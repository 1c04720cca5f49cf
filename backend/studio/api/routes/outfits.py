import uuid
from typing import Any

from fastapi import APIRouter, Response
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.core.errors import NotFoundError
from studio.crud import (
    create_outfit,
    create_record,
    delete_record,
    get_or_404,
    link_accessory_to_outfit,
    update_accessory,
    update_outfit,
)
from studio.models import (
    Character,
    CharacterAccessory,
    CharacterAccessoryCreate,
    CharacterAccessoryPublic,
    CharacterAccessoryUpdate,
    CharacterOutfit,
    CharacterOutfitCreate,
    CharacterOutfitPublic,
    CharacterOutfitUpdate,
    Message,
    OutfitAccessory,
    OutfitAccessoryCreate,
    OutfitAccessoryPublic,
    OutfitHistory,
    OutfitHistoryCreate,
    OutfitHistoryPublic,
    get_datetime_utc,
)

router = APIRouter()

# Static paths are registered before /{outfit_id} so they are not captured by it.


# Accessories

@router.get("/accessories", response_model=list[CharacterAccessoryPublic])
def read_accessories(
    session: SessionDep,
    character_id: uuid.UUID | None = None,
    current_state: str | None = None,
) -> Any:
    statement = select(CharacterAccessory)
    if character_id:
        statement = statement.where(CharacterAccessory.character_id == character_id)
    if current_state:
        statement = statement.where(CharacterAccessory.current_state == current_state)
    return session.exec(statement.order_by(col(CharacterAccessory.name))).all()


@router.post("/accessories", response_model=CharacterAccessoryPublic, status_code=201)
def create_accessory(*, session: SessionDep, accessory_in: CharacterAccessoryCreate) -> Any:
    get_or_404(session, Character, accessory_in.character_id, "Character")
    return create_record(session=session, model=CharacterAccessory, obj_in=accessory_in)


@router.get("/accessories/{accessory_id}", response_model=CharacterAccessoryPublic)
def read_accessory(accessory_id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, CharacterAccessory, accessory_id, "Accessory")


@router.patch("/accessories/{accessory_id}", response_model=CharacterAccessoryPublic)
def patch_accessory(
    *, accessory_id: uuid.UUID, session: SessionDep, accessory_in: CharacterAccessoryUpdate
) -> Any:
    accessory = get_or_404(session, CharacterAccessory, accessory_id, "Accessory")
    return update_accessory(session=session, db_accessory=accessory, accessory_in=accessory_in)


@router.delete("/accessories/{accessory_id}", status_code=204)
def delete_accessory(accessory_id: uuid.UUID, session: SessionDep) -> Response:
    accessory = get_or_404(session, CharacterAccessory, accessory_id, "Accessory")
    delete_record(session=session, db_obj=accessory)
    return Response(status_code=204)


# Outfit history: append-only log of what a character wore and when

@router.get("/history", response_model=list[OutfitHistoryPublic])
def read_outfit_history(
    session: SessionDep,
    character_id: uuid.UUID | None = None,
    scene_id: uuid.UUID | None = None,
) -> Any:
    statement = select(OutfitHistory)
    if character_id:
        statement = statement.where(OutfitHistory.character_id == character_id)
    if scene_id:
        statement = statement.where(OutfitHistory.scene_id == scene_id)
    return session.exec(statement.order_by(col(OutfitHistory.start_time))).all()


@router.post("/history", response_model=OutfitHistoryPublic, status_code=201)
def create_outfit_history(*, session: SessionDep, history_in: OutfitHistoryCreate) -> Any:
    get_or_404(session, Character, history_in.character_id, "Character")
    return create_record(
        session=session,
        model=OutfitHistory,
        obj_in=history_in,
        update={"start_time": history_in.start_time or get_datetime_utc()},
    )


# Outfits

@router.get("", response_model=list[CharacterOutfitPublic])
def read_outfits(
    session: SessionDep,
    character_id: uuid.UUID | None = None,
    outfit_type: str | None = None,
) -> Any:
    statement = select(CharacterOutfit)
    if character_id:
        statement = statement.where(CharacterOutfit.character_id == character_id)
    if outfit_type:
        statement = statement.where(CharacterOutfit.outfit_type == outfit_type)
    return session.exec(
        statement.order_by(col(CharacterOutfit.sort_order), col(CharacterOutfit.name))
    ).all()


@router.post("", response_model=CharacterOutfitPublic, status_code=201)
def create_new_outfit(*, session: SessionDep, outfit_in: CharacterOutfitCreate) -> Any:
    get_or_404(session, Character, outfit_in.character_id, "Character")
    return create_outfit(session=session, outfit_in=outfit_in)


@router.get("/{outfit_id}", response_model=CharacterOutfitPublic)
def read_outfit(outfit_id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, CharacterOutfit, outfit_id, "Outfit")


@router.put("/{outfit_id}", response_model=CharacterOutfitPublic)
def update_existing_outfit(
    *, outfit_id: uuid.UUID, session: SessionDep, outfit_in: CharacterOutfitUpdate
) -> Any:
    outfit = get_or_404(session, CharacterOutfit, outfit_id, "Outfit")
    return update_outfit(session=session, db_outfit=outfit, outfit_in=outfit_in)


@router.delete("/{outfit_id}")
def delete_outfit(outfit_id: uuid.UUID, session: SessionDep) -> Message:
    outfit = get_or_404(session, CharacterOutfit, outfit_id, "Outfit")
    delete_record(session=session, db_obj=outfit)
    return Message(message="Outfit deleted successfully")


# Accessories linked to an outfit

@router.get("/{outfit_id}/accessories")
def read_outfit_accessories(outfit_id: uuid.UUID, session: SessionDep) -> Any:
    get_or_404(session, CharacterOutfit, outfit_id, "Outfit")
    rows = session.exec(
        select(OutfitAccessory, CharacterAccessory)
        .join(CharacterAccessory, OutfitAccessory.accessory_id == CharacterAccessory.id)
        .where(OutfitAccessory.outfit_id == outfit_id)
        .order_by(col(OutfitAccessory.created_at))
    ).all()
    return [
        {
            **OutfitAccessoryPublic.model_validate(link).model_dump(),
            "accessory": CharacterAccessoryPublic.model_validate(accessory),
        }
        for link, accessory in rows
    ]


@router.post("/{outfit_id}/accessories", response_model=OutfitAccessoryPublic, status_code=201)
def link_outfit_accessory(
    *, outfit_id: uuid.UUID, session: SessionDep, link_in: OutfitAccessoryCreate
) -> Any:
    get_or_404(session, CharacterOutfit, outfit_id, "Outfit")
    get_or_404(session, CharacterAccessory, link_in.accessory_id, "Accessory")
    return link_accessory_to_outfit(session=session, outfit_id=outfit_id, link_in=link_in)


@router.delete("/{outfit_id}/accessories/{accessory_id}", status_code=204)
def unlink_outfit_accessory(
    outfit_id: uuid.UUID, accessory_id: uuid.UUID, session: SessionDep
) -> Response:
    link = session.exec(
        select(OutfitAccessory).where(
            OutfitAccessory.outfit_id == outfit_id,
            OutfitAccessory.accessory_id == accessory_id,
        )
    ).first()
    if link is None:
        raise NotFoundError("Accessory is not linked to this outfit")
    delete_record(session=session, db_obj=link)
    return Response(status_code=204)
