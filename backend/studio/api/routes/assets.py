import math
import uuid
from typing import Any, Literal

from fastapi import APIRouter, Query
from sqlalchemy import func
from sqlmodel import col, select

from studio.api.deps import SessionDep
from studio.crud import create_record, delete_record, get_or_404, update_record
from studio.models import (
    CHARACTER_ASSET_TYPES,
    STORY_ASSET_TYPES,
    Asset,
    AssetCreate,
    AssetPublic,
    AssetsPage,
    AssetUpdate,
    Message,
)

router = APIRouter()

MAX_PAGE_SIZE = 100
SORTABLE_COLUMNS = {"created_at": Asset.created_at, "name": Asset.name, "type": Asset.type}


@router.get("", response_model=AssetsPage)
def read_assets(
    session: SessionDep,
    category: Literal["character", "story"] | None = None,
    type: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=24, ge=1),
    sort_by: str = Query(default="created_at", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
) -> Any:
    """Paginated asset list; an explicit `type` wins over `category`."""
    limit = min(limit, MAX_PAGE_SIZE)
    statement = select(Asset)
    if type:
        statement = statement.where(Asset.type == type)
    elif category == "character":
        statement = statement.where(col(Asset.type).in_(CHARACTER_ASSET_TYPES))
    elif category == "story":
        statement = statement.where(col(Asset.type).in_(STORY_ASSET_TYPES))

    total = session.exec(select(func.count()).select_from(statement.subquery())).one()

    column = col(SORTABLE_COLUMNS.get(sort_by, Asset.created_at))
    ordering = column.asc() if sort_order == "asc" else column.desc()
    assets = session.exec(
        statement.order_by(ordering).offset((page - 1) * limit).limit(limit)
    ).all()

    return AssetsPage(
        assets=[AssetPublic.model_validate(asset) for asset in assets],
        total_assets=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
        page_size=limit,
    )


@router.post("", response_model=AssetPublic, status_code=201)
def create_asset(*, session: SessionDep, asset_in: AssetCreate) -> Any:
    return create_record(session=session, model=Asset, obj_in=asset_in)


@router.get("/{id}", response_model=AssetPublic)
def read_asset(id: uuid.UUID, session: SessionDep) -> Any:
    return get_or_404(session, Asset, id, "Asset")


@router.put("/{id}", response_model=AssetPublic)
def update_asset(*, id: uuid.UUID, session: SessionDep, asset_in: AssetUpdate) -> Any:
    asset = get_or_404(session, Asset, id, "Asset")
    return update_record(session=session, db_obj=asset, obj_in=asset_in)


@router.delete("/{id}")
def delete_asset(id: uuid.UUID, session: SessionDep) -> Message:
    asset = get_or_404(session, Asset, id, "Asset")
    delete_record(session=session, db_obj=asset)
    return Message(message="Asset deleted successfully")
