import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


def _created_at() -> Any:
    return Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


def _updated_at() -> Any:
    return Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


# Generic message
class Message(SQLModel):
    success: bool = True
    message: str


# Request bodies of the AI endpoints use camelCase keys
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Projects, acts and scenes

class ProjectBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None)

class ProjectCreate(ProjectBase):
    pass

class ProjectUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None

class Project(ProjectBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class ProjectPublic(ProjectBase):
    id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ActBase(SQLModel):
    name: str = Field(min_length=1)
    description: str | None = None
    order: int = 0

class ActCreate(ActBase):
    project_id: uuid.UUID

class ActUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = None

class Act(ActBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class ActPublic(ActBase):
    id: uuid.UUID
    project_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SceneBase(SQLModel):
    name: str = Field(min_length=1)
    description: str | None = None
    order: int = 0

class SceneCreate(SceneBase):
    project_id: uuid.UUID
    act_id: uuid.UUID

class SceneUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = None
    act_id: uuid.UUID | None = None

class Scene(SceneBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    act_id: uuid.UUID = Field(foreign_key="act.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class ScenePublic(SceneBase):
    id: uuid.UUID
    project_id: uuid.UUID
    act_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Branching choices attached to a scene
class SceneChoiceBase(SQLModel):
    label: str
    target_scene_id: uuid.UUID | None = None
    order: int = 0
    condition: str | None = None
    is_hidden: bool = False
    meta: dict = Field(default_factory=dict, sa_type=JSON)

class SceneChoiceCreate(SQLModel):
    scene_id: uuid.UUID
    project_id: uuid.UUID
    label: str
    target_scene_id: uuid.UUID | None = None
    order: int | None = None
    condition: str | None = None
    is_hidden: bool = False
    meta: dict | None = None

class SceneChoiceUpdate(SQLModel):
    id: uuid.UUID
    label: str | None = None
    target_scene_id: uuid.UUID | None = None
    order: int | None = None
    condition: str | None = None
    is_hidden: bool | None = None
    meta: dict | None = None

class SceneChoiceReorder(SQLModel):
    scene_id: uuid.UUID
    choice_ids: list[uuid.UUID] = Field(min_length=1)

class SceneChoice(SceneChoiceBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    scene_id: uuid.UUID = Field(foreign_key="scene.id", index=True, ondelete="CASCADE")
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class SceneChoicePublic(SceneChoiceBase):
    id: uuid.UUID
    scene_id: uuid.UUID
    project_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Characters and traits

class CharacterBase(SQLModel):
    name: str = Field(min_length=1)
    type: str | None = None
    voice: str | None = None
    avatar_url: str | None = None
    transparent_avatar_url: str | None = None
    body_url: str | None = None
    transparent_body_url: str | None = None

class CharacterCreate(CharacterBase):
    project_id: uuid.UUID
    faction_id: uuid.UUID | None = None

class CharacterUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    type: str | None = None
    voice: str | None = None
    faction_id: uuid.UUID | None = None
    avatar_url: str | None = None
    transparent_avatar_url: str | None = None
    body_url: str | None = None
    transparent_body_url: str | None = None

class Character(CharacterBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    faction_id: uuid.UUID | None = Field(
        default=None, foreign_key="faction.id", index=True, ondelete="SET NULL"
    )
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class CharacterPublic(CharacterBase):
    id: uuid.UUID
    project_id: uuid.UUID
    faction_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TraitBase(SQLModel):
    type: str = Field(min_length=1)
    description: str = Field(min_length=1)

class TraitCreate(TraitBase):
    character_id: uuid.UUID

class TraitUpdate(SQLModel):
    type: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)

class Trait(TraitBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    character_id: uuid.UUID = Field(foreign_key="character.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class TraitPublic(TraitBase):
    id: uuid.UUID
    character_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Factions

LoreCategory = Literal["history", "culture", "conflicts", "notable-figures"]
FactionEventType = Literal["founding", "battle", "alliance", "discovery", "ceremony", "conflict", "achievement"]
FactionMediaType = Literal["logo", "banner", "emblem", "screenshot", "lore"]


class FactionBase(SQLModel):
    name: str = Field(min_length=1)
    description: str | None = None
    color: str | None = None
    logo_url: str | None = None

class FactionCreate(FactionBase):
    project_id: uuid.UUID

class FactionUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    color: str | None = None
    logo_url: str | None = None

class Faction(FactionBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class FactionPublic(FactionBase):
    id: uuid.UUID
    project_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FactionRelationshipBase(SQLModel):
    faction_a_id: uuid.UUID
    faction_b_id: uuid.UUID
    relationship_type: str | None = None
    description: str = Field(min_length=1)

class FactionRelationshipCreate(FactionRelationshipBase):
    @model_validator(mode="after")
    def check_distinct_factions(self) -> "FactionRelationshipCreate":
        if self.faction_a_id == self.faction_b_id:
            raise ValueError("a faction cannot have a relationship with itself")
        return self

class FactionRelationshipUpdate(SQLModel):
    relationship_type: str | None = None
    description: str | None = Field(default=None, min_length=1)

class FactionRelationship(FactionRelationshipBase, table=True):
    __table_args__ = (CheckConstraint("faction_a_id != faction_b_id", name="different_factions"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    faction_a_id: uuid.UUID = Field(foreign_key="faction.id", index=True, ondelete="CASCADE")
    faction_b_id: uuid.UUID = Field(foreign_key="faction.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class FactionRelationshipPublic(FactionRelationshipBase):
    id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FactionLoreBase(SQLModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: str
    updated_by: str

class FactionLoreCreate(FactionLoreBase):
    faction_id: uuid.UUID
    category: LoreCategory

class FactionLoreUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    category: LoreCategory | None = None
    updated_by: str | None = None

class FactionLore(FactionLoreBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    faction_id: uuid.UUID = Field(foreign_key="faction.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class FactionLorePublic(FactionLoreBase):
    id: uuid.UUID
    faction_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FactionEventBase(SQLModel):
    title: str = Field(min_length=1)
    description: str
    date: str
    event_type: str
    created_by: str

class FactionEventCreate(FactionEventBase):
    faction_id: uuid.UUID
    event_type: FactionEventType

class FactionEventUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    date: str | None = None
    event_type: FactionEventType | None = None

class FactionEvent(FactionEventBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    faction_id: uuid.UUID = Field(foreign_key="faction.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()

class FactionEventPublic(FactionEventBase):
    id: uuid.UUID
    faction_id: uuid.UUID
    created_at: datetime | None = None


class FactionAchievementBase(SQLModel):
    title: str = Field(min_length=1)
    description: str
    icon_url: str | None = None
    earned_date: str
    members: list = Field(default_factory=list, sa_type=JSON)

class FactionAchievementCreate(FactionAchievementBase):
    faction_id: uuid.UUID

class FactionAchievementUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    icon_url: str | None = None
    earned_date: str | None = None
    members: list | None = None

class FactionAchievement(FactionAchievementBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    faction_id: uuid.UUID = Field(foreign_key="faction.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()

class FactionAchievementPublic(FactionAchievementBase):
    id: uuid.UUID
    faction_id: uuid.UUID
    created_at: datetime | None = None


class FactionMediaBase(SQLModel):
    type: str
    url: str = Field(min_length=1)
    uploader_id: str
    description: str | None = None

class FactionMediaCreate(FactionMediaBase):
    faction_id: uuid.UUID
    type: FactionMediaType

class FactionMediaUpdate(SQLModel):
    type: FactionMediaType | None = None
    url: str | None = Field(default=None, min_length=1)
    description: str | None = None

class FactionMedia(FactionMediaBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    faction_id: uuid.UUID = Field(foreign_key="faction.id", index=True, ondelete="CASCADE")
    uploaded_at: datetime | None = _created_at()

class FactionMediaPublic(FactionMediaBase):
    id: uuid.UUID
    faction_id: uuid.UUID
    uploaded_at: datetime | None = None


# Beats

class BeatBase(SQLModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    description: str | None = None
    order: int = 0
    paragraph_id: str | None = None
    paragraph_title: str | None = None
    completed: bool = False
    default_flag: bool = False

class BeatCreate(BeatBase):
    project_id: uuid.UUID | None = None
    act_id: uuid.UUID | None = None

class BeatUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    type: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = None
    paragraph_id: str | None = None
    paragraph_title: str | None = None
    completed: bool | None = None
    default_flag: bool | None = None

class Beat(BeatBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID | None = Field(
        default=None, foreign_key="project.id", index=True, ondelete="CASCADE"
    )
    act_id: uuid.UUID | None = Field(default=None, foreign_key="act.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class BeatPublic(BeatBase):
    id: uuid.UUID
    project_id: uuid.UUID | None = None
    act_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BeatDependencyBase(SQLModel):
    source_beat_id: uuid.UUID
    target_beat_id: uuid.UUID
    dependency_type: str = "sequential"
    strength: str = "required"

class BeatDependencyCreate(BeatDependencyBase):
    pass

class BeatDependency(BeatDependencyBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    source_beat_id: uuid.UUID = Field(foreign_key="beat.id", index=True, ondelete="CASCADE")
    target_beat_id: uuid.UUID = Field(foreign_key="beat.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()

class BeatDependencyPublic(BeatDependencyBase):
    id: uuid.UUID
    created_at: datetime | None = None

class BeatDependencyWithNames(BeatDependencyPublic):
    source_name: str | None = None
    target_name: str | None = None


class BeatPacingSuggestionBase(SQLModel):
    project_id: uuid.UUID
    beat_id: uuid.UUID
    suggestion_type: str = Field(min_length=1)
    suggested_order: int | None = None
    suggested_duration: int | None = None
    reasoning: str = Field(min_length=1)
    confidence: float = Field(default=0.5, ge=0, le=1)

class BeatPacingSuggestionCreate(BeatPacingSuggestionBase):
    pass

class BeatPacingSuggestionUpdate(SQLModel):
    applied: bool = False

class BeatPacingSuggestion(BeatPacingSuggestionBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    beat_id: uuid.UUID = Field(foreign_key="beat.id", index=True, ondelete="CASCADE")
    applied: bool = False
    created_at: datetime | None = _created_at()

class BeatPacingSuggestionPublic(BeatPacingSuggestionBase):
    id: uuid.UUID
    applied: bool
    created_at: datetime | None = None
    beat_name: str | None = None


# Voices

class VoiceBase(SQLModel):
    voice_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str | None = None
    provider: str = "custom"
    language: str = "en"
    gender: str | None = None
    age_range: str | None = None
    audio_sample_url: str | None = None

class VoiceCreate(VoiceBase):
    project_id: uuid.UUID
    character_id: uuid.UUID | None = None

class VoiceUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    character_id: uuid.UUID | None = None
    provider: str | None = None
    language: str | None = None
    gender: str | None = None
    age_range: str | None = None
    audio_sample_url: str | None = None

class Voice(VoiceBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    voice_id: str = Field(unique=True, index=True, min_length=1)
    project_id: uuid.UUID = Field(foreign_key="project.id", index=True, ondelete="CASCADE")
    character_id: uuid.UUID | None = Field(
        default=None, foreign_key="character.id", ondelete="SET NULL"
    )
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class VoicePublic(VoiceBase):
    id: uuid.UUID
    project_id: uuid.UUID
    character_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Assets

CHARACTER_ASSET_TYPES = ["body", "equipment", "clothing", "background"]
STORY_ASSET_TYPES = ["scenes", "props", "locations"]


class AssetBase(SQLModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1, index=True)
    subcategory: str = ""
    gen: str = ""
    description: str = ""
    image_url: str = ""
    meta: dict = Field(default_factory=dict, sa_type=JSON)

class AssetCreate(AssetBase):
    pass

class AssetUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    type: str | None = Field(default=None, min_length=1)
    subcategory: str | None = None
    gen: str | None = None
    description: str | None = None
    image_url: str | None = None
    meta: dict | None = None

class Asset(AssetBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class AssetPublic(AssetBase):
    id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None

class AssetsPage(SQLModel):
    assets: list[AssetPublic]
    total_assets: int
    total_pages: int
    current_page: int
    page_size: int


# Wardrobe: outfits, accessories and the links between them

OutfitType = Literal[
    "default", "casual", "formal", "combat", "work", "sleep", "disguise",
    "ceremonial", "athletic", "travel", "weather", "custom",
]
AccessoryState = Literal["worn", "stored", "lost", "given", "destroyed"]


class CharacterOutfitBase(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    outfit_type: str = "custom"
    description: str | None = None
    is_default: bool = False
    clothing: dict = Field(default_factory=dict, sa_type=JSON)
    context_tags: list[str] = Field(default_factory=list, sa_type=JSON)
    suitable_locations: list[str] = Field(default_factory=list, sa_type=JSON)
    suitable_weather: list[str] = Field(default_factory=list, sa_type=JSON)
    suitable_time_of_day: list[str] = Field(default_factory=list, sa_type=JSON)
    reference_image_url: str | None = None
    thumbnail_url: str | None = None
    prompt_fragment: str | None = None
    sort_order: int = 0

class CharacterOutfitCreate(CharacterOutfitBase):
    character_id: uuid.UUID
    outfit_type: OutfitType = "custom"

class CharacterOutfitUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    outfit_type: OutfitType | None = None
    description: str | None = None
    is_default: bool | None = None
    clothing: dict | None = None
    context_tags: list[str] | None = None
    suitable_locations: list[str] | None = None
    suitable_weather: list[str] | None = None
    suitable_time_of_day: list[str] | None = None
    reference_image_url: str | None = None
    thumbnail_url: str | None = None
    prompt_fragment: str | None = None
    sort_order: int | None = None

class CharacterOutfit(CharacterOutfitBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    character_id: uuid.UUID = Field(foreign_key="character.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class CharacterOutfitPublic(CharacterOutfitBase):
    id: uuid.UUID
    character_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CharacterAccessoryBase(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=50)
    description: str | None = None
    material: str | None = None
    color: str | None = None
    attributes: dict = Field(default_factory=dict, sa_type=JSON)
    is_signature: bool = False
    story_significance: str | None = None
    current_state: str = "stored"
    reference_image_url: str | None = None
    prompt_fragment: str | None = None

class CharacterAccessoryCreate(CharacterAccessoryBase):
    character_id: uuid.UUID
    acquired_scene_id: uuid.UUID | None = None
    current_state: AccessoryState = "stored"

class CharacterAccessoryUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None
    material: str | None = None
    color: str | None = None
    attributes: dict | None = None
    is_signature: bool | None = None
    story_significance: str | None = None
    acquired_scene_id: uuid.UUID | None = None
    current_state: AccessoryState | None = None
    reference_image_url: str | None = None
    prompt_fragment: str | None = None

class CharacterAccessory(CharacterAccessoryBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    character_id: uuid.UUID = Field(foreign_key="character.id", index=True, ondelete="CASCADE")
    acquired_scene_id: uuid.UUID | None = Field(
        default=None, foreign_key="scene.id", ondelete="SET NULL"
    )
    state_changed_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class CharacterAccessoryPublic(CharacterAccessoryBase):
    id: uuid.UUID
    character_id: uuid.UUID
    acquired_scene_id: uuid.UUID | None = None
    state_changed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OutfitAccessoryBase(SQLModel):
    usage_type: str = "worn"
    position: str | None = None
    is_visible: bool = True

class OutfitAccessoryCreate(OutfitAccessoryBase):
    accessory_id: uuid.UUID

class OutfitAccessory(OutfitAccessoryBase, table=True):
    __table_args__ = (UniqueConstraint("outfit_id", "accessory_id", name="uq_outfit_accessory"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    outfit_id: uuid.UUID = Field(foreign_key="characteroutfit.id", index=True, ondelete="CASCADE")
    accessory_id: uuid.UUID = Field(
        foreign_key="characteraccessory.id", index=True, ondelete="CASCADE"
    )
    created_at: datetime | None = _created_at()

class OutfitAccessoryPublic(OutfitAccessoryBase):
    id: uuid.UUID
    outfit_id: uuid.UUID
    accessory_id: uuid.UUID
    created_at: datetime | None = None


class OutfitHistoryBase(SQLModel):
    character_id: uuid.UUID
    outfit_id: uuid.UUID | None = None
    scene_id: uuid.UUID | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    scene_title: str | None = None
    narrative_reason: str | None = None
    modifications: dict = Field(default_factory=dict, sa_type=JSON)

class OutfitHistoryCreate(OutfitHistoryBase):
    pass

class OutfitHistory(OutfitHistoryBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    character_id: uuid.UUID = Field(foreign_key="character.id", index=True, ondelete="CASCADE")
    outfit_id: uuid.UUID | None = Field(
        default=None, foreign_key="characteroutfit.id", ondelete="SET NULL"
    )
    scene_id: uuid.UUID | None = Field(default=None, foreign_key="scene.id", ondelete="SET NULL")
    start_time: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    end_time: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    created_at: datetime | None = _created_at()

class OutfitHistoryPublic(OutfitHistoryBase):
    id: uuid.UUID
    created_at: datetime | None = None


# Avatar timeline: append-only log of a character's look over the story

class AvatarTimelineEntryBase(SQLModel):
    avatar_url: str = Field(min_length=1)
    thumbnail_url: str | None = None
    scene_id: uuid.UUID | None = None
    act_id: uuid.UUID | None = None
    transformation_type: str = "custom"
    transformation_trigger: str | None = None
    visual_changes: list = Field(default_factory=list, sa_type=JSON)
    age_stage: str | None = None
    estimated_age: int | None = None
    is_milestone: bool = False
    notes: str | None = None
    prompt_used: str | None = None
    generation_params: dict = Field(default_factory=dict, sa_type=JSON)

class AvatarTimelineEntryCreate(AvatarTimelineEntryBase):
    character_id: uuid.UUID
    timeline_order: int | None = None

class AvatarTimelineEntryUpdate(SQLModel):
    avatar_url: str | None = Field(default=None, min_length=1)
    thumbnail_url: str | None = None
    scene_id: uuid.UUID | None = None
    act_id: uuid.UUID | None = None
    transformation_type: str | None = None
    transformation_trigger: str | None = None
    visual_changes: list | None = None
    age_stage: str | None = None
    estimated_age: int | None = None
    is_milestone: bool | None = None
    notes: str | None = None
    prompt_used: str | None = None
    generation_params: dict | None = None
    timeline_order: int | None = None

class AvatarTimelineEntry(AvatarTimelineEntryBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    character_id: uuid.UUID = Field(foreign_key="character.id", index=True, ondelete="CASCADE")
    scene_id: uuid.UUID | None = Field(default=None, foreign_key="scene.id", ondelete="SET NULL")
    act_id: uuid.UUID | None = Field(default=None, foreign_key="act.id", ondelete="SET NULL")
    timeline_order: int = 0
    created_at: datetime | None = _created_at()
    updated_at: datetime | None = _updated_at()

class AvatarTimelineEntryPublic(AvatarTimelineEntryBase):
    id: uuid.UUID
    character_id: uuid.UUID
    timeline_order: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
