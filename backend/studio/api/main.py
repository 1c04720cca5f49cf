from fastapi import APIRouter

from studio.api.routes import (
    ai_media,
    ai_prompts,
    ai_vision,
    asset_analysis,
    assets,
    avatar_batch,
    avatar_timeline,
    beat_ai,
    beats,
    characters,
    cli_tasks,
    factions,
    llm,
    outfits,
    projects,
    scenes,
    utils,
    voices,
)

api_router = APIRouter()
api_router.include_router(utils.router)

# Story data
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(projects.acts_router, prefix="/acts", tags=["acts"])
api_router.include_router(scenes.router, prefix="/scenes", tags=["scenes"])
api_router.include_router(scenes.choices_router, prefix="/scene-choices", tags=["scenes"])
api_router.include_router(characters.router, prefix="/characters", tags=["characters"])
api_router.include_router(characters.traits_router, prefix="/traits", tags=["characters"])
api_router.include_router(factions.router, prefix="/factions", tags=["factions"])
api_router.include_router(
    factions.relationships_router, prefix="/faction-relationships", tags=["factions"]
)
api_router.include_router(factions.lore_router, prefix="/faction-lore", tags=["factions"])
api_router.include_router(factions.media_router, prefix="/faction-media", tags=["factions"])
api_router.include_router(
    factions.achievements_router, prefix="/faction-achievements", tags=["factions"]
)
api_router.include_router(factions.events_router, prefix="/faction-events", tags=["factions"])
api_router.include_router(beats.router, prefix="/beats", tags=["beats"])
api_router.include_router(
    beats.dependencies_router, prefix="/beat-dependencies", tags=["beats"]
)
api_router.include_router(beats.pacing_router, prefix="/beat-pacing", tags=["beats"])
api_router.include_router(voices.router, prefix="/voices", tags=["voices"])
api_router.include_router(assets.router, prefix="/assets", tags=["assets"])
api_router.include_router(outfits.router, prefix="/character-outfits", tags=["outfits"])
api_router.include_router(
    avatar_timeline.router, prefix="/avatar-timeline", tags=["avatar-timeline"]
)

# AI gateway
api_router.include_router(ai_prompts.router, prefix="/ai", tags=["ai"])
api_router.include_router(ai_vision.router, prefix="/ai", tags=["ai"])
api_router.include_router(ai_media.router, prefix="/ai", tags=["ai"])
api_router.include_router(
    beat_ai.scene_mapping_router, prefix="/beat-scene-mapping", tags=["ai", "beats"]
)
api_router.include_router(
    beat_ai.suggestions_router, prefix="/beat-suggestions", tags=["ai", "beats"]
)
api_router.include_router(beat_ai.summary_router, prefix="/beat-summary", tags=["ai", "beats"])
api_router.include_router(llm.router, prefix="/llm", tags=["llm"])
api_router.include_router(asset_analysis.router, prefix="/asset-analysis", tags=["ai"])
api_router.include_router(avatar_batch.router, prefix="/avatar-batch", tags=["ai"])

api_router.include_router(cli_tasks.router, prefix="/cli-task-registry", tags=["tasks"])
