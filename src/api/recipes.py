"""Recipe API endpoints."""

from fastapi import APIRouter, status

from src.api.dependencies import ContentServiceDep, CurrentUser, RecipeServiceDep
from src.schemas.recipe import (
    FavoriteUpdate,
    RecipeResponse,
    RecipeSubmission,
    SubmissionAccepted,
)
from src.schemas.recipe_version import (
    RecipeVersionResponse,
    RemixProposalResponse,
    RemixRequest,
    RemixSave,
    VersionListResponse,
    VersionSaveResponse,
)

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


@router.post(
    "/process",
    response_model=SubmissionAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def process_recipe(
    submission: RecipeSubmission,
    current_user: CurrentUser,
):
    """Accept a video URL; the recipe is built in the background."""
    from src.tasks.recipe_ingestion import process_recipe_submission

    process_recipe_submission.delay(current_user.id, str(submission.url))

    return SubmissionAccepted()


@router.get("/feed", response_model=list[RecipeResponse])
async def get_feed(
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """List the user's recipes, newest first."""
    return service.get_feed(current_user.id)


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: int,
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """Get a specific recipe."""
    return service.get_recipe(recipe_id, current_user.id)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: int,
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """Delete a recipe and its version history."""
    service.delete_recipe(recipe_id, current_user.id)


@router.post("/{recipe_id}/favorite", response_model=RecipeResponse)
async def set_favorite(
    recipe_id: int,
    data: FavoriteUpdate,
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """Mark or unmark a recipe as favorite."""
    return service.set_favorite(recipe_id, current_user.id, data.is_favorite)


# --- Version history ---


@router.get("/{recipe_id}/versions", response_model=VersionListResponse)
async def list_versions(
    recipe_id: int,
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """List remix versions, most recent first."""
    versions = service.list_versions(recipe_id, current_user.id)
    return VersionListResponse(
        versions=[RecipeVersionResponse.model_validate(v) for v in versions],
    )


@router.post("/{recipe_id}/versions", response_model=VersionSaveResponse)
def save_version(
    recipe_id: int,
    remix: RemixSave,
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """Save a remix as the next version of a recipe."""
    version = service.save_version(recipe_id, current_user.id, remix)
    return VersionSaveResponse(version=RecipeVersionResponse.model_validate(version))


# --- Remixes ---


@router.post("/{recipe_id}/remix", response_model=RemixProposalResponse)
async def propose_remix(
    recipe_id: int,
    data: RemixRequest,
    current_user: CurrentUser,
    service: RecipeServiceDep,
    content_service: ContentServiceDep,
):
    """Ask the model to remix a recipe; the proposal is not stored."""
    remix = await service.propose_remix(recipe_id, current_user.id, data.prompt, content_service)
    return RemixProposalResponse(remix=remix)


@router.post(
    "/{recipe_id}/fork",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
)
def fork_recipe(
    recipe_id: int,
    remix: RemixSave,
    current_user: CurrentUser,
    service: RecipeServiceDep,
):
    """Save a remix as a new recipe that points back to this one."""
    return service.fork_recipe(recipe_id, current_user.id, remix)
