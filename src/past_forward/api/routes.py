"""Session, item and profile endpoints with simple token auth."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    Header,
    HTTPException,
    Request,
    status,
)

from past_forward.api.models import (
    AnimateRequest,
    BatchRequest,
    EditRequest,
    ProfileRequest,
    ProfileView,
    SessionView,
)
from past_forward.domain.items import ItemRecord  # noqa: TC001
from past_forward.services.media import to_data_url
from past_forward.services.sessions import ActiveSession, SessionCreationError

if TYPE_CHECKING:
    from past_forward.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(dependencies=[Depends(require_api_token)])


@router.post(
    "/users/{user_id}/sessions",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SessionView,
)
async def submit_batch(
    user_id: UUID,
    body: BatchRequest,
    request: Request,
    background_tasks: BackgroundTasks,
) -> SessionView:
    """Create a session and generate its eras in the background."""
    container: AppContainer = request.app.state.container
    try:
        content = base64.b64decode(body.image_base64, validate=True)
    except binascii.Error as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="image_base64 is not valid base64",
        ) from exc
    source_image = to_data_url(content, body.mime_type)
    try:
        active = await container.session_service.submit_batch(
            user_id, source_image, body.eras
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except SessionCreationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    background_tasks.add_task(container.session_service.run_batch, active.id)
    return SessionView.build(active.record, active.items())


@router.get("/users/{user_id}/sessions")
async def list_sessions(user_id: UUID, request: Request) -> dict[str, object]:
    """Return the user's session history, newest first."""
    container: AppContainer = request.app.state.container
    sessions = await container.session_service.list_sessions(user_id)
    return {"sessions": [SessionView.build(record) for record in sessions]}


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: UUID, request: Request) -> SessionView:
    """Return the live item map, loading the session from history if needed."""
    active = await _load(request, session_id)
    return SessionView.build(active.record, active.items())


@router.post("/sessions/{session_id}/items/{era}/regenerate")
async def regenerate_item(
    session_id: UUID, era: str, request: Request
) -> ItemRecord:
    """Generate a fresh image for one era."""
    active = await _load(request, session_id)
    return _accepted(await active.operations.regenerate(era))


@router.post("/sessions/{session_id}/items/{era}/edit")
async def edit_item(
    session_id: UUID, era: str, body: EditRequest, request: Request
) -> ItemRecord:
    """Apply an edit instruction to one era's image."""
    active = await _load(request, session_id)
    try:
        record = await active.operations.edit(era, body.instruction)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return _accepted(record)


@router.post("/sessions/{session_id}/items/{era}/animate")
async def animate_item(
    session_id: UUID, era: str, body: AnimateRequest, request: Request
) -> ItemRecord:
    """Render a video from one era's image."""
    active = await _load(request, session_id)
    return _accepted(await active.operations.animate(era, body.aspect_ratio))


@router.post("/sessions/{session_id}/items/{era}/narrate")
async def narrate_item(session_id: UUID, era: str, request: Request) -> ItemRecord:
    """Play the narration for one era."""
    active = await _load(request, session_id)
    return _accepted(await active.operations.narrate(era))


@router.get("/users/{user_id}/profile", response_model=ProfileView)
async def get_profile(
    user_id: UUID, request: Request, email: str | None = None
) -> ProfileView:
    """Return the user's profile, creating a default one if needed."""
    container: AppContainer = request.app.state.container
    return ProfileView.build(container.profile_service.load_profile(user_id, email))


@router.put("/users/{user_id}/profile", response_model=ProfileView)
async def save_profile(
    user_id: UUID, body: ProfileRequest, request: Request
) -> ProfileView:
    """Save an edited profile."""
    container: AppContainer = request.app.state.container
    try:
        profile = container.profile_service.save_profile(
            user_id, body.display_name, body.avatar_ref
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return ProfileView.build(profile)


async def _load(request: Request, session_id: UUID) -> ActiveSession:
    container: AppContainer = request.app.state.container
    active = await container.session_service.resume(session_id)
    if active is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return active


def _accepted(record: ItemRecord | None) -> ItemRecord:
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This item cannot be processed right now.",
        )
    return record
