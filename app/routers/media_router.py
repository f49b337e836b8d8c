"""Media API: upload, list, fetch, download and delete attachments."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Response, UploadFile
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.core.app_state import AppState
from app.db import get_db
from app.models.user import User
from app.routers.utils.dependencies import get_app_state, get_current_user
from app.schemas.media import MediaRead
from app.services.media_service import MediaService

router = APIRouter(
    prefix="/media",
    tags=["media"],
    responses={404: {"description": "Not found"}},
)


@router.post("/upload", response_model=MediaRead, status_code=201)
def upload_media(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> MediaRead:
    """Upload an image (JPEG, PNG or WebP, 10 MB max)."""
    data = file.file.read()
    return MediaService(db, state.storage).upload(
        current_user.id, file.filename or "upload", data, file.content_type
    )


@router.get("", response_model=Page[MediaRead])
def list_media(
    params: Params = Depends(),
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> Page[MediaRead]:
    """List the user's media, newest first."""
    query = MediaService(db, state.storage).get_media_query(current_user.id)
    return paginate(query, params=params)


@router.get("/{media_id}", response_model=MediaRead)
def get_media(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> MediaRead:
    return MediaService(db, state.storage).resolve_for_send(current_user.id, media_id)


@router.get("/{media_id}/download")
def download_media(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> Response:
    """Stream the stored file back to its owner."""
    data, content_type, file_name = MediaService(db, state.storage).download(
        current_user.id, media_id
    )
    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.delete("/{media_id}", status_code=204)
def delete_media(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> None:
    """Delete the stored file and its metadata. Fails with 502 if storage refuses."""
    MediaService(db, state.storage).delete(current_user.id, media_id)
