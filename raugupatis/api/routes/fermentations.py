"""
Fermentation API Routes.

Fermentations plus their temperature logs, taste profiles and photos. Every
repository here is constructed with the caller's user id, so another user's
fermentation is indistinguishable from a missing one (404).
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth.middleware import get_app_settings, get_current_user
from raugupatis.exceptions import NotFound, ValidationError
from raugupatis.infra.db.base import utcnow
from raugupatis.infra.db.models import FermentationStatus, PhotoStage, TemperatureLog, User
from raugupatis.infra.db.repositories import (
    FermentationFilters,
    FermentationRepository,
    PhotoRepository,
    ProfileRepository,
    TasteProfileRepository,
    TemperatureLogRepository,
)
from raugupatis.infra.db.session import get_db
from raugupatis.services import photos as photo_storage
from raugupatis.services.fermentations import check_dates, plan_update
from raugupatis.utils.temperature import from_storage, to_storage

from ..schemas import (
    FermentationCreate,
    FermentationResponse,
    FermentationUpdate,
    PhotoResponse,
    ProfileResponse,
    TasteProfileCreate,
    TasteProfileResponse,
    TemperatureLogCreate,
    TemperatureLogResponse,
)
from ..schemas.common import to_naive_utc

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Fermentations"])


def _temperature_response(log: TemperatureLog, unit: str) -> TemperatureLogResponse:
    return TemperatureLogResponse(
        id=log.id,
        fermentation_id=log.fermentation_id,
        recorded_at=log.recorded_at,
        temperature=from_storage(log.temperature, unit),
        unit=unit,
        notes=log.notes,
        created_at=log.created_at,
    )


def _photo_response(photo) -> PhotoResponse:
    response = PhotoResponse.model_validate(photo)
    response.url = f"/api/fermentation/{photo.fermentation_id}/photos/{photo.id}/file"
    return response


# =============================================================================
# Profiles (public)
# =============================================================================

@router.get("/fermentation/profiles", response_model=list[ProfileResponse])
async def list_active_profiles(db: AsyncSession = Depends(get_db)) -> list[ProfileResponse]:
    """Active fermentation profiles, ordered by name. No login required."""
    profiles = await ProfileRepository(db).list_active()
    return [ProfileResponse.model_validate(p) for p in profiles]


# =============================================================================
# Fermentations
# =============================================================================

@router.get("/fermentations", response_model=list[FermentationResponse])
async def list_fermentations(
    search: Optional[str] = Query(None, max_length=200),
    status_filter: Optional[FermentationStatus] = Query(None, alias="status"),
    profile_id: Optional[int] = Query(None),
    profile_type: Optional[str] = Query(None),
    started_after: Optional[datetime] = Query(None),
    started_before: Optional[datetime] = Query(None),
    sort_by: str = Query("created_at", pattern="^(created_at|name|start_date|status)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[FermentationResponse]:
    """List the caller's fermentations with filtering, sorting and paging."""
    filters = FermentationFilters(
        search=search or None,
        status=status_filter.value if status_filter else None,
        profile_id=profile_id,
        profile_type=profile_type or None,
        started_after=to_naive_utc(started_after),
        started_before=to_naive_utc(started_before),
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    fermentations = await FermentationRepository(db, user.id).list(filters)
    return [FermentationResponse.model_validate(f) for f in fermentations]


@router.post("/fermentation", response_model=FermentationResponse, status_code=status.HTTP_201_CREATED)
async def create_fermentation(
    body: FermentationCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FermentationResponse:
    start_date = body.start_date or utcnow()
    check_dates(start_date, body.target_end_date, None)

    fermentation = await FermentationRepository(db, user.id).create(
        profile_id=body.profile_id,
        name=body.name,
        start_date=start_date,
        target_end_date=body.target_end_date,
        notes=body.notes,
        ingredients=body.ingredients,
        status=FermentationStatus.ACTIVE.value,
    )
    logger.info(f"[FERMENTATION] User {user.id} created fermentation {fermentation.id} ({fermentation.profile_name})")
    return FermentationResponse.model_validate(fermentation)


@router.get("/fermentation/{fermentation_id}", response_model=FermentationResponse)
async def get_fermentation(
    fermentation_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FermentationResponse:
    fermentation = await FermentationRepository(db, user.id).get_by_id(fermentation_id)
    if fermentation is None:
        raise NotFound("Fermentation")
    return FermentationResponse.model_validate(fermentation)


@router.put("/fermentation/{fermentation_id}", response_model=FermentationResponse)
async def update_fermentation(
    fermentation_id: int,
    body: FermentationUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FermentationResponse:
    """Partial update. Status changes follow the fermentation lifecycle."""
    repo = FermentationRepository(db, user.id)
    fermentation = await repo.get_by_id(fermentation_id)
    if fermentation is None:
        raise NotFound("Fermentation")

    changes = plan_update(fermentation, body.model_dump(exclude_unset=True))
    if not changes:
        return FermentationResponse.model_validate(fermentation)

    updated = await repo.update(fermentation_id, **changes)
    if updated is None:
        raise NotFound("Fermentation")
    logger.info(f"[FERMENTATION] User {user.id} updated fermentation {fermentation_id}: {sorted(changes)}")
    return FermentationResponse.model_validate(updated)


@router.delete("/fermentation/{fermentation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fermentation(
    fermentation_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a fermentation with its logs, taste profiles and photos."""
    deleted = await FermentationRepository(db, user.id).delete(fermentation_id)
    if not deleted:
        raise NotFound("Fermentation")
    photo_storage.remove_fermentation_photos(get_app_settings(request).uploads_dir, fermentation_id)
    logger.info(f"[FERMENTATION] User {user.id} deleted fermentation {fermentation_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Temperature logs
# =============================================================================

@router.get("/fermentation/{fermentation_id}/temperature", response_model=list[TemperatureLogResponse])
async def list_temperature_logs(
    fermentation_id: int,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[TemperatureLogResponse]:
    """Temperature readings, newest first, in the caller's preferred unit."""
    logs = await TemperatureLogRepository(db, user.id).list_for_fermentation(fermentation_id, limit=limit)
    return [_temperature_response(log, user.preferred_temp_unit) for log in logs]


@router.post(
    "/fermentation/{fermentation_id}/temperature",
    response_model=TemperatureLogResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_temperature_log(
    fermentation_id: int,
    body: TemperatureLogCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TemperatureLogResponse:
    unit = body.unit.value if body.unit else user.preferred_temp_unit
    log = await TemperatureLogRepository(db, user.id).create(
        fermentation_id=fermentation_id,
        temperature=to_storage(body.temperature, unit),
        recorded_at=body.recorded_at or utcnow(),
        notes=body.notes,
    )
    return _temperature_response(log, user.preferred_temp_unit)


# =============================================================================
# Taste profiles
# =============================================================================

@router.get("/fermentation/{fermentation_id}/taste-profiles", response_model=list[TasteProfileResponse])
async def list_taste_profiles(
    fermentation_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[TasteProfileResponse]:
    entries = await TasteProfileRepository(db, user.id).list_for_fermentation(fermentation_id)
    return [TasteProfileResponse.model_validate(e) for e in entries]


@router.post(
    "/fermentation/{fermentation_id}/taste-profiles",
    response_model=TasteProfileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_taste_profile(
    fermentation_id: int,
    body: TasteProfileCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TasteProfileResponse:
    entry = await TasteProfileRepository(db, user.id).create(
        fermentation_id=fermentation_id,
        profile_text=body.profile_text,
        tasted_at=body.tasted_at or utcnow(),
    )
    return TasteProfileResponse.model_validate(entry)


# =============================================================================
# Photos
# =============================================================================

@router.get("/fermentation/{fermentation_id}/photos", response_model=list[PhotoResponse])
async def list_photos(
    fermentation_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[PhotoResponse]:
    entries = await PhotoRepository(db, user.id).list_for_fermentation(fermentation_id)
    return [_photo_response(p) for p in entries]


@router.post(
    "/fermentation/{fermentation_id}/photos",
    response_model=PhotoResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_photo(
    fermentation_id: int,
    request: Request,
    photo: UploadFile = File(...),
    caption: Optional[str] = Form(None),
    stage: str = Form(PhotoStage.PROGRESS.value),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PhotoResponse:
    """Multipart upload: ``photo`` (image file), optional ``caption`` and ``stage``."""
    try:
        stage_value = PhotoStage(stage).value
    except ValueError:
        raise ValidationError.for_field("stage", "Stage must be start, progress or end")

    repo = PhotoRepository(db, user.id)
    # Check ownership before touching the filesystem
    if not await FermentationRepository(db, user.id).exists(fermentation_id):
        raise NotFound("Fermentation")

    settings = get_app_settings(request)
    relative_path = await photo_storage.save_photo(
        photo, settings.uploads_dir, fermentation_id, settings.max_upload_bytes
    )
    try:
        entry = await repo.create(
            fermentation_id=fermentation_id,
            file_path=relative_path,
            caption=(caption or "").strip() or None,
            taken_at=utcnow(),
            stage=stage_value,
        )
    except Exception:
        photo_storage.discard_photo(settings.uploads_dir, relative_path)
        raise
    return _photo_response(entry)


@router.get("/fermentation/{fermentation_id}/photos/{photo_id}/file")
async def get_photo_file(
    fermentation_id: int,
    photo_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FileResponse:
    """Serve a stored image to its owner."""
    entry = await PhotoRepository(db, user.id).get_by_id(photo_id)
    if entry is None or entry.fermentation_id != fermentation_id:
        raise NotFound("Photo")
    path = photo_storage.resolve_photo_path(get_app_settings(request).uploads_dir, entry.file_path)
    if path is None or not path.is_file():
        raise NotFound("Photo")
    return FileResponse(path)
