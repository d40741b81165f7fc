"""
Server-rendered pages.

Pages render Jinja2 templates; the forms on them post to the JSON API.
Anonymous visitors to protected pages are redirected (303) to ``/login``;
non-admins visiting admin pages are sent to ``/dashboard``.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth.middleware import get_app_settings, get_optional_user, set_session_cookie
from raugupatis.infra.db.models import FermentationStatus, User
from raugupatis.infra.db.repositories import (
    FermentationFilters,
    FermentationRepository,
    PhotoRepository,
    ProfileRepository,
    TasteProfileRepository,
    TemperatureLogRepository,
    UserRepository,
)
from raugupatis.infra.db.session import get_db
from raugupatis.utils.temperature import format_temperature, unit_symbol

logger = logging.getLogger(__name__)
router = APIRouter(include_in_schema=False)


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def build_templates(directory: str) -> Jinja2Templates:
    templates = Jinja2Templates(directory=directory)
    templates.env.filters["temperature"] = format_temperature
    templates.env.globals["unit_symbol"] = unit_symbol
    return templates


def _refresh_cookie(request: Request, response: Response) -> Response:
    """Carry the slid session cookie onto a response the route built itself."""
    refreshed = getattr(request.state, "session_cookie", None)
    if refreshed is not None:
        token, max_age = refreshed
        set_session_cookie(response, token, get_app_settings(request), max_age=max_age)
    return response


def _redirect(request: Request, url: str) -> RedirectResponse:
    return _refresh_cookie(request, RedirectResponse(url=url, status_code=303))


def _render(request: Request, name: str, user: Optional[User], **context: Any) -> HTMLResponse:
    settings = get_app_settings(request)
    context.update(user=user, app_name=settings.app_name)
    return _refresh_cookie(request, get_templates(request).TemplateResponse(request, name, context))


# =============================================================================
# Public pages
# =============================================================================

@router.get("/", response_class=HTMLResponse)
async def home(request: Request, user: Optional[User] = Depends(get_optional_user)):
    return _render(request, "index.html", user)


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request, user: Optional[User] = Depends(get_optional_user)):
    if user is not None:
        return _redirect(request, "/dashboard")
    return _render(request, "register.html", None)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, user: Optional[User] = Depends(get_optional_user)):
    if user is not None:
        return _redirect(request, "/dashboard")
    return _render(request, "login.html", None)


# =============================================================================
# Account pages
# =============================================================================

@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    repo = FermentationRepository(db, user.id)
    counts = await repo.count_by_status()
    recent = await repo.list(FermentationFilters(limit=5))
    return _render(
        request,
        "dashboard.html",
        user,
        counts={s.value: counts.get(s.value, 0) for s in FermentationStatus},
        recent=recent,
    )


@router.get("/profile", response_class=HTMLResponse)
async def profile_page(request: Request, user: Optional[User] = Depends(get_optional_user)):
    if user is None:
        return _redirect(request, "/login")
    return _render(request, "profile.html", user)


@router.get("/change-password", response_class=HTMLResponse)
async def change_password_page(request: Request, user: Optional[User] = Depends(get_optional_user)):
    if user is None:
        return _redirect(request, "/login")
    return _render(request, "change_password.html", user)


# =============================================================================
# Fermentation pages
# =============================================================================

@router.get("/fermentations", response_class=HTMLResponse)
async def fermentation_list(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    params = request.query_params
    status = params.get("status") or None
    if status not in {s.value for s in FermentationStatus}:
        status = None
    filters = FermentationFilters(
        search=params.get("search") or None,
        status=status,
        profile_type=params.get("profile_type") or None,
    )
    fermentations = await FermentationRepository(db, user.id).list(filters)
    return _render(
        request,
        "fermentations.html",
        user,
        fermentations=fermentations,
        filters=filters,
        statuses=[s.value for s in FermentationStatus],
    )


@router.get("/fermentation/new", response_class=HTMLResponse)
async def new_fermentation(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    profiles = await ProfileRepository(db).list_active()
    return _render(request, "fermentation_new.html", user, profiles=profiles)


@router.get("/fermentation/{fermentation_id}", response_class=HTMLResponse)
async def fermentation_detail(
    fermentation_id: int,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    fermentation = await FermentationRepository(db, user.id).get_by_id(fermentation_id)
    if fermentation is None:
        return _redirect(request, "/fermentations")
    return _render(
        request,
        "fermentation_detail.html",
        user,
        fermentation=fermentation,
        temperature_logs=await TemperatureLogRepository(db, user.id).list_for_fermentation(fermentation_id),
        taste_profiles=await TasteProfileRepository(db, user.id).list_for_fermentation(fermentation_id),
        photos=await PhotoRepository(db, user.id).list_for_fermentation(fermentation_id),
    )


@router.get("/fermentation/{fermentation_id}/edit", response_class=HTMLResponse)
async def edit_fermentation(
    fermentation_id: int,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    fermentation = await FermentationRepository(db, user.id).get_by_id(fermentation_id)
    if fermentation is None:
        return _redirect(request, "/fermentations")
    profiles = await ProfileRepository(db).list_active()
    return _render(
        request,
        "fermentation_edit.html",
        user,
        fermentation=fermentation,
        profiles=profiles,
        statuses=[s.value for s in FermentationStatus],
    )


# =============================================================================
# Admin pages
# =============================================================================

@router.get("/admin/users", response_class=HTMLResponse)
async def admin_users(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    if not user.is_admin:
        return _redirect(request, "/dashboard")
    users = await UserRepository(db).list_users()
    return _render(request, "admin_users.html", user, users=users)


@router.get("/admin/profiles", response_class=HTMLResponse)
async def admin_profiles(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return _redirect(request, "/login")
    if not user.is_admin:
        return _redirect(request, "/dashboard")
    profiles = await ProfileRepository(db).list_all()
    return _render(request, "admin_profiles.html", user, profiles=profiles)
