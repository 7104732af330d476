# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import IntegrityError

from lenslocked.auth.session import CSRF, CSRF_COOKIE, REMEMBER_COOKIE, cookie_settings, verify_csrf
from lenslocked.config import Config, load_config, prod_requested
from lenslocked.core.errors import ErrorCode, ModelError, is_not_found
from lenslocked.infra.image_store import Image
from lenslocked.infra.models import Gallery, User
from lenslocked.permissions import current_user_optional, register_user_middleware, require_user, safe_next
from lenslocked.services.container import Services
from lenslocked.views import Alert, alert_for, success

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

router = APIRouter()


def _services(request: Request) -> Services:
    return request.app.state.services


def _render(
    request: Request,
    template_name: str,
    ctx: Optional[dict] = None,
    *,
    alert: Optional[Alert] = None,
    status_code: int = 200,
):
    """TemplateResponse wrapper injecting the signed-in user, alert and CSRF token."""
    base_ctx = {
        "current_user": current_user_optional(request),
        "alert": alert,
        "csrf_token": getattr(request.state, "csrf_token", ""),
    }
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _sign_in(request: Request, response, token: str) -> None:
    secure = request.app.state.config.is_prod
    response.set_cookie(REMEMBER_COOKIE, token, **cookie_settings(secure=secure))


def _gallery_by_id(request: Request, gallery_id: str) -> Gallery:
    try:
        gid = int(gallery_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Invalid gallery id")
    services = _services(request)
    try:
        gallery = services.gallery.by_id(gid)
    except ModelError as exc:
        if is_not_found(exc):
            raise HTTPException(status_code=404, detail="Gallery not found")
        logger.error("Gallery lookup failed: %s", exc)
        raise HTTPException(status_code=500, detail="Unknown error")
    gallery.images = services.image.by_gallery_id(gallery.id)
    return gallery


def _owned_gallery(request: Request, gallery_id: str, user: User) -> Gallery:
    gallery = _gallery_by_id(request, gallery_id)
    if gallery.user_id != user.id:
        raise HTTPException(status_code=404, detail="Gallery not found")
    return gallery


def _edit_url(gallery: Gallery) -> str:
    return f"/galleries/{gallery.id}/edit"


# ------------------ Static pages ------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    return _render(request, "static/home.html")


@router.get("/contact", response_class=HTMLResponse)
def contact(request: Request):
    return _render(request, "static/contact.html")


@router.get("/faq", response_class=HTMLResponse)
def faq(request: Request):
    return _render(request, "static/faq.html")


# ------------------ Users ------------------


@router.get("/signup", response_class=HTMLResponse)
def signup_get(request: Request):
    return _render(request, "users/signup.html", {"name": "", "email": ""})


@router.post("/signup")
def signup_post(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    _csrf: None = Depends(verify_csrf),
):
    user = User(name=name.strip(), email=email)
    user.password = password
    try:
        _services(request).user.create(user)
    except ModelError as exc:
        return _render(request, "users/signup.html", {"name": name, "email": email}, alert=alert_for(exc))
    except IntegrityError:
        # Concurrent signup with the same email; the unique index caught it.
        logger.warning("Signup hit unique index for %s", user.email)
        return _render(
            request,
            "users/signup.html",
            {"name": name, "email": email},
            alert=alert_for(ModelError(ErrorCode.EMAIL_TAKEN)),
        )
    logger.info("Registered user %s", user.id)
    resp = RedirectResponse(url="/galleries", status_code=303)
    _sign_in(request, resp, user.remember)
    return resp


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request, next: str = "/galleries"):
    if current_user_optional(request):
        return RedirectResponse(url=safe_next(next), status_code=303)
    return _render(request, "users/login.html", {"next": next, "email": ""})


@router.post("/login")
def login_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/galleries"),
    _csrf: None = Depends(verify_csrf),
):
    services = _services(request)
    try:
        user = services.user.authenticate(email, password)
        token = services.user.rotate_remember(user)
    except ModelError as exc:
        err = ModelError(ErrorCode.INVALID_EMAIL) if is_not_found(exc) else exc
        return _render(request, "users/login.html", {"next": next, "email": email}, alert=alert_for(err))
    logger.info("Login: user %s", user.id)
    resp = RedirectResponse(url=safe_next(next), status_code=303)
    _sign_in(request, resp, token)
    return resp


@router.post("/logout")
def logout_post(request: Request, user: User = Depends(require_user), _csrf: None = Depends(verify_csrf)):
    # Rotating the token invalidates every cookie issued so far.
    _services(request).user.rotate_remember(user)
    resp = RedirectResponse(url="/", status_code=303)
    resp.delete_cookie(REMEMBER_COOKIE)
    return resp


# ------------------ Galleries ------------------


@router.get("/galleries", response_class=HTMLResponse)
def galleries_index(request: Request, user: User = Depends(require_user)):
    galleries = _services(request).gallery.by_user_id(user.id)
    return _render(request, "galleries/index.html", {"galleries": galleries})


@router.get("/galleries/new", response_class=HTMLResponse)
def galleries_new(request: Request, user: User = Depends(require_user)):
    return _render(request, "galleries/new.html", {"title": ""})


@router.post("/galleries")
def galleries_create(
    request: Request,
    title: str = Form(""),
    user: User = Depends(require_user),
    _csrf: None = Depends(verify_csrf),
):
    gallery = Gallery(title=title.strip(), user_id=user.id)
    try:
        _services(request).gallery.create(gallery)
    except ModelError as exc:
        return _render(request, "galleries/new.html", {"title": title}, alert=alert_for(exc))
    return RedirectResponse(url=_edit_url(gallery), status_code=303)


@router.get("/galleries/{gallery_id}", response_class=HTMLResponse)
def galleries_show(request: Request, gallery_id: str):
    gallery = _gallery_by_id(request, gallery_id)
    return _render(request, "galleries/show.html", {"gallery": gallery})


@router.get("/galleries/{gallery_id}/edit", response_class=HTMLResponse)
def galleries_edit(request: Request, gallery_id: str, user: User = Depends(require_user)):
    gallery = _owned_gallery(request, gallery_id, user)
    return _render(request, "galleries/edit.html", {"gallery": gallery})


@router.post("/galleries/{gallery_id}/update", response_class=HTMLResponse)
def galleries_update(
    request: Request,
    gallery_id: str,
    title: str = Form(""),
    user: User = Depends(require_user),
    _csrf: None = Depends(verify_csrf),
):
    gallery = _owned_gallery(request, gallery_id, user)
    gallery.title = title.strip()
    try:
        _services(request).gallery.update(gallery)
    except ModelError as exc:
        return _render(request, "galleries/edit.html", {"gallery": gallery}, alert=alert_for(exc))
    return _render(request, "galleries/edit.html", {"gallery": gallery}, alert=success("Gallery successfully updated"))


@router.post("/galleries/{gallery_id}/delete")
def galleries_delete(
    request: Request,
    gallery_id: str,
    user: User = Depends(require_user),
    _csrf: None = Depends(verify_csrf),
):
    gallery = _owned_gallery(request, gallery_id, user)
    try:
        _services(request).gallery.delete(gallery.id)
    except ModelError as exc:
        return _render(request, "galleries/edit.html", {"gallery": gallery}, alert=alert_for(exc))
    return RedirectResponse(url="/galleries", status_code=303)


@router.post("/galleries/{gallery_id}/images")
def galleries_upload_images(
    request: Request,
    gallery_id: str,
    images: Optional[List[UploadFile]] = File(None),
    user: User = Depends(require_user),
    _csrf: None = Depends(verify_csrf),
):
    gallery = _owned_gallery(request, gallery_id, user)
    store = _services(request).image
    try:
        for f in images or []:
            if not f.filename:
                continue
            store.create(gallery.id, f.file, f.filename)
    except (OSError, ValueError) as exc:
        gallery.images = store.by_gallery_id(gallery.id)
        return _render(request, "galleries/edit.html", {"gallery": gallery}, alert=alert_for(exc))
    return RedirectResponse(url=_edit_url(gallery), status_code=303)


@router.post("/galleries/{gallery_id}/images/{filename}/delete")
def galleries_delete_image(
    request: Request,
    gallery_id: str,
    filename: str,
    user: User = Depends(require_user),
    _csrf: None = Depends(verify_csrf),
):
    gallery = _owned_gallery(request, gallery_id, user)
    store = _services(request).image
    try:
        store.delete(Image(gallery_id=gallery.id, filename=filename))
    except (ModelError, OSError, ValueError) as exc:
        return _render(request, "galleries/edit.html", {"gallery": gallery}, alert=alert_for(exc))
    return RedirectResponse(url=_edit_url(gallery), status_code=303)


# ------------------ Application ------------------


def _register_csrf_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def csrf_cookie(request: Request, call_next):
        csrf: CSRF = request.app.state.csrf
        token = request.cookies.get(CSRF_COOKIE, "")
        fresh = not csrf.is_valid(token)
        if fresh:
            token = csrf.new_token()
        request.state.csrf_token = token
        response = await call_next(request)
        if fresh:
            response.set_cookie(CSRF_COOKIE, token, **cookie_settings(secure=csrf.secure))
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    app.state.services.close()


def create_app(config: Optional[Config] = None, services: Optional[Services] = None) -> FastAPI:
    if config is None:
        config = load_config(required=prod_requested())
    if services is None:
        services = Services.from_config(config)
    services.auto_migrate()

    images_dir = Path(config.images_dir).resolve()
    images_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="lenslocked", lifespan=_lifespan)
    app.state.config = config
    app.state.services = services
    app.state.csrf = CSRF(config.csrf_key, secure=config.is_prod)

    register_user_middleware(app)
    _register_csrf_middleware(app)

    app.mount("/assets", StaticFiles(directory=str(BASE_DIR / "static")), name="assets")
    app.mount("/images", StaticFiles(directory=str(images_dir)), name="images")
    app.include_router(router)
    return app
