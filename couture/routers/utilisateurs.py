from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from typing import Optional
import asyncio
import logging

from ..api_client import BackendClient, get_api
from ..auth import require_admin
from ..schemas import COUNTRIES, USER_ROLES, UserListResponse, User
from ..screens import ScreenState, redirect_to, render_screen
from ..services import user_service

router = APIRouter(prefix="/dashboard/utilisateurs", tags=["utilisateurs"])

LIST_URL = "/dashboard/utilisateurs"


def _filters_from_query(request: Request) -> dict:
    params = request.query_params
    filters = dict(user_service.DEFAULT_USER_FILTERS)
    if params.get("search"):
        filters["search"] = params["search"]
    if params.get("role") in USER_ROLES:
        filters["role"] = params["role"]
    if params.get("status") in ("true", "false"):
        filters["status"] = params["status"] == "true"
    for key in ("page", "pageSize"):
        value = params.get(key) or ""
        if value.isdigit() and int(value) > 0:
            filters[key] = int(value)
    return filters

async def _load_users(api: BackendClient, state: ScreenState, filters: dict) -> int:
    listing = state.load(await user_service.get_all_users(api, filters), default=UserListResponse())
    state.items = listing.users
    return listing.totalCount

def _render(request: Request, state: ScreenState, filters: dict, total_count: int):
    page_size = filters.get("pageSize", user_service.DEFAULT_USER_FILTERS["pageSize"])
    return render_screen(
        request, "utilisateurs.html", state,
        filters=filters,
        total_count=total_count,
        total_pages=user_service.total_pages(total_count, page_size),
        roles=USER_ROLES,
        countries=COUNTRIES,
    )


@router.get("", response_class=HTMLResponse)
async def utilisateurs_page(
    request: Request,
    modal: Optional[str] = None,
    edit: Optional[int] = None,
    erreur: Optional[str] = None,
    succes: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_admin),
):
    """Administration des utilisateurs"""
    state = ScreenState(erreur, succes)
    filters = _filters_from_query(request)
    total_count = await _load_users(api, state, filters)

    if modal == "create":
        state.open_modal("create", user_service.empty_user_form())
    elif edit:
        result = await user_service.get_user_by_id(api, edit)
        if result.success:
            state.open_modal("edit", user_service.user_to_form(result.data), editing_id=edit)
        else:
            state.fail(result.message)
    return _render(request, state, filters, total_count)


async def _check_unique(api: BackendClient, form: dict) -> dict:
    email_taken, username_taken = await asyncio.gather(
        user_service.check_email_exists(api, form["email"]),
        user_service.check_username_exists(api, form["userName"]),
    )
    errors = {}
    if email_taken:
        errors["email"] = "Cet email est déjà utilisé"
    if username_taken:
        errors["userName"] = "Ce nom d'utilisateur est déjà utilisé"
    return errors

async def _save_user(request: Request, api: BackendClient, user_id: Optional[int]):
    creating = user_id is None
    form = user_service.read_user_form(await request.form())
    errors = user_service.validate_user_form(form, creating)
    if creating and not errors:
        errors = await _check_unique(api, form)

    failure = None
    if not errors:
        payload = user_service.build_user_payload(form, creating)
        if creating:
            result = await user_service.create_user(api, payload)
        else:
            result = await user_service.update_user(api, user_id, payload)
        if result.success:
            return redirect_to(LIST_URL, succes="Utilisateur créé" if creating else "Utilisateur mis à jour")
        logging.error(f"Erreur enregistrement utilisateur: {result.message}")
        failure = result

    state = ScreenState()
    filters = dict(user_service.DEFAULT_USER_FILTERS)
    total_count = await _load_users(api, state, filters)
    # Le mot de passe saisi n'est jamais renvoyé dans la page
    form["password"] = ""
    state.open_modal("create" if creating else "edit", form, editing_id=user_id)
    state.form_errors = errors
    if failure:
        state.reject(failure)
    return _render(request, state, filters, total_count)


@router.post("", response_class=HTMLResponse)
async def create_utilisateur(
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_admin),
):
    """Créer un utilisateur"""
    return await _save_user(request, api, None)

@router.post("/{user_id}", response_class=HTMLResponse)
async def update_utilisateur(
    user_id: int,
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_admin),
):
    """Mettre à jour un utilisateur"""
    return await _save_user(request, api, user_id)

@router.post("/{user_id}/delete")
async def delete_utilisateur(
    user_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_admin),
):
    """Supprimer un utilisateur"""
    if user_id == current_user.id:
        return redirect_to(LIST_URL, erreur="Vous ne pouvez pas supprimer votre propre compte")
    result = await user_service.delete_user(api, user_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Utilisateur supprimé")

@router.post("/{user_id}/statut")
async def toggle_statut(
    user_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_admin),
):
    """Activer / désactiver un compte"""
    result = await user_service.toggle_user_status(api, user_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Statut mis à jour")
