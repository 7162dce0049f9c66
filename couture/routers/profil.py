from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from typing import Optional

from ..api_client import BackendClient, get_api
from ..auth import require_session, set_session_cookie
from ..schemas import User
from ..screens import ScreenState, redirect_to, render_screen
from ..services import user_service

router = APIRouter(prefix="/dashboard/profil", tags=["profil"])

PROFILE_URL = "/dashboard/profil"


@router.get("", response_class=HTMLResponse)
async def profil_page(
    request: Request,
    modal: Optional[str] = None,
    erreur: Optional[str] = None,
    succes: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Profil de l'utilisateur connecté"""
    state = ScreenState(erreur, succes)
    result = await user_service.get_current_user_profile(api, current_user.id)
    profile = current_user
    if result.success:
        profile = result.data
    else:
        state.fail(result.unwrap_message("Erreur lors du chargement du profil"))

    if modal == "password":
        state.open_modal("password")

    response = render_screen(request, "profil.html", state, profile=profile)
    if result.success:
        # La session suit les modifications faites côté serveur
        set_session_cookie(response, profile)
    return response

@router.post("/mot-de-passe", response_class=HTMLResponse)
async def change_password(
    request: Request,
    currentPassword: str = Form(""),
    newPassword: str = Form(""),
    confirmPassword: str = Form(""),
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Changer son mot de passe"""
    errors = user_service.validate_password_change(currentPassword, newPassword, confirmPassword)
    failure = None
    if not errors:
        result = await user_service.change_password(
            api, current_user.id, currentPassword, newPassword, confirmPassword,
        )
        if result.success:
            return redirect_to(PROFILE_URL, succes="Mot de passe modifié")
        failure = result

    state = ScreenState()
    if failure:
        state.reject(failure)
    state.open_modal("password")
    state.form_errors = errors
    return render_screen(request, "profil.html", state, profile=current_user, status_code=400)
