from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from typing import Optional
from ..api_client import BackendClient, get_api
from ..auth import clear_session_cookie, get_session_user, set_session_cookie
from ..screens import ScreenState, render_screen
from ..services import auth_service
import logging

router = APIRouter(tags=["authentication"])


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, erreur: Optional[str] = None):
    """Page de connexion (redirige vers le tableau de bord si déjà connecté)"""
    if get_session_user(request) is not None:
        return RedirectResponse("/dashboard", status_code=303)
    state = ScreenState(erreur)
    state.form = {"emailOrUsername": ""}
    return render_screen(request, "login.html", state)

@router.post("/login", response_class=HTMLResponse)
async def login(
    request: Request,
    emailOrUsername: str = Form(""),
    password: str = Form(""),
    api: BackendClient = Depends(get_api),
):
    """Authentification utilisateur"""
    state = ScreenState()
    state.form = {"emailOrUsername": emailOrUsername}

    # Champ vide: aucun appel réseau
    state.form_errors = auth_service.validate_login(emailOrUsername, password)
    if state.form_errors:
        return render_screen(request, "login.html", state, status_code=400)

    result = await auth_service.login(api, emailOrUsername, password)
    if not result.success:
        logging.warning(f"Échec de connexion pour {emailOrUsername}: {result.message}")
        state.error = result.message
        return render_screen(request, "login.html", state, status_code=401)

    response = RedirectResponse("/dashboard", status_code=303)
    set_session_cookie(response, result.data)
    return response

@router.api_route("/logout", methods=["GET", "POST"])
async def logout():
    """Déconnexion: suppression du cookie de session"""
    response = RedirectResponse("/login", status_code=303)
    clear_session_cookie(response)
    return response
