"""
Cycle de vie commun aux écrans de ressources: liste, modale, validation, envoi, rechargement
"""
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode
from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from .api_client import ApiResult
from .auth import get_session_user

# Configuration des templates (les filtres sont enregistrés dans main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


class ScreenState:
    """État local d'un écran, reconstruit à chaque requête"""

    def __init__(self, erreur: Optional[str] = None, succes: Optional[str] = None):
        self.items: list = []
        self.error: Optional[str] = erreur
        self.success: Optional[str] = succes
        self.modal: Optional[str] = None
        self.form: Dict[str, Any] = {}
        self.form_errors: Dict[str, str] = {}
        self.server_errors: Dict[str, str] = {}
        self.editing_id: Optional[int] = None

    @property
    def modal_open(self) -> bool:
        return self.modal is not None

    def open_modal(self, name: str, form: Optional[dict] = None, editing_id: Optional[int] = None):
        self.modal = name
        self.form = form if form is not None else {}
        self.editing_id = editing_id

    def fail(self, message: str):
        # Plusieurs chargements peuvent échouer; le premier message reste affiché
        if not self.error:
            self.error = message

    def reject(self, result: ApiResult, default: str = "Erreur lors de l'opération"):
        """Envoi refusé: le message du backend remplace les erreurs de chargement"""
        self.error = result.unwrap_message(default)
        self.server_errors = result.errors

    def load(self, result: ApiResult, default=None):
        """Retourne data en cas de succès, sinon note l'erreur et retourne default"""
        if result.success:
            return result.data
        self.fail(result.message)
        return default if default is not None else []


def render_screen(request: Request, template: str, state: ScreenState, status_code: int = 200, **context):
    context.update({
        "request": request,
        "state": state,
        "current_user": get_session_user(request),
    })
    return templates.TemplateResponse(request, template, context, status_code=status_code)

def redirect_to(url: str, erreur: Optional[str] = None, succes: Optional[str] = None, **params):
    """POST -> redirection -> GET: la liste est rechargée une seule fois, modale fermée"""
    query = {k: v for k, v in params.items() if v not in (None, "")}
    if erreur:
        query["erreur"] = erreur
    if succes:
        query["succes"] = succes
    if query:
        url = f"{url}?{urlencode(query)}"
    return RedirectResponse(url, status_code=303)
