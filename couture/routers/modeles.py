from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from typing import Optional
import logging

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import User
from ..screens import ScreenState, redirect_to, render_screen
from ..services import modele_service
from ..services.formatting import format_amount_input
from ..services.media import read_upload

router = APIRouter(prefix="/dashboard/modeles", tags=["modeles"])

LIST_URL = "/dashboard/modeles"


@router.get("", response_class=HTMLResponse)
async def modeles_page(
    request: Request,
    modal: Optional[str] = None,
    edit: Optional[int] = None,
    erreur: Optional[str] = None,
    succes: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Catalogue des modèles"""
    state = ScreenState(erreur, succes)
    state.items = state.load(await modele_service.get_all_modeles(api))

    if modal == "create":
        state.open_modal("create", {"price": ""})
    elif edit:
        result = await modele_service.get_modele_by_id(api, edit)
        if result.success:
            modele = result.data
            state.open_modal("edit", {"price": format_amount_input(modele.price), "imageUrl": modele.imageUrl or ""},
                             editing_id=modele.id)
        else:
            state.fail(result.message)
    return render_screen(request, "modeles.html", state)


async def _save_modele(request: Request, api: BackendClient, modele_id: Optional[int],
                       price: str, image_file: Optional[UploadFile], image_url: str = ""):
    image = await read_upload(image_file)
    errors = modele_service.validate_modele_form(price, image, editing=modele_id is not None)

    failure = None
    if not errors:
        value = modele_service.parse_price(price)
        if modele_id:
            result = await modele_service.update_modele(api, modele_id, value, image)
        else:
            result = await modele_service.create_modele(api, value, image)
        if result.success:
            return redirect_to(LIST_URL, succes="Modèle mis à jour" if modele_id else "Modèle créé")
        logging.error(f"Erreur enregistrement modèle: {result.message}")
        failure = result

    state = ScreenState()
    state.items = state.load(await modele_service.get_all_modeles(api))
    state.open_modal("edit" if modele_id else "create", {"price": price, "imageUrl": image_url},
                     editing_id=modele_id)
    state.form_errors = errors
    if failure:
        state.reject(failure)
    return render_screen(request, "modeles.html", state)


@router.post("", response_class=HTMLResponse)
async def create_modele(
    request: Request,
    price: str = Form(""),
    image: Optional[UploadFile] = File(None),
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Créer un modèle (image obligatoire)"""
    return await _save_modele(request, api, None, price, image)

@router.post("/{modele_id}", response_class=HTMLResponse)
async def update_modele(
    modele_id: int,
    request: Request,
    price: str = Form(""),
    imageUrl: str = Form(""),
    image: Optional[UploadFile] = File(None),
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Mettre à jour un modèle"""
    return await _save_modele(request, api, modele_id, price, image, imageUrl)

@router.post("/{modele_id}/delete")
async def delete_modele(
    modele_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Supprimer un modèle"""
    result = await modele_service.delete_modele(api, modele_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Modèle supprimé")
