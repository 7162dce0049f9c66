from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from typing import Optional
import asyncio
import logging

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import MEASURE_FIELDS, User
from ..screens import ScreenState, redirect_to, render_screen
from ..services import customer_service, order_service
from ..services.media import read_upload, validate_image_file

router = APIRouter(prefix="/dashboard/clients", tags=["clients"])

LIST_URL = "/dashboard/clients"


async def _load_customers(api: BackendClient, state: ScreenState):
    state.items = state.load(await customer_service.get_all_customers(api))

def _render(request: Request, state: ScreenState, **context):
    return render_screen(request, "clients.html", state, measure_fields=MEASURE_FIELDS, **context)


@router.get("", response_class=HTMLResponse)
async def clients_page(
    request: Request,
    modal: Optional[str] = None,
    edit: Optional[int] = None,
    mesures: Optional[int] = None,
    commandes: Optional[int] = None,
    erreur: Optional[str] = None,
    succes: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Page de gestion des clients"""
    state = ScreenState(erreur, succes)
    context = {}

    if edit:
        list_result, detail = await asyncio.gather(
            customer_service.get_all_customers(api),
            customer_service.get_customer_by_id(api, edit),
        )
        state.items = state.load(list_result)
        if detail.success:
            customer = detail.data
            state.open_modal("edit", {
                "name": customer.name,
                "phoneNumber": customer.phoneNumber,
                "photoUrl": customer.photoUrl or "",
            }, editing_id=customer.id)
        else:
            state.fail(detail.message)
        return _render(request, state)

    await _load_customers(api, state)
    if modal == "create":
        state.open_modal("create", {"name": "", "phoneNumber": ""})
    elif mesures:
        customer = next((c for c in state.items if c.id == mesures), None)
        result = await customer_service.get_customer_measures(api, mesures)
        # Pas de mesures existantes: formulaire vide
        measure = result.data if result.success else None
        state.open_modal("measures", customer_service.measure_to_form(measure), editing_id=mesures)
        context.update(customer=customer, measure=measure)
    elif commandes:
        customer = next((c for c in state.items if c.id == commandes), None)
        result = await order_service.get_orders_by_customer(api, commandes)
        if result.success:
            state.open_modal("orders", editing_id=commandes)
            context.update(customer=customer, customer_orders=result.data)
        else:
            state.fail(result.message)
    return _render(request, state, **context)


async def _save_customer(request: Request, api: BackendClient, customer_id: Optional[int],
                         name: str, phone: str, photo: Optional[UploadFile]):
    form = {"name": name, "phoneNumber": phone}
    image = await read_upload(photo)
    errors = customer_service.validate_customer_data(name, phone)
    if image is not None:
        message = validate_image_file(image.content_type, image.size)
        if message:
            errors["photo"] = message

    failure = None
    if not errors:
        if customer_id:
            result = await customer_service.update_customer(api, customer_id, name, phone, image)
        else:
            result = await customer_service.create_customer(api, name, phone, image)
        if result.success:
            return redirect_to(LIST_URL, succes="Client mis à jour" if customer_id else "Client créé")
        logging.error(f"Erreur enregistrement client: {result.message}")
        failure = result

    state = ScreenState()
    await _load_customers(api, state)
    state.open_modal("edit" if customer_id else "create", form, editing_id=customer_id)
    state.form_errors = errors
    if failure:
        state.reject(failure)
    return _render(request, state)


@router.post("", response_class=HTMLResponse)
async def create_client(
    request: Request,
    name: str = Form(""),
    phoneNumber: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Créer un client"""
    return await _save_customer(request, api, None, name, phoneNumber, photo)

@router.post("/{customer_id}", response_class=HTMLResponse)
async def update_client(
    customer_id: int,
    request: Request,
    name: str = Form(""),
    phoneNumber: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Mettre à jour un client"""
    return await _save_customer(request, api, customer_id, name, phoneNumber, photo)

@router.post("/{customer_id}/delete")
async def delete_client(
    customer_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Supprimer un client"""
    result = await customer_service.delete_customer(api, customer_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Client supprimé")

@router.post("/{customer_id}/mesures", response_class=HTMLResponse)
async def save_measures(
    customer_id: int,
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Créer ou mettre à jour les mesures d'un client"""
    form = await request.form()
    values, errors = customer_service.parse_measure_form(form)
    errors.update({k: v for k, v in customer_service.validate_measure_data(values).items() if k not in errors})

    failure = None
    if not errors:
        result = await customer_service.create_or_update_measures(api, customer_id, values)
        if result.success:
            return redirect_to(LIST_URL, succes="Mesures enregistrées")
        failure = result

    state = ScreenState()
    await _load_customers(api, state)
    customer = next((c for c in state.items if c.id == customer_id), None)
    state.open_modal("measures", {field: str(form.get(field) or "") for field, _ in MEASURE_FIELDS},
                     editing_id=customer_id)
    state.form_errors = errors
    if failure:
        state.reject(failure, "Erreur lors de la sauvegarde des mesures")
    return _render(request, state, customer=customer, measure=None)

@router.post("/{customer_id}/mesures/delete")
async def delete_measures(
    customer_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Supprimer les mesures d'un client"""
    result = await customer_service.delete_measures(api, customer_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Mesures supprimées")
