from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from datetime import date
from typing import Optional
import asyncio
import logging

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import COULEUR_OPTIONS, ORDER_STATUSES, TISSU_OPTIONS, OrderForm, User
from ..screens import ScreenState, redirect_to, render_screen
from ..services import customer_service, order_service

router = APIRouter(prefix="/dashboard/commandes", tags=["commandes"])

LIST_URL = "/dashboard/commandes"


async def _load_screen(api: BackendClient, state: ScreenState, statut: Optional[str] = None):
    """Commandes, clients et modèles chargés en parallèle; chaque liste vit indépendamment"""
    orders_call = order_service.get_orders_by_status(api, statut) if statut else order_service.get_all_orders(api)
    orders, customers, modeles = await asyncio.gather(
        orders_call,
        customer_service.get_all_customers(api),
        order_service.get_available_modeles(api),
    )
    state.items = state.load(orders)
    return state.load(customers), state.load(modeles)

def _render(request: Request, state: ScreenState, customers, modeles, statut: Optional[str] = None, **context):
    form = state.form if isinstance(state.form, OrderForm) else None
    return render_screen(
        request, "commandes.html", state,
        customers=customers,
        modeles=modeles,
        modeles_by_id={m.id: m for m in modeles},
        statuses=ORDER_STATUSES,
        tissus=TISSU_OPTIONS,
        couleurs=COULEUR_OPTIONS,
        statut_filtre=statut or "",
        totals=order_service.preview_totals(form, modeles) if form else None,
        **context,
    )


@router.get("", response_class=HTMLResponse)
async def commandes_page(
    request: Request,
    statut: Optional[str] = None,
    modal: Optional[str] = None,
    edit: Optional[int] = None,
    details: Optional[int] = None,
    erreur: Optional[str] = None,
    succes: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Page de gestion des commandes"""
    state = ScreenState(erreur, succes)
    customers, modeles = await _load_screen(api, state, statut)
    context = {}

    if modal == "create":
        state.open_modal("create", order_service.new_order_form(date.today().isoformat()))
    elif edit:
        result = await order_service.get_order_by_id(api, edit)
        if result.success:
            state.open_modal("edit", order_service.order_to_form(result.data), editing_id=edit)
        else:
            state.fail(result.message)
    elif details:
        result = await order_service.get_order_by_id(api, details)
        if result.success:
            state.open_modal("details", editing_id=details)
            context["order"] = result.data
        else:
            state.fail(result.message)
    return _render(request, state, customers, modeles, statut, **context)


async def _server_totals(api: BackendClient, form: OrderForm) -> Optional[dict]:
    """Totaux calculés par le backend (autorité sur les prix)"""
    items = order_service.build_order_payload(form)["orderItems"]
    total = await order_service.calculate_order_total(api, items)
    if not total.success:
        return {"error": total.message}
    reduction = form.reduction if form.hasReduction else None
    final = await order_service.calculate_final_total(api, total.data, reduction)
    if not final.success:
        return {"error": final.message}
    return {"total": total.data, "final": final.data}

async def _submit_order(request: Request, api: BackendClient, order_id: Optional[int]):
    raw = await request.form()
    form = order_service.parse_order_form(raw)
    action = str(raw.get("action") or "save")
    modal = "edit" if order_id else "create"

    # Actions de formulaire: pas d'écriture côté backend
    if action == "add_item":
        order_service.add_item(form)
    elif action.startswith("remove_item:"):
        index = action.split(":", 1)[1]
        if index.isdigit():
            order_service.remove_item(form, int(index))

    errors = {}
    failure = None
    context = {}
    if action == "preview":
        context["server_totals"] = await _server_totals(api, form)
    if action == "save":
        modeles_result = await order_service.get_available_modeles(api)
        if not modeles_result.success:
            # Sans catalogue, le total et la réduction ne peuvent pas être vérifiés
            logging.error(f"Catalogue indisponible pour la commande: {modeles_result.message}")
            failure = modeles_result
        else:
            errors = order_service.validate_order_data(form, modeles_result.data)
        if modeles_result.success and not errors:
            payload = order_service.build_order_payload(form)
            if order_id:
                result = await order_service.update_order(api, order_id, payload)
            else:
                result = await order_service.create_order(api, payload)
            if result.success:
                return redirect_to(LIST_URL, succes="Commande mise à jour" if order_id else "Commande créée")
            logging.error(f"Erreur enregistrement commande: {result.message}")
            failure = result

    state = ScreenState()
    customers, modeles = await _load_screen(api, state)
    state.open_modal(modal, form, editing_id=order_id)
    state.form_errors = errors
    if failure:
        state.reject(failure)
    return _render(request, state, customers, modeles, **context)


@router.post("", response_class=HTMLResponse)
async def create_commande(
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Créer une commande (ou ajouter/retirer une ligne du formulaire)"""
    return await _submit_order(request, api, None)

@router.post("/{order_id}", response_class=HTMLResponse)
async def update_commande(
    order_id: int,
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Mettre à jour une commande"""
    return await _submit_order(request, api, order_id)

@router.post("/{order_id}/statut")
async def update_statut(
    order_id: int,
    statut: str = Form(""),
    filtre: str = Form(""),
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Changement rapide du statut depuis la liste"""
    if statut not in ORDER_STATUSES:
        return redirect_to(LIST_URL, erreur="Statut inconnu", statut=filtre)
    result = await order_service.update_order_status(api, order_id, statut)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message, statut=filtre)
    return redirect_to(LIST_URL, succes=f"Commande #{order_id}: {statut}", statut=filtre)

@router.post("/{order_id}/delete")
async def delete_commande(
    order_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Supprimer une commande"""
    result = await order_service.delete_order(api, order_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Commande supprimée")
