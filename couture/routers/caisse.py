from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from datetime import date
from typing import Optional
import asyncio
import logging

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import CATEGORIES_SUGGESTIONS, MODES_PAIEMENT, TRANSACTION_TYPES, User
from ..screens import ScreenState, redirect_to, render_screen
from ..services import transaction_service

router = APIRouter(prefix="/dashboard/caisse", tags=["caisse"])

LIST_URL = "/dashboard/caisse"

FORM_FIELDS = ["montant", "type", "description", "categorie", "modePaiement", "dateTransaction", "notes"]


def _filters_from_query(request: Request) -> dict:
    filters = dict(transaction_service.DEFAULT_FILTERS)
    for key in ("type", "categorie", "recherche", "dateDebut", "dateFin", "modePaiement", "montantMin", "montantMax"):
        value = request.query_params.get(key)
        if value:
            filters[key] = value
    page = request.query_params.get("page") or ""
    if page.isdigit() and int(page) > 0:
        filters["page"] = int(page)
    return filters

async def _load_screen(api: BackendClient, state: ScreenState, filters: dict):
    transactions, statistiques, categories = await asyncio.gather(
        transaction_service.get_all_transactions(api, filters),
        transaction_service.get_statistiques(api, filters.get("dateDebut"), filters.get("dateFin")),
        transaction_service.get_categories(api),
    )
    state.items = state.load(transactions)
    stats = statistiques.data if statistiques.success else None
    if not statistiques.success:
        state.fail(statistiques.message)
    # Suggestions fixes complétées par les catégories déjà utilisées
    used = categories.data if categories.success else []
    suggestions = CATEGORIES_SUGGESTIONS + [c for c in used if c not in CATEGORIES_SUGGESTIONS]
    return stats, suggestions

def _render(request: Request, state: ScreenState, stats, suggestions, filters: dict):
    return render_screen(
        request, "caisse.html", state,
        stats=stats,
        categories=suggestions,
        filters=filters,
        types=TRANSACTION_TYPES,
        modes_paiement=MODES_PAIEMENT,
    )


@router.get("", response_class=HTMLResponse)
async def caisse_page(
    request: Request,
    modal: Optional[str] = None,
    edit: Optional[int] = None,
    erreur: Optional[str] = None,
    succes: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Caisse: statistiques et transactions"""
    state = ScreenState(erreur, succes)
    filters = _filters_from_query(request)
    stats, suggestions = await _load_screen(api, state, filters)

    if modal == "create":
        state.open_modal("create", transaction_service.empty_transaction_form(date.today().isoformat()))
    elif edit:
        result = await transaction_service.get_transaction_by_id(api, edit)
        if result.success:
            state.open_modal("edit", transaction_service.transaction_to_form(result.data), editing_id=edit)
        else:
            state.fail(result.message)
    return _render(request, state, stats, suggestions, filters)


async def _save_transaction(request: Request, api: BackendClient, transaction_id: Optional[int]):
    raw = await request.form()
    form = {key: str(raw.get(key) or "") for key in FORM_FIELDS}
    errors = transaction_service.validate_transaction_form(form)

    state = ScreenState()
    if errors:
        state.error = "Veuillez remplir tous les champs obligatoires"
    else:
        payload = transaction_service.build_transaction_payload(form)
        if transaction_id:
            result = await transaction_service.update_transaction(api, transaction_id, payload)
        else:
            result = await transaction_service.create_transaction(api, payload)
        if result.success:
            return redirect_to(LIST_URL, succes="Transaction mise à jour" if transaction_id else "Transaction créée")
        logging.error(f"Erreur enregistrement transaction: {result.message}")
        state.reject(result)

    filters = dict(transaction_service.DEFAULT_FILTERS)
    message = state.error
    stats, suggestions = await _load_screen(api, state, filters)
    state.error = message
    state.open_modal("edit" if transaction_id else "create", form, editing_id=transaction_id)
    state.form_errors = errors
    return _render(request, state, stats, suggestions, filters)


@router.post("", response_class=HTMLResponse)
async def create_transaction(
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Créer une transaction"""
    return await _save_transaction(request, api, None)

@router.post("/{transaction_id}", response_class=HTMLResponse)
async def update_transaction(
    transaction_id: int,
    request: Request,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Mettre à jour une transaction"""
    return await _save_transaction(request, api, transaction_id)

@router.post("/{transaction_id}/delete")
async def delete_transaction(
    transaction_id: int,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Supprimer une transaction"""
    result = await transaction_service.delete_transaction(api, transaction_id)
    if not result.success:
        return redirect_to(LIST_URL, erreur=result.message)
    return redirect_to(LIST_URL, succes="Transaction supprimée")
