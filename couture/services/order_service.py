"""
Commandes: appels backend, calculs d'aperçu et validation du formulaire
"""
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote
import re
from ..api_client import ApiResult, BackendClient
from ..schemas import (
    Modele, Order, OrderForm, OrderItemForm, OrderSummary, ORDER_STATUSES,
)
from .formatting import parse_amount, to_date_input

ITEM_FIELD = re.compile(r"^items-(\d+)-(\w+)$")

STATUS_BADGES = {
    "En cours": "bg-primary",
    "Terminé": "bg-success",
    "Livré": "bg-purple",
    "Annulé": "bg-danger",
}

STATUS_COLORS = {
    "En cours": "#3b82f6",
    "Terminé": "#10b981",
    "Livré": "#8b5cf6",
    "Annulé": "#ef4444",
}


async def get_all_orders(api: BackendClient) -> ApiResult:
    result = await api.get("/orders", default_error="Erreur lors de la récupération des commandes")
    return result.parse_list(OrderSummary)

async def get_order_by_id(api: BackendClient, order_id: int) -> ApiResult:
    result = await api.get(f"/orders/{order_id}", default_error="Commande non trouvée")
    return result.parse(Order)

async def create_order(api: BackendClient, payload: dict) -> ApiResult:
    return await api.post("/orders", json=payload, default_error="Erreur lors de la création de la commande")

async def update_order(api: BackendClient, order_id: int, payload: dict) -> ApiResult:
    return await api.put(f"/orders/{order_id}", json=payload,
                         default_error="Erreur lors de la mise à jour de la commande")

async def delete_order(api: BackendClient, order_id: int) -> ApiResult:
    return await api.delete(f"/orders/{order_id}", default_error="Erreur lors de la suppression de la commande")

async def update_order_status(api: BackendClient, order_id: int, status: str) -> ApiResult:
    return await api.patch(f"/orders/{order_id}/status", json={"status": status},
                           default_error="Erreur lors de la mise à jour du statut")

async def get_orders_by_customer(api: BackendClient, customer_id: int) -> ApiResult:
    result = await api.get(f"/orders/customer/{customer_id}",
                           default_error="Erreur lors de la récupération des commandes du client")
    return result.parse_list(OrderSummary)

async def get_orders_by_status(api: BackendClient, status: str) -> ApiResult:
    result = await api.get(f"/orders/status/{quote(status, safe='')}",
                           default_error="Erreur lors de la récupération des commandes")
    return result.parse_list(OrderSummary)

async def get_orders_with_appointments(api: BackendClient, start_date: Optional[str] = None,
                                       end_date: Optional[str] = None) -> ApiResult:
    result = await api.get(
        "/orders/appointments",
        params={"startDate": start_date, "endDate": end_date},
        default_error="Erreur HTTP: {status}",
    )
    return result.parse_list(OrderSummary)

async def calculate_order_total(api: BackendClient, items: List[dict]) -> ApiResult:
    result = await api.post("/orders/calculate-total", json=items,
                            default_error="Erreur lors du calcul du total")
    if not result.success:
        return result
    return ApiResult.ok(float((result.data or {}).get("total") or 0))

async def calculate_final_total(api: BackendClient, total: float, reduction: Optional[float] = None) -> ApiResult:
    result = await api.post("/orders/calculate-final-total", json={"total": total, "reduction": reduction},
                            default_error="Erreur lors du calcul du total final")
    if not result.success:
        return result
    return ApiResult.ok(float((result.data or {}).get("finalTotal") or 0))

async def get_available_modeles(api: BackendClient) -> ApiResult:
    result = await api.get("/modeles", default_error="Erreur lors de la récupération des modèles")
    return result.parse_list(Modele)


# ---- Calculs d'aperçu (le backend reste l'autorité sur les prix) ----

def compute_total(items: Iterable[OrderItemForm], modeles: Iterable[Modele]) -> float:
    prices = {m.id: m.price for m in modeles}
    total = 0.0
    for item in items:
        if item.modeleId in prices:
            price = prices[item.modeleId]
        else:
            price = item.prixUnitaire or 0
        total += price * (item.quantite or 0)
    return total

def compute_final_total(total: float, reduction: Optional[float]) -> float:
    return max(0.0, total - (reduction or 0))

def preview_totals(form: OrderForm, modeles: Iterable[Modele]) -> dict:
    total = compute_total(form.orderItems, modeles)
    reduction = form.reduction if form.hasReduction else None
    return {
        "total": total,
        "reduction": reduction,
        "final": compute_final_total(total, reduction),
    }


# ---- Formulaire ----

def _to_int(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None

def _to_float(value) -> Optional[float]:
    try:
        return parse_amount(value)
    except ValueError:
        return None

def parse_order_form(form) -> OrderForm:
    """Lit les champs plats du formulaire HTML (items-<n>-<champ>) en OrderForm"""
    rows: Dict[int, dict] = {}
    for key in form.keys():
        match = ITEM_FIELD.match(key)
        if match:
            rows.setdefault(int(match.group(1)), {})[match.group(2)] = form.get(key)

    items = []
    for index in sorted(rows):
        row = rows[index]
        items.append(OrderItemForm(
            id=_to_int(row.get("id")),
            modeleId=_to_int(row.get("modeleId")),
            typeTissu=str(row.get("typeTissu") or "").strip(),
            couleur=str(row.get("couleur") or "").strip(),
            quantite=_to_int(row.get("quantite")),
            prixUnitaire=_to_float(row.get("prixUnitaire")),
            notes=str(row.get("notes") or ""),
        ))

    has_reduction = str(form.get("hasReduction") or "").lower() in ("on", "true", "1")
    reduction = _to_float(form.get("reduction")) if has_reduction else None
    raw_reduction = str(form.get("reduction") or "").strip()
    return OrderForm(
        customerId=_to_int(form.get("customerId")),
        dateCommande=str(form.get("dateCommande") or "").strip(),
        dateRendezVous=str(form.get("dateRendezVous") or "").strip(),
        statut=str(form.get("statut") or "").strip(),
        notes=str(form.get("notes") or ""),
        hasReduction=has_reduction,
        reduction=reduction,
        reductionInvalide=has_reduction and bool(raw_reduction) and reduction is None,
        orderItems=items,
    )

def new_order_form(today: str) -> OrderForm:
    return OrderForm(dateCommande=today, statut=ORDER_STATUSES[0], orderItems=[OrderItemForm()])

def order_to_form(order: Order) -> OrderForm:
    return OrderForm(
        customerId=order.customerId,
        dateCommande=to_date_input(order.dateCommande),
        dateRendezVous=to_date_input(order.dateRendezVous),
        statut=order.statut,
        notes=order.notes or "",
        hasReduction=bool(order.reduction and order.reduction > 0),
        reduction=order.reduction,
        orderItems=[
            OrderItemForm(
                id=item.id,
                modeleId=item.modeleId,
                typeTissu=item.typeTissu,
                couleur=item.couleur,
                quantite=item.quantite,
                prixUnitaire=item.prixUnitaire,
                notes=item.notes or "",
            )
            for item in order.orderItems
        ],
    )

def add_item(form: OrderForm) -> OrderForm:
    form.orderItems.append(OrderItemForm())
    return form

def remove_item(form: OrderForm, index: int) -> OrderForm:
    # Une commande garde toujours au moins une ligne
    if len(form.orderItems) > 1 and 0 <= index < len(form.orderItems):
        form.orderItems.pop(index)
    return form

def validate_order_item(item: OrderItemForm) -> Optional[str]:
    if not item.modeleId or item.modeleId <= 0:
        return "Veuillez sélectionner un modèle"
    if not item.typeTissu.strip():
        return "Le type de tissu est requis"
    if not item.couleur.strip():
        return "La couleur est requise"
    if not item.quantite or item.quantite <= 0:
        return "La quantité doit être supérieure à 0"
    if item.quantite > 100:
        return "La quantité ne peut pas dépasser 100"
    return None

def validate_order_data(form: OrderForm, modeles: Iterable[Modele]) -> Dict[str, str]:
    """Contrôles locaux avant envoi; clés: general, reduction"""
    errors: Dict[str, str] = {}
    general = None
    if not form.customerId or form.customerId <= 0:
        general = "Veuillez sélectionner un client"
    elif not form.dateCommande:
        general = "La date de commande est requise"
    elif not form.statut:
        general = "Le statut est requis"
    elif not form.orderItems:
        general = "Au moins un article est requis"
    else:
        for i, item in enumerate(form.orderItems, start=1):
            message = validate_order_item(item)
            if message:
                general = f"Article {i}: {message}"
                break
    if form.reductionInvalide:
        errors["reduction"] = "La réduction doit être un nombre"
    if general is None and form.hasReduction and form.reduction is not None and form.reduction < 0:
        general = "La réduction ne peut pas être négative"
    if general:
        errors["general"] = general

    if form.hasReduction and form.reduction is not None:
        if form.reduction > compute_total(form.orderItems, modeles):
            errors["reduction"] = "La réduction ne peut pas être supérieure au total"
    return errors

def build_order_payload(form: OrderForm) -> dict:
    payload = {
        "customerId": form.customerId,
        "dateCommande": form.dateCommande,
        "statut": form.statut,
        "notes": form.notes,
        "orderItems": [
            {
                "modeleId": item.modeleId,
                "typeTissu": item.typeTissu,
                "couleur": item.couleur,
                "quantite": item.quantite,
                "notes": item.notes,
            }
            for item in form.orderItems
        ],
    }
    if form.dateRendezVous:
        payload["dateRendezVous"] = form.dateRendezVous
    if form.hasReduction and form.reduction is not None:
        payload["reduction"] = form.reduction
    return payload

def status_badge(statut: str) -> str:
    return STATUS_BADGES.get(statut, "bg-secondary")

def status_color(statut: str) -> str:
    return STATUS_COLORS.get(statut, "#6b7280")
