"""
Caisse: transactions ENTREE/SORTIE, statistiques et catégories
"""
from typing import Dict, Optional
from ..api_client import ApiResult, BackendClient
from ..schemas import (
    StatistiquesCaisse, Transaction, TransactionsParSemaine, MODES_PAIEMENT, TRANSACTION_TYPES,
)
from .formatting import format_amount_input, parse_amount

HTTP_ERROR = "Erreur HTTP: {status}"

# Filtres acceptés par GET /transactions
FILTER_KEYS = [
    "type", "categorie", "montantMin", "montantMax", "dateDebut", "dateFin",
    "modePaiement", "recherche", "page", "pageSize", "orderBy", "orderDirection",
]

DEFAULT_FILTERS = {
    "page": 1,
    "pageSize": 20,
    "orderBy": "dateTransaction",
    "orderDirection": "desc",
}


async def get_all_transactions(api: BackendClient, filters: Optional[dict] = None) -> ApiResult:
    params = {k: v for k, v in (filters or {}).items() if k in FILTER_KEYS}
    result = await api.get("/transactions", params=params, default_error=HTTP_ERROR)
    return result.parse_list(Transaction)

async def get_transaction_by_id(api: BackendClient, transaction_id: int) -> ApiResult:
    result = await api.get(f"/transactions/{transaction_id}", default_error=HTTP_ERROR)
    return result.parse(Transaction)

async def create_transaction(api: BackendClient, payload: dict) -> ApiResult:
    return await api.post("/transactions", json=payload, default_error=HTTP_ERROR)

async def update_transaction(api: BackendClient, transaction_id: int, payload: dict) -> ApiResult:
    return await api.put(f"/transactions/{transaction_id}", json=payload, default_error=HTTP_ERROR)

async def delete_transaction(api: BackendClient, transaction_id: int) -> ApiResult:
    return await api.delete(f"/transactions/{transaction_id}", default_error=HTTP_ERROR)

async def get_statistiques(api: BackendClient, date_debut: Optional[str] = None,
                           date_fin: Optional[str] = None) -> ApiResult:
    result = await api.get("/transactions/statistiques",
                           params={"dateDebut": date_debut, "dateFin": date_fin},
                           default_error=HTTP_ERROR)
    return result.parse(StatistiquesCaisse)

async def get_categories(api: BackendClient) -> ApiResult:
    result = await api.get("/transactions/categories", default_error=HTTP_ERROR)
    if not result.success:
        return result
    if not isinstance(result.data, list):
        return ApiResult.ok([])
    return ApiResult.ok([str(c) for c in result.data if c])

async def get_transactions_par_semaine(api: BackendClient, date_debut: Optional[str] = None,
                                       date_fin: Optional[str] = None) -> ApiResult:
    result = await api.get("/transactions/par-semaine",
                           params={"dateDebut": date_debut, "dateFin": date_fin},
                           default_error=HTTP_ERROR)
    return result.parse(TransactionsParSemaine)


def empty_transaction_form(today: str) -> dict:
    return {
        "montant": "",
        "type": "ENTREE",
        "description": "",
        "categorie": "",
        "modePaiement": "ESPECES",
        "dateTransaction": today,
        "notes": "",
    }

def transaction_to_form(transaction: Transaction) -> dict:
    return {
        "montant": format_amount_input(transaction.montant),
        "type": transaction.type,
        "description": transaction.description,
        "categorie": transaction.categorie or "",
        "modePaiement": transaction.modePaiement or "",
        "dateTransaction": transaction.dateTransaction.strftime("%Y-%m-%d"),
        "notes": transaction.notes or "",
    }

def validate_transaction_form(form: dict) -> Dict[str, str]:
    errors = {}
    raw_montant = str(form.get("montant") or "").strip()
    if not raw_montant:
        errors["montant"] = "Le montant est requis"
    else:
        try:
            if parse_amount(raw_montant) <= 0:
                errors["montant"] = "Le montant doit être supérieur à 0"
        except ValueError:
            errors["montant"] = "Le montant doit être un nombre"
    if not str(form.get("description") or "").strip():
        errors["description"] = "La description est requise"
    if form.get("type") not in TRANSACTION_TYPES:
        errors["type"] = "Le type doit être ENTREE ou SORTIE"
    mode = form.get("modePaiement")
    if mode and mode not in MODES_PAIEMENT:
        errors["modePaiement"] = "Mode de paiement inconnu"
    return errors

def build_transaction_payload(form: dict) -> dict:
    payload = {
        "montant": parse_amount(form["montant"]),
        "type": form["type"],
        "description": str(form["description"]).strip(),
    }
    for key in ("categorie", "modePaiement", "dateTransaction", "notes"):
        value = str(form.get(key) or "").strip()
        if value:
            payload[key] = value
    return payload

def transaction_color(montant_avec_signe: float) -> str:
    return "text-success" if montant_avec_signe >= 0 else "text-danger"