from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from datetime import date, timedelta
from typing import Optional

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import TransactionsParSemaine, User
from ..screens import ScreenState, render_screen
from ..services import ledger, transaction_service

router = APIRouter(prefix="/dashboard/caisse-par-semaine", tags=["caisse"])

PERIODE_PAR_DEFAUT = 30
PAGE_SIZE_PERIODE = 500
MAX_PAGES_PERIODE = 100


async def _load_periode(api: BackendClient, state: ScreenState, date_debut: str, date_fin: str) -> list:
    """Toutes les transactions de la période, page par page jusqu'à une page incomplète"""
    transactions = []
    for page in range(1, MAX_PAGES_PERIODE + 1):
        filters = dict(transaction_service.DEFAULT_FILTERS)
        filters.update({"dateDebut": date_debut, "dateFin": date_fin, "page": page, "pageSize": PAGE_SIZE_PERIODE})
        result = await transaction_service.get_all_transactions(api, filters)
        if not result.success:
            # Des totaux partiels seraient faux: rien n'est regroupé
            state.fail(result.message)
            return []
        transactions.extend(result.data)
        if len(result.data) < PAGE_SIZE_PERIODE:
            return transactions
    state.fail("Période trop chargée: les totaux ne couvrent pas toutes les transactions, réduisez la période")
    return transactions

async def _load_groupes(api: BackendClient, state: ScreenState, date_debut: str, date_fin: str,
                        source: Optional[str]) -> TransactionsParSemaine:
    if source == "serveur":
        result = await transaction_service.get_transactions_par_semaine(api, date_debut, date_fin)
        return state.load(result, default=TransactionsParSemaine())

    transactions = await _load_periode(api, state, date_debut, date_fin)
    return ledger.group_by_week(transactions)


@router.get("", response_class=HTMLResponse)
async def caisse_semaines_page(
    request: Request,
    dateDebut: Optional[str] = None,
    dateFin: Optional[str] = None,
    ouvertes: Optional[str] = None,
    basculer: Optional[str] = None,
    source: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Transactions regroupées par semaine"""
    state = ScreenState()
    today = date.today()
    date_fin = dateFin or today.isoformat()
    date_debut = dateDebut or (today - timedelta(days=PERIODE_PAR_DEFAUT)).isoformat()

    groupes = await _load_groupes(api, state, date_debut, date_fin, source)

    open_weeks = ledger.parse_open_weeks(ouvertes)
    if open_weeks is None:
        open_weeks = ledger.default_open_weeks(groupes)
    if basculer:
        open_weeks = ledger.toggle_week(open_weeks, basculer)

    def toggle_url(key: str) -> str:
        return str(request.url.include_query_params(
            ouvertes=ledger.serialize_open_weeks(ledger.toggle_week(open_weeks, key)),
        ).remove_query_params("basculer"))

    return render_screen(
        request, "caisse_semaine.html", state,
        # Semaines les plus récentes en premier à l'affichage
        semaines=list(reversed(groupes.semaines)),
        totaux=groupes.totauxGeneraux,
        open_weeks=open_weeks,
        toggle_url=toggle_url,
        date_debut=date_debut,
        date_fin=date_fin,
        source=source or "",
    )
