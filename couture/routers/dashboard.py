from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from typing import Optional
import asyncio

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import ORDER_STATUSES, User
from ..screens import ScreenState, render_screen
from ..services import carousel, customer_service, modele_service, order_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_class=HTMLResponse)
async def dashboard_home(
    request: Request,
    erreur: Optional[str] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Accueil: carrousel du catalogue et compteurs"""
    state = ScreenState(erreur)
    modeles_result, customers_result, orders_result = await asyncio.gather(
        modele_service.get_all_modeles(api),
        customer_service.get_all_customers(api),
        order_service.get_all_orders(api),
    )
    modeles = state.load(modeles_result)
    customers = state.load(customers_result)
    orders = state.load(orders_result)

    with_images = [m for m in modeles if m.imageUrl]
    stats = {
        "clients": len(customers),
        "modeles": len(modeles),
        "commandes": len(orders),
        "par_statut": {s: sum(1 for o in orders if o.statut == s) for s in ORDER_STATUSES},
    }
    return render_screen(
        request, "dashboard.html", state,
        slides=carousel.carousel_windows(with_images),
        carousel_interval=carousel.INTERVAL_MS,
        stats=stats,
    )
