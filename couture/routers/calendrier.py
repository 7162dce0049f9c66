from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from datetime import date
from typing import Optional

from ..api_client import BackendClient, get_api
from ..auth import require_session
from ..schemas import ORDER_STATUSES, User
from ..screens import ScreenState, render_screen
from ..services import appointments, order_service
from ..services.formatting import JOURS_FR, month_title

router = APIRouter(prefix="/dashboard/calendrier", tags=["calendrier"])


@router.get("", response_class=HTMLResponse)
async def calendrier_page(
    request: Request,
    vue: str = "calendar",
    annee: Optional[int] = None,
    mois: Optional[int] = None,
    rdv: Optional[int] = None,
    api: BackendClient = Depends(get_api),
    current_user: User = Depends(require_session),
):
    """Calendrier des rendez-vous de retrait"""
    state = ScreenState()
    today = date.today()
    year = annee or today.year
    month = mois if mois and 1 <= mois <= 12 else today.month

    orders = state.load(await order_service.get_orders_with_appointments(api))
    events = appointments.appointments_to_events(orders)
    stats = appointments.appointment_stats(events, today)

    selected = None
    if rdv:
        selected = next((e for e in events if e.order.id == rdv), None)
        if selected:
            state.open_modal("details", editing_id=rdv)

    view = "list" if vue == "list" else "calendar"
    prev_year, prev_month = appointments.shift_month(year, month, -1)
    next_year, next_month = appointments.shift_month(year, month, 1)
    return render_screen(
        request, "calendrier.html", state,
        vue=view,
        base_url=f"/dashboard/calendrier?vue={view}&annee={year}&mois={month}",
        events=events,
        stats=stats,
        weeks=appointments.month_grid(year, month, events),
        jours=JOURS_FR,
        titre=month_title(year, month),
        annee=year,
        mois=month,
        precedent={"annee": prev_year, "mois": prev_month},
        suivant={"annee": next_year, "mois": next_month},
        today=today,
        selected=selected,
        statuses=ORDER_STATUSES,
        status_colors={s: order_service.status_color(s) for s in ORDER_STATUSES},
    )
