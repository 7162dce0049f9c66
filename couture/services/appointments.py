"""
Rendez-vous de retrait: vue calendrier dérivée des commandes
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Tuple
from pydantic import BaseModel
from ..schemas import OrderSummary
from .order_service import status_color


class AppointmentEvent(BaseModel):
    id: str
    title: str
    start: datetime
    color: str
    order: OrderSummary

    @property
    def day(self) -> date:
        return self.start.date()


def appointments_to_events(orders: Iterable[OrderSummary]) -> List[AppointmentEvent]:
    """Seules les commandes avec une date de rendez-vous deviennent des événements"""
    events = [
        AppointmentEvent(
            id=f"order-{order.id}",
            title=f"RDV - {order.customerName}",
            start=order.dateRendezVous,
            color=status_color(order.statut),
            order=order,
        )
        for order in orders
        if order.dateRendezVous
    ]
    return sorted(events, key=lambda e: e.start.replace(tzinfo=None))

def appointment_stats(events: List[AppointmentEvent], today: date) -> Dict[str, int]:
    week_end = today + timedelta(days=7)
    return {
        "total": len(events),
        "today": sum(1 for e in events if e.day == today),
        "week": sum(1 for e in events if today <= e.day <= week_end),
    }

def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1

def month_grid(year: int, month: int, events: Iterable[AppointmentEvent]) -> List[List[dict]]:
    """Semaines du mois (lundi en premier), chaque jour avec ses événements"""
    by_day: Dict[date, List[AppointmentEvent]] = {}
    for event in events:
        by_day.setdefault(event.day, []).append(event)

    weeks = []
    for week in calendar.Calendar(firstweekday=0).monthdatescalendar(year, month):
        weeks.append([
            {
                "date": d,
                "in_month": d.month == month,
                "events": by_day.get(d, []),
            }
            for d in week
        ])
    return weeks
