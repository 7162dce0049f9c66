"""
Regroupement des transactions de caisse par semaine ISO (calculé à chaque affichage)
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple
from ..schemas import (
    SemaineTransactions, TotauxGeneraux, TotauxSemaine, Transaction, TransactionsParSemaine,
)


def week_key(d: date) -> Tuple[int, int]:
    iso = d.isocalendar()
    return iso[0], iso[1]

def week_bounds(annee: int, numero: int) -> Tuple[date, date]:
    monday = date.fromisocalendar(annee, numero, 1)
    return monday, monday + timedelta(days=6)

def week_totals(transactions: List[Transaction]) -> TotauxSemaine:
    entrees = [t for t in transactions if t.type == "ENTREE"]
    sorties = [t for t in transactions if t.type == "SORTIE"]
    return TotauxSemaine(
        nombreTransactions=len(transactions),
        nombreEntrees=len(entrees),
        nombreSorties=len(sorties),
        totalEntrees=sum(t.montant for t in entrees),
        totalSorties=sum(t.montant for t in sorties),
        soldeNet=sum(t.montantAvecSigne for t in transactions),
    )

def group_by_week(transactions: Iterable[Transaction]) -> TransactionsParSemaine:
    """Une entrée par (année ISO, semaine ISO), de la plus ancienne à la plus récente"""
    buckets: Dict[Tuple[int, int], List[Transaction]] = {}
    for t in transactions:
        buckets.setdefault(week_key(t.dateTransaction.date()), []).append(t)

    semaines = []
    for (annee, numero) in sorted(buckets):
        items = sorted(buckets[(annee, numero)], key=lambda t: t.dateTransaction, reverse=True)
        debut, fin = week_bounds(annee, numero)
        semaines.append(SemaineTransactions(
            annee=annee,
            numeroSemaine=numero,
            debutSemaine=debut,
            finSemaine=fin,
            transactions=items,
            totaux=week_totals(items),
        ))

    totaux = TotauxGeneraux(
        periodeDebut=semaines[0].debutSemaine if semaines else None,
        periodeFin=semaines[-1].finSemaine if semaines else None,
        nombreSemaines=len(semaines),
        nombreTransactionsTotal=sum(s.totaux.nombreTransactions for s in semaines),
        totalEntreesGenerales=sum(s.totaux.totalEntrees for s in semaines),
        totalSortiesGenerales=sum(s.totaux.totalSorties for s in semaines),
        soldeNetGeneral=sum(s.totaux.soldeNet for s in semaines),
    )
    return TransactionsParSemaine(semaines=semaines, totauxGeneraux=totaux)

def default_open_weeks(groupes: TransactionsParSemaine) -> Set[str]:
    """La semaine la plus récente est ouverte par défaut"""
    if not groupes.semaines:
        return set()
    return {groupes.semaines[-1].key}

def toggle_week(open_keys: Set[str], key: str) -> Set[str]:
    keys = set(open_keys)
    if key in keys:
        keys.remove(key)
    else:
        keys.add(key)
    return keys

def parse_open_weeks(raw: Optional[str]) -> Optional[Set[str]]:
    """Paramètre ?ouvertes=2025-3,2025-4; None quand absent"""
    if raw is None:
        return None
    return {k for k in raw.split(",") if k}

def serialize_open_weeks(keys: Set[str]) -> str:
    return ",".join(sorted(keys))
