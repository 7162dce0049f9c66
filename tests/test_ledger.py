from datetime import date, datetime

from couture.schemas import Transaction
from couture.services import ledger


def _tx(id, jour, montant, type="ENTREE"):
    signe = montant if type == "ENTREE" else -montant
    return Transaction(
        id=id, montant=montant, type=type, description=f"t{id}",
        dateTransaction=jour, montantAvecSigne=signe,
    )

TRANSACTIONS = [
    # Semaine ISO 10 de 2025 (3 au 9 mars)
    _tx(1, datetime(2025, 3, 3, 9), 10000),
    _tx(2, datetime(2025, 3, 9, 18), 2500, "SORTIE"),
    _tx(3, datetime(2025, 3, 5, 12), 4000),
    # Semaine ISO 11
    _tx(4, datetime(2025, 3, 10, 8), 1500, "SORTIE"),
]

def test_same_iso_week_forms_one_group():
    groupes = ledger.group_by_week(TRANSACTIONS)
    assert [s.key for s in groupes.semaines] == ["2025-10", "2025-11"]

    semaine = groupes.semaines[0]
    assert semaine.debutSemaine == date(2025, 3, 3)
    assert semaine.finSemaine == date(2025, 3, 9)
    assert [t.id for t in semaine.transactions] == [2, 3, 1]
    assert semaine.totaux.nombreTransactions == 3
    assert semaine.totaux.nombreEntrees == 2
    assert semaine.totaux.totalEntrees == 14000
    assert semaine.totaux.totalSorties == 2500
    assert semaine.totaux.soldeNet == sum(t.montantAvecSigne for t in semaine.transactions)

def test_general_totals_sum_the_weeks():
    totaux = ledger.group_by_week(TRANSACTIONS).totauxGeneraux
    assert totaux.nombreSemaines == 2
    assert totaux.nombreTransactionsTotal == 4
    assert totaux.soldeNetGeneral == 10000 - 2500 + 4000 - 1500
    assert totaux.periodeDebut == date(2025, 3, 3)
    assert totaux.periodeFin == date(2025, 3, 16)

def test_iso_year_differs_from_calendar_year():
    groupes = ledger.group_by_week([_tx(1, datetime(2024, 12, 30), 100), _tx(2, datetime(2025, 1, 2), 100)])
    assert [s.key for s in groupes.semaines] == ["2025-1"]

def test_no_transactions():
    groupes = ledger.group_by_week([])
    assert groupes.semaines == []
    assert groupes.totauxGeneraux.nombreSemaines == 0
    assert ledger.default_open_weeks(groupes) == set()

def test_latest_week_open_by_default_and_toggle():
    groupes = ledger.group_by_week(TRANSACTIONS)
    ouvertes = ledger.default_open_weeks(groupes)
    assert ouvertes == {"2025-11"}
    ouvertes = ledger.toggle_week(ouvertes, "2025-10")
    assert ledger.serialize_open_weeks(ouvertes) == "2025-10,2025-11"
    assert ledger.toggle_week(ouvertes, "2025-11") == {"2025-10"}

def test_open_weeks_parameter():
    assert ledger.parse_open_weeks(None) is None
    assert ledger.parse_open_weeks("") == set()
    assert ledger.parse_open_weeks("2025-3,2025-4") == {"2025-3", "2025-4"}
