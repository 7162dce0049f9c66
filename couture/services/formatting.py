"""
Formatage des montants et des dates pour l'affichage (filtres Jinja)
"""
import math
from datetime import date, datetime
from typing import Optional

MOIS_FR = {
    1: "janvier", 2: "février", 3: "mars", 4: "avril",
    5: "mai", 6: "juin", 7: "juillet", 8: "août",
    9: "septembre", 10: "octobre", 11: "novembre", 12: "décembre"
}

MOIS_COURTS_FR = {
    1: "janv.", 2: "févr.", 3: "mars", 4: "avr.",
    5: "mai", 6: "juin", 7: "juil.", 8: "août",
    9: "sept.", 10: "oct.", 11: "nov.", 12: "déc."
}

JOURS_FR = ["Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi", "Dimanche"]


def format_number(value) -> str:
    try:
        n = float(value or 0)
        text = f"{n:,.0f}"
        # Regroupement des milliers à la française
        return text.replace(",", " ")
    except (TypeError, ValueError):
        return str(value or 0)

def format_price(value) -> str:
    """Montant en francs CFA, ex: 1 000 CFA (jamais le code XOF)"""
    return f"{format_number(value)} CFA"

def format_montant(value, signe: Optional[float] = None) -> str:
    """Montant de caisse, préfixé de + ou - quand un montant signé est fourni"""
    text = format_price(abs(float(value or 0)))
    if signe is None:
        return text
    return f"+{text}" if float(signe) >= 0 else f"-{text}"

def format_amount_input(value) -> str:
    """Valeur d'un champ de saisie numérique, sans arrondi ni notation exponentielle"""
    if value is None or value == "":
        return ""
    n = float(value)
    if n.is_integer():
        return str(int(n))
    return repr(n)

def parse_amount(raw) -> Optional[float]:
    """Saisie utilisateur -> nombre fini; None si vide, ValueError si invalide (nan, inf compris)"""
    text = str(raw or "").strip().replace("\u00a0", "").replace(" ", "").replace(",", ".")
    if not text:
        return None
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Valeur numérique invalide: {raw}")
    return value

def parse_date(value) -> Optional[datetime]:
    """Accepte datetime, date, ISO (avec ou sans Z) ou JJ/MM/AAAA"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = str(value).strip()
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(s.split(" ")[0].split("T")[0], fmt)
        except ValueError:
            continue
    return None

def format_date(value) -> str:
    """JJ/MM/AAAA"""
    dt = parse_date(value)
    if dt is None:
        return "" if value is None else str(value)
    return dt.strftime("%d/%m/%Y")

def format_datetime(value) -> str:
    dt = parse_date(value)
    if dt is None:
        return "" if value is None else str(value)
    return dt.strftime("%d/%m/%Y %H:%M")

def format_date_long(value) -> str:
    """Format français: jour mois année (ex: 31 décembre 2025)"""
    dt = parse_date(value)
    if dt is None:
        return "" if value is None else str(value)
    return f"{dt.day} {MOIS_FR.get(dt.month, '')} {dt.year}"

def format_date_short_month(value) -> str:
    dt = parse_date(value)
    if dt is None:
        return "" if value is None else str(value)
    return f"{dt.day} {MOIS_COURTS_FR.get(dt.month, '')}"

def to_date_input(value) -> str:
    """Valeur pour un <input type="date">: AAAA-MM-JJ"""
    dt = parse_date(value)
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%d")

def month_title(year: int, month: int) -> str:
    return f"{MOIS_FR.get(month, '').capitalize()} {year}"
