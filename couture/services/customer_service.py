"""
Clients et mesures de couture
"""
from typing import Dict, Optional, Tuple
import re
from ..api_client import ApiResult, BackendClient
from ..schemas import Customer, CustomerSummary, Measure, MEASURE_FIELDS
from .formatting import format_amount_input, parse_amount
from .media import ImagePayload

PHONE_PATTERN = re.compile(r"^[\d\s\-+()]{8,15}$")

# (champ, libellé, min, max) en cm, bornes incluses
MEASURE_RANGES = [
    ("tourPoitrine", "Tour de poitrine", 0, 300),
    ("tourCeinture", "Tour ceinture", 0, 300),
    ("longueurManche", "Longueur de manche", 0, 150),
    ("tourBras", "Tour de bras", 0, 100),
    ("longueurChemise", "Longueur de chemise", 0, 200),
    ("longueurPantalon", "Longueur de pantalon", 0, 150),
    ("largeurEpaules", "Largeur d'épaules", 0, 100),
    ("tourCou", "Tour de cou", 0, 100),
]


async def get_all_customers(api: BackendClient) -> ApiResult:
    result = await api.get("/customers", default_error="Erreur lors de la récupération des clients")
    return result.parse_list(CustomerSummary)

async def get_customer_by_id(api: BackendClient, customer_id: int) -> ApiResult:
    result = await api.get(f"/customers/{customer_id}", default_error="Client non trouvé")
    return result.parse(Customer)

def _customer_form(name: str, phone: str, photo: Optional[ImagePayload]):
    data = {"Name": name.strip(), "PhoneNumber": phone.strip()}
    files = {"PhotoFile": photo.as_file()} if photo else None
    return data, files

async def create_customer(api: BackendClient, name: str, phone: str, photo: Optional[ImagePayload] = None) -> ApiResult:
    data, files = _customer_form(name, phone, photo)
    return await api.post("/customers", data=data, files=files,
                        default_error="Erreur lors de la création du client")

async def update_customer(api: BackendClient, customer_id: int, name: str, phone: str,
                          photo: Optional[ImagePayload] = None) -> ApiResult:
    data, files = _customer_form(name, phone, photo)
    return await api.put(f"/customers/{customer_id}", data=data, files=files,
                        default_error="Erreur lors de la mise à jour du client")

async def delete_customer(api: BackendClient, customer_id: int) -> ApiResult:
    return await api.delete(f"/customers/{customer_id}", default_error="Erreur lors de la suppression du client")

async def get_customer_measures(api: BackendClient, customer_id: int) -> ApiResult:
    result = await api.get(f"/customers/{customer_id}/measures",
                           default_error="Mesures non trouvées")
    return result.parse(Measure)

async def create_or_update_measures(api: BackendClient, customer_id: int, values: Dict[str, Optional[float]]) -> ApiResult:
    payload = {"customerId": customer_id}
    payload.update(values)
    return await api.post(f"/customers/{customer_id}/measures", json=payload,
                        default_error="Erreur lors de la sauvegarde des mesures")

async def delete_measures(api: BackendClient, customer_id: int) -> ApiResult:
    return await api.delete(f"/customers/{customer_id}/measures",
                            default_error="Erreur lors de la suppression des mesures")


def validate_customer_data(name: str, phone: str) -> Dict[str, str]:
    errors = {}
    name = (name or "").strip()
    phone = (phone or "").strip()
    if not name:
        errors["name"] = "Le nom est requis"
    elif len(name) < 2:
        errors["name"] = "Le nom doit contenir au moins 2 caractères"
    if not phone:
        errors["phoneNumber"] = "Le numéro de téléphone est requis"
    elif not PHONE_PATTERN.match(phone):
        errors["phoneNumber"] = "Le numéro de téléphone doit contenir entre 8 et 15 chiffres"
    return errors

def validate_measure_data(values: Dict[str, Optional[float]]) -> Dict[str, str]:
    errors = {}
    for field, name, minimum, maximum in MEASURE_RANGES:
        value = values.get(field)
        if value is None:
            continue
        if value < minimum or value > maximum:
            errors[field] = f"{name} doit être entre {minimum} et {maximum} cm"
    return errors

def parse_measure_form(form) -> Tuple[Dict[str, Optional[float]], Dict[str, str]]:
    """Champs texte -> valeurs numériques; un champ vide devient None"""
    values: Dict[str, Optional[float]] = {}
    errors: Dict[str, str] = {}
    for field, label in MEASURE_FIELDS:
        try:
            values[field] = parse_amount(form.get(field))
        except ValueError:
            values[field] = None
            errors[field] = f"{label} doit être un nombre"
    return values, errors

def measure_to_form(measure: Optional[Measure]) -> Dict[str, str]:
    form = {}
    for field, _label in MEASURE_FIELDS:
        value = getattr(measure, field, None) if measure else None
        if value is None:
            form[field] = ""
        else:
            form[field] = format_amount_input(value)
    return form
