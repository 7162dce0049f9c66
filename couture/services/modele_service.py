from typing import Dict, Optional
from ..api_client import ApiResult, BackendClient
from ..schemas import Modele
from .formatting import format_amount_input, parse_amount
from .media import ImagePayload, validate_image_file


async def get_all_modeles(api: BackendClient) -> ApiResult:
    result = await api.get("/modeles", default_error="Erreur lors de la récupération des modèles")
    return result.parse_list(Modele)

async def get_modele_by_id(api: BackendClient, modele_id: int) -> ApiResult:
    result = await api.get(f"/modeles/{modele_id}", default_error="Modèle non trouvé")
    return result.parse(Modele)

def _price_field(price: float) -> str:
    return format_amount_input(price)

async def create_modele(api: BackendClient, price: float, image: ImagePayload) -> ApiResult:
    # Toujours en multipart: l'image est obligatoire à la création
    return await api.post(
        "/modeles",
        data={"Price": _price_field(price)},
        files={"ImageFile": image.as_file()},
        default_error="Erreur lors de la création du modèle",
    )

async def update_modele(api: BackendClient, modele_id: int, price: float, image: Optional[ImagePayload] = None) -> ApiResult:
    if image:
        data = {"Price": _price_field(price)}
        files = {"ImageFile": image.as_file()}
    else:
        # Sans nouvelle image, le prix part seul comme partie multipart
        data = None
        files = {"Price": (None, _price_field(price))}
    return await api.put(
        f"/modeles/{modele_id}",
        data=data,
        files=files,
        default_error="Erreur lors de la mise à jour du modèle",
    )

async def delete_modele(api: BackendClient, modele_id: int) -> ApiResult:
    return await api.delete(f"/modeles/{modele_id}", default_error="Erreur lors de la suppression du modèle")


def parse_price(raw) -> Optional[float]:
    try:
        return parse_amount(raw)
    except ValueError:
        return None

def validate_modele_form(raw_price, image: Optional[ImagePayload], editing: bool) -> Dict[str, str]:
    errors = {}
    if not str(raw_price or "").strip():
        errors["price"] = "Le prix est requis"
    else:
        price = parse_price(raw_price)
        if price is None or price <= 0:
            errors["price"] = "Le prix doit être un nombre positif"
    if image is None:
        if not editing:
            errors["image"] = "Une image est requise"
    else:
        message = validate_image_file(image.content_type, image.size)
        if message:
            errors["image"] = message
    return errors
