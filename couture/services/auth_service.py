from typing import Dict
from ..api_client import ApiResult, BackendClient
from ..schemas import User


def validate_login(email_or_username: str, password: str) -> Dict[str, str]:
    errors = {}
    if not (email_or_username or "").strip():
        errors["emailOrUsername"] = "L'email ou nom d'utilisateur est requis"
    if not (password or "").strip():
        errors["password"] = "Le mot de passe est requis"
    return errors

async def login(api: BackendClient, email_or_username: str, password: str) -> ApiResult:
    """Connexion: le backend renvoie {success, message?, user?}"""
    result = await api.post(
        "/auth/login",
        json={"emailOrUsername": email_or_username.strip(), "password": password},
        default_error="Erreur lors de la connexion",
    )
    if not result.success:
        return result
    if not isinstance(result.data, dict) or not result.data.get("user"):
        return ApiResult.fail(result.unwrap_message("Erreur lors de la connexion"))
    return result.parse(User, key="user")
