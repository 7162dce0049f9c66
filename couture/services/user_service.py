"""
Administration des comptes utilisateurs et profil courant
"""
from typing import Dict, Optional
from urllib.parse import quote
import re
from ..api_client import ApiResult, BackendClient
from ..schemas import User, UserListResponse, USER_ROLES

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

DEFAULT_USER_FILTERS = {"page": 1, "pageSize": 10}


async def get_all_users(api: BackendClient, filters: Optional[dict] = None) -> ApiResult:
    params = dict(DEFAULT_USER_FILTERS)
    params.update({k: v for k, v in (filters or {}).items() if k in ("page", "pageSize", "search", "role", "status")})
    if isinstance(params.get("status"), bool):
        params["status"] = "true" if params["status"] else "false"
    result = await api.get("/users", params=params,
                           default_error="Erreur lors de la récupération des utilisateurs")
    return result.parse(UserListResponse)

async def get_user_by_id(api: BackendClient, user_id: int) -> ApiResult:
    result = await api.get(f"/users/{user_id}",
                           default_error="Erreur lors de la récupération de l'utilisateur")
    return result.parse(User, key="user")

async def get_current_user_profile(api: BackendClient, user_id: Optional[int]) -> ApiResult:
    if not user_id or user_id <= 0:
        return ApiResult.fail("ID utilisateur invalide")
    result = await api.get("/users/me", params={"userId": user_id},
                           default_error="Erreur lors de la récupération du profil utilisateur")
    return result.parse(User, key="user")

async def create_user(api: BackendClient, payload: dict) -> ApiResult:
    return await api.post("/users", json=payload,
                          default_error="Erreur lors de la création de l'utilisateur")

async def update_user(api: BackendClient, user_id: int, payload: dict) -> ApiResult:
    return await api.put(f"/users/{user_id}", json=payload,
                         default_error="Erreur lors de la mise à jour de l'utilisateur")

async def delete_user(api: BackendClient, user_id: int) -> ApiResult:
    return await api.delete(f"/users/{user_id}",
                            default_error="Erreur lors de la suppression de l'utilisateur")

async def change_password(api: BackendClient, user_id: int, current: str, new: str, confirm: str) -> ApiResult:
    return await api.put(
        f"/users/{user_id}/change-password",
        json={"currentPassword": current, "newPassword": new, "confirmPassword": confirm},
        default_error="Erreur lors du changement de mot de passe",
    )

async def toggle_user_status(api: BackendClient, user_id: int) -> ApiResult:
    return await api.put(f"/users/{user_id}/toggle-status",
                         default_error="Erreur lors du changement de statut")

async def check_email_exists(api: BackendClient, email: str) -> bool:
    result = await api.get(f"/users/check-email/{quote(email, safe='')}")
    return bool(result.success and isinstance(result.data, dict) and result.data.get("exists"))

async def check_username_exists(api: BackendClient, user_name: str) -> bool:
    result = await api.get(f"/users/check-username/{quote(user_name, safe='')}")
    return bool(result.success and isinstance(result.data, dict) and result.data.get("exists"))


def empty_user_form() -> dict:
    return {
        "name": "", "userName": "", "phone": "", "email": "", "password": "",
        "role": "User", "country": "", "city": "", "status": True, "picture": "",
    }

def user_to_form(user: User) -> dict:
    return {
        "name": user.name,
        "userName": user.userName,
        "phone": user.phone or "",
        "email": user.email,
        # Le mot de passe n'est jamais pré-rempli
        "password": "",
        "role": user.role,
        "country": user.country or "",
        "city": user.city or "",
        "status": user.status,
        "picture": user.picture or "",
    }

def read_user_form(form) -> dict:
    data = {key: str(form.get(key) or "").strip() for key in
            ("name", "userName", "phone", "email", "role", "country", "city", "picture")}
    data["password"] = str(form.get("password") or "")
    data["status"] = str(form.get("status") or "").lower() in ("on", "true", "1")
    return data

def validate_user_form(form: dict, creating: bool) -> Dict[str, str]:
    errors = {}
    if not form.get("name"):
        errors["name"] = "Le nom est requis"
    if not form.get("userName"):
        errors["userName"] = "Le nom d'utilisateur est requis"
    email = form.get("email") or ""
    if not email:
        errors["email"] = "L'email est requis"
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = "L'email n'est pas valide"
    if form.get("role") not in USER_ROLES:
        errors["role"] = "Le rôle est requis"
    if creating:
        password = form.get("password") or ""
        if not password:
            errors["password"] = "Le mot de passe est requis"
        elif len(password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères"
    return errors

def build_user_payload(form: dict, creating: bool) -> dict:
    payload = {
        "name": form["name"],
        "userName": form["userName"],
        "email": form["email"],
        "role": form["role"],
        "status": bool(form.get("status")),
    }
    for key in ("phone", "country", "city", "picture"):
        if form.get(key):
            payload[key] = form[key]
    if creating:
        payload["password"] = form["password"]
    return payload

def validate_password_change(current: str, new: str, confirm: str) -> Dict[str, str]:
    errors = {}
    if not current:
        errors["currentPassword"] = "Le mot de passe actuel est requis"
    if not new:
        errors["newPassword"] = "Le nouveau mot de passe est requis"
    elif len(new) < MIN_PASSWORD_LENGTH:
        errors["newPassword"] = f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères"
    if new != confirm:
        errors["confirmPassword"] = "Les mots de passe ne correspondent pas"
    return errors

def status_text(status: bool) -> str:
    return "Actif" if status else "Inactif"

def status_badge(status: bool) -> str:
    return "bg-success" if status else "bg-danger"

def role_badge(role: str) -> str:
    return "bg-purple" if role == "Admin" else "bg-primary"

def total_pages(total_count: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return max(1, -(-total_count // page_size))
