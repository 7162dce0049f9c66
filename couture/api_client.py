"""
Client HTTP vers le backend Collections (toute la logique métier vit côté serveur)
"""
from typing import Any, Optional, Dict, Type
from fastapi import Request
from pydantic import BaseModel, ValidationError
import httpx
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Source de vérité de l'URL du backend
_RAW_BACKEND_API_URL = os.getenv(
    "BACKEND_API_URL",
    "https://collections-backend-wucx.onrender.com/api",
)

def _normalize_api_url(url: str) -> str:
    if not url:
        return url
    u = url.strip().rstrip("/")
    # Tolérer une URL sans schéma (ex: localhost:5000/api)
    if not u.startswith(("http://", "https://")):
        u = f"http://{u}"
    return u

BACKEND_API_URL = _normalize_api_url(_RAW_BACKEND_API_URL)
BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "30"))

CONNECTION_ERROR = "Erreur de connexion au serveur"
INVALID_RESPONSE = "Réponse invalide du serveur"


class ApiResult(BaseModel):
    """Résultat unique (succès/échec) renvoyé par tous les services."""
    success: bool
    data: Any = None
    message: str = ""
    errors: Dict[str, str] = {}

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "ApiResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, errors: Optional[Dict[str, str]] = None) -> "ApiResult":
        return cls(success=False, message=message, errors=errors or {})

    def unwrap_message(self, default: str) -> str:
        return self.message or default

    def parse(self, model: Type[BaseModel], key: Optional[str] = None) -> "ApiResult":
        """Convertit data (ou data[key]) en instance du schéma donné."""
        if not self.success:
            return self
        raw = self.data.get(key) if (key and isinstance(self.data, dict)) else self.data
        if raw is None:
            return ApiResult.fail(INVALID_RESPONSE)
        try:
            return ApiResult.ok(model.model_validate(raw), self.message)
        except ValidationError as e:
            logger.warning(f"Réponse backend non conforme à {model.__name__}: {e}")
            return ApiResult.fail(INVALID_RESPONSE)

    def parse_list(self, model: Type[BaseModel], key: Optional[str] = None) -> "ApiResult":
        if not self.success:
            return self
        raw = self.data.get(key) if (key and isinstance(self.data, dict)) else self.data
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            return ApiResult.fail(INVALID_RESPONSE)
        try:
            return ApiResult.ok([model.model_validate(item) for item in raw], self.message)
        except ValidationError as e:
            logger.warning(f"Liste backend non conforme à {model.__name__}: {e}")
            return ApiResult.fail(INVALID_RESPONSE)


def _extract_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("message", "detail", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return default

def _extract_errors(payload: Any) -> Dict[str, str]:
    if not isinstance(payload, dict):
        return {}
    raw = payload.get("errors")
    if not isinstance(raw, dict):
        return {}
    errors = {}
    for field, messages in raw.items():
        if isinstance(messages, (list, tuple)):
            errors[str(field)] = "; ".join(str(m) for m in messages)
        else:
            errors[str(field)] = str(messages)
    return errors


class BackendClient:
    """Enveloppe d'un httpx.AsyncClient partagé; convertit toutes les issues en ApiResult."""

    def __init__(self, base_url: str = BACKEND_API_URL, timeout: float = BACKEND_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self):
        await self.http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        params: Optional[dict] = None,
        default_error: str = "Erreur lors de la requête",
    ) -> ApiResult:
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}
        try:
            response = await self.http.request(method, path, json=json, data=data, files=files, params=params)
        except httpx.RequestError as e:
            logging.error(f"Erreur connexion backend ({method} {path}): {e}")
            return ApiResult.fail(CONNECTION_ERROR)

        logger.debug(f"{method} {path} -> {response.status_code}")

        payload = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None
                if response.is_success:
                    logger.warning(f"Réponse non JSON pour {method} {path}")
                    return ApiResult.fail(INVALID_RESPONSE)

        if response.is_error:
            message = _extract_message(payload, default_error.format(status=response.status_code))
            logger.warning(f"Échec {method} {path}: {response.status_code} - {message}")
            return ApiResult.fail(message, _extract_errors(payload))

        if isinstance(payload, dict) and payload.get("success") is False:
            message = _extract_message(payload, default_error.format(status=response.status_code))
            return ApiResult.fail(message, _extract_errors(payload))

        message = payload.get("message", "") if isinstance(payload, dict) else ""
        return ApiResult.ok(payload, message if isinstance(message, str) else "")

    async def get(self, path: str, **kwargs) -> ApiResult:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> ApiResult:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> ApiResult:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> ApiResult:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> ApiResult:
        return await self.request("DELETE", path, **kwargs)


def get_api(request: Request) -> BackendClient:
    """Dépendance FastAPI: client backend partagé créé au démarrage"""
    api = getattr(request.app.state, "api", None)
    if api is None:
        api = BackendClient()
        request.app.state.api = api
    return api
