"""
Middlewares pour améliorer la robustesse de l'application
"""
import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from .auth import LoginRequired
from .screens import render_screen, ScreenState

logger = logging.getLogger(__name__)

async def error_handling_middleware(request: Request, call_next):
    """
    Middleware pour gérer les erreurs globalement et éviter les plantages
    """
    try:
        return await call_next(request)
    except (HTTPException, LoginRequired):
        # Déjà gérées par les exception handlers de l'application
        raise
    except Exception as e:
        logger.error(f"Erreur non gérée dans {request.url}: {str(e)}")

        # Pour les requêtes API, retourner du JSON
        if request.url.path.startswith("/api/"):
            return JSONResponse(
                status_code=500,
                content={"detail": "Erreur interne du serveur"}
            )

        return render_screen(
            request, "error.html", ScreenState("Erreur interne du serveur"),
            status_code=500, code=500,
        )

async def cache_headers_middleware(request: Request, call_next):
    """HTML jamais mis en cache (données du backend), assets statiques fortement cachés"""
    response = await call_next(request)
    path = request.url.path or ""
    content_type = (response.headers.get("content-type", "") or "").lower()
    if path.startswith("/static/"):
        response.headers["Cache-Control"] = "public, max-age=31536000, immutable"
    elif content_type.startswith("text/html"):
        response.headers["Cache-Control"] = "no-store"
    return response
