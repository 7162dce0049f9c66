from fastapi import FastAPI, Request, HTTPException
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import os
from dotenv import load_dotenv

# Charger les variables d'environnement
load_dotenv()

def configure_logging():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

configure_logging()

# Imports de l'application
from couture.api_client import BACKEND_API_URL, BackendClient
from couture.auth import LoginRequired
from couture.middleware import cache_headers_middleware, error_handling_middleware
from couture.routers import (
    auth, caisse, caisse_semaine, calendrier, clients, commandes, dashboard, modeles, profil, utilisateurs,
)
from couture.schemas import MODES_PAIEMENT
from couture.screens import BASE_DIR, ScreenState, render_screen, templates
from couture.services import formatting, order_service, transaction_service, user_service

logger = logging.getLogger(__name__)

# Créer l'application FastAPI
app = FastAPI(
    title="Collections - Gestion d'atelier de couture",
    description="Back-office de l'atelier: clients, modèles, commandes, caisse et rendez-vous",
    version="1.0.0"
)

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:8000").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(cache_headers_middleware)
app.middleware("http")(error_handling_middleware)

# Client backend partagé: ouvert au démarrage, fermé à l'arrêt
@app.on_event("startup")
async def startup_event():
    app.state.api = BackendClient()
    logger.info(f"Backend: {BACKEND_API_URL}")

@app.on_event("shutdown")
async def shutdown_event():
    api = getattr(app.state, "api", None)
    if api is not None:
        await api.aclose()

# ---- Jinja filters ----
templates.env.filters["format_number"] = formatting.format_number
templates.env.filters["format_price"] = formatting.format_price
templates.env.filters["format_montant"] = formatting.format_montant
templates.env.filters["format_date"] = formatting.format_date
templates.env.filters["format_datetime"] = formatting.format_datetime
templates.env.filters["format_date_long"] = formatting.format_date_long
templates.env.filters["format_date_short_month"] = formatting.format_date_short_month
templates.env.filters["to_date_input"] = formatting.to_date_input
templates.env.filters["amount_input"] = formatting.format_amount_input
templates.env.filters["status_badge"] = order_service.status_badge
templates.env.filters["transaction_color"] = transaction_service.transaction_color
templates.env.filters["user_status_text"] = user_service.status_text
templates.env.filters["user_status_badge"] = user_service.status_badge
templates.env.filters["role_badge"] = user_service.role_badge
templates.env.filters["mode_paiement_label"] = lambda code: MODES_PAIEMENT.get(code, code)

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

# Routers des écrans
app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(clients.router)
app.include_router(modeles.router)
app.include_router(commandes.router)
app.include_router(caisse_semaine.router)
app.include_router(caisse.router)
app.include_router(calendrier.router)
app.include_router(utilisateurs.router)
app.include_router(profil.router)

# Route API de test
@app.get("/api/status")
async def api_status():
    return {
        "message": "API Collections",
        "status": "running",
        "version": "1.0.0",
        "backend": BACKEND_API_URL,
    }

@app.get("/", response_class=HTMLResponse)
async def root():
    return RedirectResponse("/login", status_code=303)

@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/login", status_code=303)

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    # Toute route inconnue renvoie vers la connexion
    return RedirectResponse("/login", status_code=303)

@app.exception_handler(403)
async def forbidden_handler(request: Request, exc: HTTPException):
    return render_screen(request, "error.html", ScreenState(exc.detail), status_code=403, code=403)

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    return render_screen(request, "error.html", ScreenState("Erreur interne du serveur"), status_code=500, code=500)

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
