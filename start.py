#!/usr/bin/env python3
"""
Script de démarrage pour l'application Collections
"""

import uvicorn
import os
import sys
from pathlib import Path

# Ajouter le répertoire racine au PYTHONPATH
root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

def main():
    """Démarrer l'application FastAPI"""
    from couture.api_client import BACKEND_API_URL

    print("🚀 Démarrage de Collections - Atelier de couture")
    print("=" * 50)

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    print(f"📍 Serveur: http://{host}:{port}")
    print(f"🔄 Rechargement automatique: {'Activé' if reload else 'Désactivé'}")
    print(f"🌐 Backend: {BACKEND_API_URL}")
    print("=" * 50)

    try:
        uvicorn.run(
            "main:app",
            host=host,
            port=port,
            reload=reload,
            log_level=os.getenv("LOG_LEVEL", "info").lower(),
            access_log=True
        )
    except KeyboardInterrupt:
        print("\n👋 Arrêt de l'application")
    except Exception as e:
        print(f"❌ Erreur lors du démarrage: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
