# Point d'entrée Vercel (fonction serverless Python)
# Vercel détecte le symbole `app` et le sert comme application ASGI.

from main import app  # noqa: F401
