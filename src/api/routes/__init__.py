"""Rotas HTTP do gateway.

Estrutura:
- routes/sessions.py: ciclo de vida das sessões e stream de QR
- routes/messages.py: envio de texto/mídia e verificação de números
- routes/webhook.py: configuração e status do webhook
- routes/health/: liveness e readiness

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
