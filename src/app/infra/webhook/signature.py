"""Assinatura HMAC-SHA256 do corpo entregue ao webhook."""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_HEADER = "X-Hub-Signature"
SIGNATURE_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    """Calcula o valor do header `X-Hub-Signature` para o corpo bruto.

    Args:
        body: Corpo serializado exatamente como enviado
        secret: Segredo compartilhado com o receptor

    Returns:
        String no formato `sha256=<hex>`
    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: str, secret: str) -> bool:
    """Verifica assinatura recebida (lado do receptor)."""
    if not signature.startswith(SIGNATURE_PREFIX):
        return False
    return hmac.compare_digest(compute_signature(body, secret), signature)
