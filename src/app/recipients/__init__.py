"""Resolução de destinatários (telefones e endereços estruturados)."""

from app.recipients.jid import JID, parse_jid
from app.recipients.phone import (
    alternative_candidates,
    apply_country_code,
    classify_recipient,
    clean_phone_number,
    is_brazilian_area_code,
    is_phone_number,
)
from app.recipients.resolver import NumberCheck, RecipientResolver, ResolvedRecipient

__all__ = [
    "JID",
    "NumberCheck",
    "RecipientResolver",
    "ResolvedRecipient",
    "alternative_candidates",
    "apply_country_code",
    "classify_recipient",
    "clean_phone_number",
    "is_brazilian_area_code",
    "is_phone_number",
    "parse_jid",
]
