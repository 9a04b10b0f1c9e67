"""Canonicalização de telefones (funções puras).

Regras para o Brasil (único país com augmentação suportada):
- número nacional (DDD + assinante, 10-11 dígitos) ganha o código 55
- celulares podem estar registrados com ou sem o "nono dígito"
  (indicador móvel), conforme a época do cadastro do aparelho

Nenhuma função aqui faz I/O; a sonda de existência fica no resolver.
"""

from __future__ import annotations

from typing import Literal

from app.recipients.jid import has_special_suffix, parse_jid
from utils.errors import InvalidAddressError

BRAZIL_COUNTRY_CODE = "55"
MOBILE_INDICATOR = "9"
MIN_PHONE_DIGITS = 10

RecipientKind = Literal["special", "phone", "jid"]

# Caracteres aceitos como formatação em números digitados por humanos
SEPARATORS = frozenset("+-(). ")

# Tamanhos canônicos com código do país: 55 + DDD(2) + assinante(8|9)
_WITH_INDICATOR_LEN = 13
_WITHOUT_INDICATOR_LEN = 12

VALID_AREA_CODES = frozenset(
    {
        "11", "12", "13", "14", "15", "16", "17", "18", "19",
        "21", "22", "24", "27", "28",
        "31", "32", "33", "34", "35", "37", "38",
        "41", "42", "43", "44", "45", "46", "47", "48", "49",
        "51", "53", "54", "55",
        "61", "62", "63", "64", "65", "66", "67", "68", "69",
        "71", "73", "74", "75", "77", "79",
        "81", "82", "83", "84", "85", "86", "87", "88", "89",
        "91", "92", "93", "94", "95", "96", "97", "98",
    }
)  # fmt: skip


def strip_separators(raw: str) -> str:
    """Remove caracteres de formatação (`+ - ( ) . espaço`)."""
    return "".join(ch for ch in raw if ch not in SEPARATORS)


def clean_phone_number(raw: str) -> str:
    """Remove formatação e o `+` inicial, mantendo apenas dígitos."""
    return strip_separators(raw.strip())


def is_phone_number(raw: str) -> bool:
    """True se, sem separadores, sobram apenas dígitos (mínimo 10)."""
    digits = strip_separators(raw)
    return digits.isascii() and digits.isdigit() and len(digits) >= MIN_PHONE_DIGITS


def is_brazilian_area_code(number: str) -> bool:
    """Verifica se os dois primeiros dígitos formam um DDD válido.

    Exclui padrões típicos de números norte-americanos (1-555-...) que
    colidem com DDDs da região 15.
    """
    if len(number) < 2:
        return False
    area_code = number[:2]
    if area_code not in VALID_AREA_CODES:
        return False
    if len(number) == 11 and number.startswith("1555"):
        return False
    return not (area_code == "15" and number[2:4] == "55")


def apply_country_code(number: str) -> str:
    """Prefixa 55 em número nacional brasileiro (10-11 dígitos).

    A tabela de DDDs decide apenas se o código deve ser *adicionado*;
    números já prefixados nunca são rejeitados aqui.
    """
    if number.startswith(BRAZIL_COUNTRY_CODE):
        return number
    if MIN_PHONE_DIGITS <= len(number) <= 11 and is_brazilian_area_code(number):
        return BRAZIL_COUNTRY_CODE + number
    return number


def remove_mobile_indicator(number: str) -> str:
    """55 + DDD + 9XXXXXXXX → 55 + DDD + XXXXXXXX (sem alteração se não aplicável)."""
    if not number.startswith(BRAZIL_COUNTRY_CODE) or len(number) != _WITH_INDICATOR_LEN:
        return number
    subscriber = number[4:]
    if subscriber.startswith(MOBILE_INDICATOR):
        return number[:4] + subscriber[1:]
    return number


def add_mobile_indicator(number: str) -> str:
    """55 + DDD + [6-9]XXXXXXX → 55 + DDD + 9[6-9]XXXXXXX (sem alteração se não aplicável)."""
    if not number.startswith(BRAZIL_COUNTRY_CODE) or len(number) != _WITHOUT_INDICATOR_LEN:
        return number
    subscriber = number[4:]
    if subscriber[0] in "6789" and not subscriber.startswith(MOBILE_INDICATOR):
        return number[:4] + MOBILE_INDICATOR + subscriber
    return number


def toggle_mobile_indicator(number: str) -> str:
    """Remove o indicador em números de 13 dígitos ou adiciona em 12."""
    if len(number) == _WITH_INDICATOR_LEN:
        return remove_mobile_indicator(number)
    return add_mobile_indicator(number)


def alternative_candidates(primary: str) -> list[str]:
    """Hipóteses alternativas para um número não encontrado na rede.

    - 13 dígitos com 55: tenta sem o nono dígito
    - 12 dígitos com 55: tenta com o nono dígito
    - 10-11 dígitos começando com 55: o "55" provavelmente é o DDD
      (região de Santa Maria/RS) e falta o código do país; tenta
      re-adicionar o código e também alternar o indicador

    Args:
        primary: Candidato primário (já limpo e augmentado).

    Returns:
        Candidatos em ordem de tentativa, sem duplicatas e sem o primário.
    """
    candidates: list[str] = []
    if primary.startswith(BRAZIL_COUNTRY_CODE):
        if len(primary) in (_WITH_INDICATOR_LEN, _WITHOUT_INDICATOR_LEN):
            candidates.append(toggle_mobile_indicator(primary))
        elif MIN_PHONE_DIGITS <= len(primary) <= 11 and is_brazilian_area_code(primary):
            with_country_code = BRAZIL_COUNTRY_CODE + primary
            candidates.append(with_country_code)
            candidates.append(toggle_mobile_indicator(with_country_code))

    unique: list[str] = []
    for candidate in candidates:
        if candidate != primary and candidate not in unique:
            unique.append(candidate)
    return unique


def primary_candidate(raw: str) -> str:
    """Limpa e augmenta um telefone digitado (sem sonda)."""
    return apply_country_code(clean_phone_number(raw))


def classify_recipient(raw: str | None) -> tuple[RecipientKind, str]:
    """Classifica o campo "to" apenas pelo formato (sem consultar a rede).

    Ordem de precedência: domínio especial, telefone, endereço com "@".

    Args:
        raw: Campo "to" como recebido.

    Returns:
        (tipo, entrada sem espaços nas bordas). Endereços estruturados
        já saem validados; telefones ainda precisam de primary_candidate.

    Raises:
        InvalidAddressError: Entrada vazia, ambígua ou estruturalmente inválida.
    """
    to = (raw or "").strip()
    if not to:
        raise InvalidAddressError("destinatário não pode ser vazio")
    if has_special_suffix(to):
        parse_jid(to)
        return "special", to
    if is_phone_number(to):
        return "phone", to
    if "@" in to:
        parse_jid(to)
        return "jid", to
    raise InvalidAddressError(f"destinatário inválido: {mask_address(to)}")


def mask_address(raw: str) -> str:
    """Mascara endereço para logs (mantém só os 4 últimos caracteres)."""
    if len(raw) <= 4:
        return "*" * len(raw)
    return "*" * (len(raw) - 4) + raw[-4:]
