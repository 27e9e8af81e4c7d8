from __future__ import annotations

import re

import phonenumbers
from phonenumbers import NumberParseException


def _only_digits(s: str) -> str:
    return re.sub(r"\D+", "", s or "")

def _basic_normalize(raw: str) -> str | None:
    """
    Fallback quando o phonenumbers não reconhece o número:
      - remove prefixo internacional '00'
      - aceita 8-15 dígitos como já internacional
    """
    d = _only_digits(raw)
    if d.startswith("00"):
        d = d[2:]
    if 8 <= len(d) <= 15:  # noqa: PLR2004
        return d
    return None

def normalize_phone(raw: str, default_region: str = "DZ", with_plus: bool = False) -> str | None:
    """
    Normaliza para E.164. Padrão: apenas dígitos ('213555000111');
    with_plus=True → '+213555000111'. Irrecuperável → None.

    Números locais ('0555 00 01 11') são interpretados na região padrão.
    """
    if not raw or not _only_digits(raw):
        return None

    digits: str | None = None
    candidates = [raw]
    if not raw.strip().startswith("+"):
        candidates.append("+" + _only_digits(raw).removeprefix("00"))

    for candidate in candidates:
        try:
            num = phonenumbers.parse(candidate, default_region)
        except NumberParseException:
            continue
        if phonenumbers.is_possible_number(num):
            digits = _only_digits(phonenumbers.format_number(num, phonenumbers.PhoneNumberFormat.E164))
            break

    if digits is None:
        digits = _basic_normalize(raw)
    if not digits:
        return None
    return f"+{digits}" if with_plus else digits
