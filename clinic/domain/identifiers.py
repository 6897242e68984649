import re

from clinic.domain.exceptions import InvalidIdentifierError

_CPF_PATTERN = re.compile(r"[0-9]{11}")
_CRM_PATTERN = re.compile(r"[0-9]+")


def is_valid_cpf(value: str | None) -> bool:
    """A CPF is exactly eleven digits, no punctuation."""
    return value is not None and _CPF_PATTERN.fullmatch(value) is not None


def is_valid_crm(value: str | None) -> bool:
    return value is not None and _CRM_PATTERN.fullmatch(value) is not None


def require_cpf(value: str) -> str:
    cpf = value.strip()
    if not is_valid_cpf(cpf):
        raise InvalidIdentifierError("CPF", value)
    return cpf


def require_crm(value: str) -> str:
    crm = value.strip()
    if not is_valid_crm(crm):
        raise InvalidIdentifierError("CRM", value)
    return crm


def format_cpf(cpf: str) -> str:
    """Render ``12345678900`` as ``123.456.789-00``; anything else is returned as-is."""
    if not is_valid_cpf(cpf):
        return cpf
    return f"{cpf[:3]}.{cpf[3:6]}.{cpf[6:9]}-{cpf[9:]}"
