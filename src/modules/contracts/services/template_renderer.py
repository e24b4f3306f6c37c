"""
Placeholder substitution for contract templates.

Templates may mark a field either as ``{{NAME}}`` or as ``[NAME]``; both
spellings are the same logical field. Rendering is a single pass over the
content, so a value that itself looks like a placeholder is inserted as-is.
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Tuple

# logical field -> placeholder names accepted for it
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "contract_date": ("DATE", "CURRENT_DATE", "TODAY", "CONTRACT_DATE", "EFFECTIVE_DATE"),
    "contract_id": ("CONTRACT_ID", "CONTRACT_NUMBER"),
    "contractor_name": ("CONTRACTOR_NAME", "COMPANY_NAME"),
    "contractor_email": ("CONTRACTOR_EMAIL", "COMPANY_EMAIL"),
    "client_name": ("CLIENT_NAME", "CUSTOMER_NAME", "OWNER_NAME"),
    "client_email": ("CLIENT_EMAIL", "OWNER_EMAIL"),
    "client_address": ("CLIENT_ADDRESS", "OWNER_ADDRESS"),
    "project_name": ("PROJECT_NAME", "PROJECT_LOCATION"),
    "project_description": ("PROJECT_DESCRIPTION", "PROJECT_DETAILS"),
    "scope_of_work": ("SCOPE_OF_WORK", "SCOPE", "WORK_DESCRIPTION"),
    "total_amount": ("TOTAL_AMOUNT", "AMOUNT", "CONTRACT_AMOUNT"),
    "payment_terms": ("PAYMENT_TERMS",),
    "start_date": ("START_DATE",),
    "end_date": ("END_DATE",),
}

# What a field renders as when no value was supplied
DEFAULT_VALUES: Dict[str, str] = {
    "contract_date": "[Date]",
    "contract_id": "[Contract Number]",
    "contractor_name": "[Contractor Name]",
    "contractor_email": "[Contractor Email]",
    "client_name": "[Client Name]",
    "client_email": "[Client Email]",
    "client_address": "[Address]",
    "project_name": "[Project Name]",
    "project_description": "[Project Description]",
    "scope_of_work": "[Scope of Work]",
    "total_amount": "[Amount]",
    "payment_terms": "[Payment Terms]",
    "start_date": "[Start Date]",
    "end_date": "[End Date]",
}

DATE_FIELDS = {"contract_date", "start_date", "end_date"}

_ALIAS_TO_FIELD: Dict[str, str] = {
    name: field for field, names in FIELD_ALIASES.items() for name in names
}

_PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Z0-9_]+)\}\}|\[([A-Z0-9_]+)\]")


def placeholder_forms(name: str) -> Tuple[str, str]:
    return "{{%s}}" % name, "[%s]" % name


def format_currency(value: Any) -> str:
    """50000 or '50,000' -> '$50,000.00'. Non-numeric strings pass through."""
    text = str(value)
    if isinstance(value, str):
        text = value.strip().replace("$", "").replace(",", "")
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return str(value)
    if not amount.is_finite():
        return str(value)
    return "${:,.2f}".format(amount)


def format_date(value: Any) -> str:
    """Long US style, e.g. 'January 5, 2026'. Unparseable strings pass through."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return "%s %d, %d" % (value.strftime("%B"), value.day, value.year)
    return str(value)


def _format_value(field: str, value: Any) -> str:
    if field == "total_amount":
        return format_currency(value)
    if field in DATE_FIELDS:
        return format_date(value)
    return str(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _field_for(key: str):
    """Logical field named by ``key``, matched case-insensitively against every alias."""
    return _ALIAS_TO_FIELD.get(str(key).upper())


def normalize_fields(fields: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Splits caller values into logical fields and extra placeholders.

    A value may be keyed by its logical name (``client_name``) or by any of
    its placeholder names (``CLIENT_NAME``, ``customer_name``); the logical
    name wins when both are given. Blank values are dropped.
    """
    logical: Dict[str, Any] = {}
    extras: Dict[str, Any] = {}
    for key, value in fields.items():
        if _is_blank(value):
            continue
        field = _field_for(key)
        if field is None:
            extras[str(key).upper()] = value
        elif key == field:
            logical[field] = value
        else:
            logical.setdefault(field, value)
    return logical, extras


def build_replacements(fields: Mapping[str, Any]) -> Dict[str, str]:
    """Maps every recognized placeholder token to its rendered value."""
    logical, extras = normalize_fields(fields)
    replacements: Dict[str, str] = {}

    for field, names in FIELD_ALIASES.items():
        value = logical.get(field)
        text = DEFAULT_VALUES[field] if value is None else _format_value(field, value)
        for name in names:
            for token in placeholder_forms(name):
                replacements[token] = text

    # Extra fields become placeholders under their upper-cased key
    for name, value in extras.items():
        for token in placeholder_forms(name):
            replacements[token] = str(value)

    return replacements


def render_template(content: str, fields: Mapping[str, Any]) -> str:
    if not content:
        return ""
    replacements = build_replacements(fields)
    # Longest tokens first so no token shadows a longer one sharing its prefix
    tokens = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(token) for token in tokens))
    return pattern.sub(lambda match: replacements[match.group(0)], content)


def find_placeholders(content: str) -> List[str]:
    """Placeholder names in order of first appearance, in either style."""
    seen: List[str] = []
    for match in _PLACEHOLDER_PATTERN.finditer(content or ""):
        name = match.group(1) or match.group(2)
        if name not in seen:
            seen.append(name)
    return seen


def known_placeholder_names(extra_fields: Iterable[str] = ()) -> set:
    names = {name for aliases in FIELD_ALIASES.values() for name in aliases}
    names.update(key.upper() for key in extra_fields)
    return names


def unresolved_placeholders(content: str, extra_fields: Iterable[str] = ()) -> List[str]:
    """Placeholder-looking tokens that render_template would leave untouched."""
    known = known_placeholder_names(extra_fields)
    return [name for name in find_placeholders(content) if name not in known]
