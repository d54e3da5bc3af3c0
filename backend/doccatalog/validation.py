"""
Document Catalog — Field Validation and Category Resolution Rules
==================================================================

What:  Pure validation helpers shared by the Pydantic schemas and the
       services, so each rule exists exactly once.
Who:   schemas/document.py and schemas/category.py (field validators),
       CategoryService (category resolution), DocumentService (id parsing).

Category keys:
    The set of valid category keys is computed from the live `categories`
    table: every category name plus every subcategory, lowercased. That set
    is passed in here; nothing in this module touches the database.
"""

import uuid
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from doccatalog.exceptions import ValidationError

DOCUMENT_STATUSES = ("draft", "published", "archived")
PUBLISHED = "published"

_http_url = TypeAdapter(AnyHttpUrl)


# ── Document fields ───────────────────────────────────────────────────────

def validate_status(value: str) -> str:
    """Lowercase and check against DOCUMENT_STATUSES (raises ValueError)."""
    status = value.strip().lower()
    if status not in DOCUMENT_STATUSES:
        raise ValueError(
            f"Status must be one of: {', '.join(DOCUMENT_STATUSES)}"
        )
    return status


def validate_url(value: Optional[str]) -> str:
    """
    Empty or missing URL becomes "". Anything else must be an http(s) URL.

    The value is returned as supplied (trimmed), not in pydantic's
    normalized form, so a fetched document matches what was submitted.
    """
    if value is None:
        return ""
    url = value.strip()
    if not url:
        return ""
    try:
        _http_url.validate_python(url)
    except PydanticValidationError:
        raise ValueError("Valid URL is required") from None
    return url


def normalize_tags(value: Any) -> Any:
    """
    A tags value that is not a list (absent-as-null, a bare string, an
    object) becomes an empty list. List elements are left for the schema's
    `List[str]` type to check.
    """
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def normalize_category_name(value: str) -> str:
    """Category keys are compared trimmed and lowercased."""
    return value.strip().lower()


def dedupe_subcategories(values: Iterable[str]) -> List[str]:
    """
    Trim each subcategory, reject empty ones, drop repeats keeping the first.
    Case is preserved: "MySQL" and "mysql" are distinct subcategories.
    """
    seen: List[str] = []
    for raw in values:
        item = raw.strip()
        if not item:
            raise ValueError("Subcategories must be non-empty strings")
        if item not in seen:
            seen.append(item)
    return seen


# ── Identifiers ───────────────────────────────────────────────────────────

def parse_document_id(value: str) -> uuid.UUID:
    """
    Parse a path identifier into a UUID.

    Raises:
        ValidationError: the value is not a well-formed UUID (→ 400)
    """
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(message="Invalid document ID", field="id") from None


# ── Category resolution ───────────────────────────────────────────────────

def flatten_category_keys(categories: Iterable[Any]) -> List[str]:
    """
    Flatten stored categories into sorted, lowercased, unique keys.

    Accepts any objects with `name` and `subcategories` attributes
    (ORM rows in production, simple stand-ins in tests).
    """
    keys = set()
    for category in categories:
        keys.add(normalize_category_name(category.name))
        for sub in category.subcategories or []:
            key = normalize_category_name(sub)
            if key:
                keys.add(key)
    return sorted(keys)


def split_category_filter(requested: str) -> List[str]:
    """`"MongoDB, mysql,,"` → `["mongodb", "mysql"]` (order kept, repeats dropped)."""
    result: List[str] = []
    for part in requested.split(","):
        key = normalize_category_name(part)
        if key and key not in result:
            result.append(key)
    return result


def intersect_categories(requested: Optional[str], known: Sequence[str]) -> List[str]:
    """
    Resolve a comma-separated category filter against the known keys.

    Rules:
        - None, blank or separator-only filter → every known key
        - otherwise → requested keys that are known, in request order
        - nothing left → ValidationError carrying `validCategories`

    Example:
        >>> intersect_categories("mysql,oracle", ["mongodb", "mysql"])
        ['mysql']
    """
    keys = split_category_filter(requested or "")
    if not keys:
        return list(known)

    known_set = set(known)
    resolved = [key for key in keys if key in known_set]
    if not resolved:
        raise invalid_category_error(known)
    return resolved


def invalid_category_error(known: Sequence[str]) -> ValidationError:
    if known:
        message = f"Invalid category. Must be one of: {', '.join(known)}"
    else:
        message = "Invalid category. No categories have been defined yet"
    return ValidationError(
        message=message,
        context={"validCategories": list(known)},
    )
