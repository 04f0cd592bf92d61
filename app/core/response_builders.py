import math
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

from app.models.user import User
from app.schemas.user import UserOut, UserPage

LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def build_user_response(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
        deleted_at=user.deleted_at,
    )


def build_user_response_list(users: Sequence[User]) -> List[UserOut]:
    return [build_user_response(user) for user in users]


def _page_url(path: str, page: int, search: Optional[str]) -> str:
    params = {"page": page} if search is None else {"search": search, "page": page}
    return f"{path}?{urlencode(params)}"


def build_user_page(
    users: Sequence[User],
    total: int,
    page: int,
    per_page: int,
    path: str,
    search: Optional[str] = None,
) -> UserPage:
    last_page = max(math.ceil(total / per_page), 1)
    first_item = (page - 1) * per_page + 1 if users else None
    last_item = first_item + len(users) - 1 if users else None

    return UserPage(
        current_page=page,
        data=build_user_response_list(users),
        first_page_url=_page_url(path, 1, search),
        last_page_url=_page_url(path, last_page, search),
        next_page_url=_page_url(path, page + 1, search) if page < last_page else None,
        prev_page_url=_page_url(path, page - 1, search) if page > 1 else None,
        path=path,
        per_page=per_page,
        last_page=last_page,
        total=total,
        **{"from": first_item, "to": last_item},
    )


def _field_name(loc: Sequence[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] in LOCATION_PREFIXES and len(parts) > 1:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def _message(error: Dict[str, Any], field: str) -> str:
    attribute = field.replace("_", " ")
    kind = error.get("type")
    ctx = error.get("ctx") or {}
    msg = error.get("msg", "")

    if kind == "missing":
        return f"The {attribute} field is required."
    if kind == "string_too_short" and ctx.get("min_length") == 1:
        return f"The {attribute} field is required."
    if kind == "string_pattern_mismatch":
        return f"The {attribute} field is required."
    if kind == "string_too_short":
        return f"The {attribute} field must be at least {ctx['min_length']} characters."
    if kind == "string_too_long":
        return f"The {attribute} field must not be greater than {ctx['max_length']} characters."
    if kind == "string_type":
        return f"The {attribute} field must be a string."
    if kind == "enum":
        return f"The selected {attribute} is invalid."
    if kind in ("int_type", "int_parsing"):
        return f"The {attribute} field must be an integer."
    if kind == "list_type":
        return f"The {attribute} field must be an array."
    if kind in ("dict_type", "model_type", "model_attributes_type"):
        return f"The {attribute} field must be an object."
    if kind == "value_error" and msg.startswith("value is not a valid email address"):
        return f"The {attribute} field must be a valid email address."
    if kind == "value_error":
        return msg.removeprefix("Value error, ")
    return msg


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic error entries into ``{field: [message, ...]}``."""
    formatted: Dict[str, List[str]] = {}
    for error in errors:
        field = _field_name(error.get("loc", ())) or "body"
        formatted.setdefault(field, []).append(_message(error, field))
    return formatted
