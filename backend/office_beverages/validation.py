from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import JSON, Boolean, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .constants import BeverageCategory, CaffeineLevel, CupSize, OrderStatus, SugarQuantity
from .errors import ValidationError
from .permissions import Role

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
HH_MM_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
REVIEW_MAX_LENGTH = 500


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - choices: closed value sets per field
    - minimums: inclusive lower bound per numeric field
    - virtual_fields: accepted keys that are not columns (e.g. password);
      passed through untouched for a rule function to check
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    choices: dict[str, tuple[str, ...]] = field(default_factory=dict)
    minimums: dict[str, float] = field(default_factory=dict)
    virtual_fields: set[str] = field(default_factory=set)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or "e" in stripped.lower() or "." in stripped:
                raise ValueError(f"{col.key} must be an integer")
            try:
                return int(stripped)
            except ValueError:
                raise ValueError(f"{col.key} must be an integer")
        if isinstance(value, float):
            raise ValueError(f"{col.key} must be an integer, not a decimal")
        raise ValueError(f"{col.key} must be an integer")

    if isinstance(coltype, Float):
        if isinstance(value, bool):
            raise ValueError(f"{col.key} must be a number")
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise ValueError(f"{col.key} must be a number")
        else:
            raise ValueError(f"{col.key} must be a number")
        # float() accepts "nan" and "inf"
        if not math.isfinite(number):
            raise ValueError(f"{col.key} must be a finite number")
        return number

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
            return value.strip().lower() in ("true", "1")
        raise ValueError(f"{col.key} must be a boolean")

    if isinstance(coltype, JSON):
        return value

    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValueError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields) plus choices and minimums
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    Every problem is collected; a single ValidationError carries the list
    as [{"field": ..., "message": ...}].
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    errors: list[dict] = []

    if not partial:
        for f in sorted(policy.required_on_create):
            if payload.get(f) in (None, ""):
                errors.append({"field": f, "message": f"{f} is required"})

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields:
            errors.append({"field": k, "message": f"Field not allowed: {k}"})
            continue

        if k in policy.virtual_fields:
            patch[k] = raw
            continue

        col = cols.get(k)
        if col is None:
            errors.append({"field": k, "message": f"Unknown field: {k}"})
            continue

        if raw is None:
            if not col.nullable:
                if partial or k not in policy.required_on_create:
                    errors.append({"field": k, "message": f"{k} cannot be null"})
                continue
            patch[k] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except ValueError as exc:
            errors.append({"field": k, "message": str(exc)})
            continue

        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            if partial or k not in policy.required_on_create:
                errors.append({"field": k, "message": f"{k} cannot be blank"})
            continue

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                errors.append({"field": k, "message": f"{k} exceeds max length {col.type.length}"})
                continue

        allowed = policy.choices.get(k)
        if allowed is not None and val not in allowed:
            errors.append({"field": k, "message": f"Invalid {k}; expected one of: {', '.join(allowed)}"})
            continue

        minimum = policy.minimums.get(k)
        if minimum is not None and val < minimum:
            errors.append({"field": k, "message": f"{k} must be >= {minimum:g}"})
            continue

        patch[k] = val

    if errors:
        raise ValidationError("Validation failed", errors=errors)

    return patch


USER_POLICY = ModelValidationPolicy(
    writable_fields={
        "username", "password", "full_name", "email", "department", "role",
        "is_active", "work_start_time", "work_end_time",
    },
    required_on_create={"username", "password", "full_name", "email"},
    choices={"role": tuple(Role.values())},
    virtual_fields={"password"},
)

BEVERAGE_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "category", "description", "image_url", "stock_quantity",
        "unit", "min_stock_alert", "unit_price", "caffeine_level", "is_active",
    },
    required_on_create={"name", "category"},
    choices={
        "category": tuple(BeverageCategory.values()),
        "caffeine_level": tuple(CaffeineLevel.values()),
    },
    minimums={"stock_quantity": 0, "min_stock_alert": 0, "unit_price": 0},
)

ORDER_POLICY = ModelValidationPolicy(
    writable_fields={"beverage_id", "cup_size", "sugar_quantity", "add_ons", "remarks"},
    required_on_create={"beverage_id"},
    choices={
        "cup_size": tuple(CupSize.values()),
        "sugar_quantity": tuple(SugarQuantity.values()),
    },
)


def enforce_rules_user(patch: dict, *, creating: bool) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Normalizes email to lowercase in place.
    """
    errors: list[dict] = []

    username = patch.get("username")
    if username is not None and not (USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH):
        errors.append({
            "field": "username",
            "message": f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
        })

    if "password" in patch:
        password = patch["password"]
        if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
            errors.append({
                "field": "password",
                "message": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
            })
    elif creating:
        errors.append({"field": "password", "message": "Password is required"})

    if patch.get("email") is not None:
        email = patch["email"].lower()
        if not EMAIL_RE.match(email):
            errors.append({"field": "email", "message": "Invalid email format"})
        patch["email"] = email

    for key in ("work_start_time", "work_end_time"):
        value = patch.get(key)
        if value and not HH_MM_RE.match(value):
            errors.append({"field": key, "message": f"{key} must be in HH:MM format"})

    if errors:
        raise ValidationError("Validation failed", errors=errors)


def enforce_rules_order(patch: dict) -> None:
    add_ons = patch.get("add_ons")
    if add_ons is None:
        patch.pop("add_ons", None)
        return
    if not isinstance(add_ons, list) or not all(isinstance(a, str) for a in add_ons):
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "add_ons", "message": "Add-ons must be an array of strings"}],
        )
    patch["add_ons"] = [a.strip() for a in add_ons if a.strip()]


def parse_order_status(value: Any) -> str:
    if value not in OrderStatus.values():
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "status", "message": "Invalid order status"}],
        )
    return value


def parse_rating_payload(payload: dict) -> dict:
    """Validate {beverageId, rating, review?, isAnonymous?} for rating upserts."""
    errors: list[dict] = []

    beverage_id = payload.get("beverageId")
    if isinstance(beverage_id, str) and beverage_id.strip().isdigit():
        beverage_id = int(beverage_id.strip())
    if not isinstance(beverage_id, int) or isinstance(beverage_id, bool):
        errors.append({"field": "beverageId", "message": "Beverage ID is required"})

    rating = payload.get("rating")
    if isinstance(rating, str) and rating.strip().isdigit():
        rating = int(rating.strip())
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        errors.append({"field": "rating", "message": "Rating must be between 1 and 5"})

    review = payload.get("review")
    if review is not None:
        if not isinstance(review, str):
            errors.append({"field": "review", "message": "Review must be a string"})
        else:
            review = review.strip() or None
            if review and len(review) > REVIEW_MAX_LENGTH:
                errors.append({"field": "review", "message": "Review cannot exceed 500 characters"})

    is_anonymous = payload.get("isAnonymous", False)
    if not isinstance(is_anonymous, bool):
        errors.append({"field": "isAnonymous", "message": "isAnonymous must be a boolean"})

    if errors:
        raise ValidationError("Validation failed", errors=errors)

    return {
        "beverage_id": beverage_id,
        "rating": rating,
        "review": review,
        "is_anonymous": is_anonymous,
    }


def require_int(value: Any, field_name: str) -> int:
    """Coerce a JSON or query value to int or raise a field-level ValidationError."""
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            "Validation failed",
            errors=[{"field": field_name, "message": f"{field_name} must be an integer"}],
        )
    return value
