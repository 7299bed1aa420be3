"""Small rule helpers used by the per-step validators.

Every helper takes the field mapping and the error dict being built,
and records at most one message per field: the first failing rule wins.
"""

import math
import re
from typing import Any, Iterable, Mapping

from firecert.wizard.steps import StepContext


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else str(value)


def require(fields: Mapping, errors: dict, name: str, message: str) -> bool:
    """Record *message* when the field is blank.  Returns True if present."""
    if name in errors:
        return False
    if is_blank(fields.get(name)):
        errors[name] = message
        return False
    return True


def pattern(
    fields: Mapping,
    errors: dict,
    name: str,
    regex: re.Pattern,
    message: str,
    *,
    required: str | None = None,
) -> None:
    """Match a regex.  Blank values pass unless *required* gives a message."""
    value = fields.get(name)
    if is_blank(value):
        if required:
            require(fields, errors, name, required)
        return
    if name not in errors and not regex.match(_text(value)):
        errors[name] = message


def positive(
    fields: Mapping,
    errors: dict,
    name: str,
    message: str,
    *,
    integer: bool = False,
    required: str | None = None,
) -> None:
    value = fields.get(name)
    if is_blank(value):
        if required:
            require(fields, errors, name, required)
        return
    if name in errors:
        return
    try:
        number = float(_text(value))
    except ValueError:
        errors[name] = message
        return
    if not math.isfinite(number) or number <= 0:
        errors[name] = message
    elif integer and not number.is_integer():
        errors[name] = message


def in_range(
    fields: Mapping, errors: dict, name: str, low: float, high: float, message: str,
) -> None:
    value = fields.get(name)
    if is_blank(value) or name in errors:
        return
    try:
        number = float(_text(value))
    except ValueError:
        errors[name] = message
        return
    if not low <= number <= high:
        errors[name] = message


def choice(
    fields: Mapping,
    errors: dict,
    name: str,
    choices: Iterable[str],
    message: str,
    *,
    required: bool = True,
) -> None:
    value = fields.get(name)
    if is_blank(value):
        if required:
            require(fields, errors, name, message)
        return
    if name not in errors and value not in tuple(choices):
        errors[name] = message


def must_be_true(fields: Mapping, errors: dict, name: str, message: str) -> None:
    if fields.get(name) is not True:
        errors.setdefault(name, message)


def documents_present(ctx: StepContext) -> dict[str, str]:
    """Every required document needs a staged file or a stored reference.

    Staged files must also pass the upload policy.
    """
    errors: dict[str, str] = {}
    policy_errors = ctx.slots.policy_errors()
    for req in ctx.requirements:
        if req.slug in policy_errors:
            errors[req.slug] = policy_errors[req.slug]
        elif req.required and not ctx.slots.has_document(req.slug):
            errors[req.slug] = f"{req.label} is required"
    return errors
