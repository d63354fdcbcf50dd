from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from constants import ALL_ITEM_NAME


T = TypeVar("T")

_MODEL_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:/-]*$")


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T]
    error: Optional[str]

    @property
    def is_valid(self) -> bool:
        return self.error is None


def validate_int(
    value: str | None,
    *,
    default: Optional[int] = None,
    name: str = "value",
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> ValidationResult[int]:
    if value is None or str(value).strip() == "":
        if default is None:
            return ValidationResult(None, f"{name} must be provided")
        return ValidationResult(default, None)
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return ValidationResult(None, f"{name} must be an integer")
    if min_value is not None and parsed < min_value:
        return ValidationResult(None, f"{name} must be >= {min_value}")
    if max_value is not None and parsed > max_value:
        return ValidationResult(None, f"{name} must be <= {max_value}")
    return ValidationResult(parsed, None)


def validate_port(value: str | None, *, default: Optional[int] = None, name: str = "Port") -> ValidationResult[int]:
    return validate_int(value, default=default, name=name, min_value=1, max_value=65535)


def validate_timeout(value: str | None, *, default: float, name: str = "Timeout") -> ValidationResult[float]:
    if value is None or str(value).strip() == "":
        return ValidationResult(default, None)
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return ValidationResult(None, f"{name} must be a number")
    if parsed <= 0:
        return ValidationResult(None, f"{name} must be > 0")
    return ValidationResult(parsed, None)


def validate_model_name(value: str | None) -> ValidationResult[str]:
    """Check a registry reference such as ``llama3`` or ``library/gemma:2b``."""
    name = (value or "").strip()
    if not name:
        return ValidationResult(None, "Model name must be provided")
    if name == ALL_ITEM_NAME:
        return ValidationResult(None, f"'{ALL_ITEM_NAME}' is reserved")
    if not _MODEL_NAME_RE.match(name):
        return ValidationResult(None, f"Invalid model name: {name}")
    return ValidationResult(name, None)


def split_command(value: str | None, *, name: str = "command") -> ValidationResult[list[str]]:
    value = (value or "").strip()
    if not value:
        return ValidationResult([], None)
    try:
        return ValidationResult(shlex.split(value), None)
    except ValueError as exc:
        return ValidationResult(None, f"Could not parse {name}: {exc}")
