"""Convert Pydantic validation errors to the pipeline ToolError contract."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from models.errors import ToolError, create_validation_error


def _loc_to_field(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc if part != "__root__")


def _clean_pydantic_message(message: str) -> str:
    # Custom validators already phrase their own "Invalid <field>: ..." text
    if message.startswith("Value error, "):
        return message[len("Value error, ") :]
    return message


def map_pydantic_validation_error(error: ValidationError) -> ToolError:
    """
    Map the first Pydantic issue to a VALIDATION_ERROR.

    Messages produced by field validators are passed through as-is; built-in
    type errors are prefixed with the offending field path.
    """
    issues = error.errors()
    if not issues:
        return create_validation_error("Invalid input")

    first = issues[0]
    field = _loc_to_field(first.get("loc", ()))
    raw_message = first.get("msg", "Invalid input")
    message = _clean_pydantic_message(raw_message)

    if message.startswith("Invalid ") or message != raw_message or not field:
        return create_validation_error(message)
    return create_validation_error(f"Invalid {field}: {message}")
