"""Shared type aliases for JSON-compatible values.

Reply payloads cross the remote channel, so they are modeled as JSON values
throughout the domain and application layers.
"""

from __future__ import annotations

from typing import TypeAlias

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]

__all__ = [
    "JsonPrimitive",
    "JsonValue",
    "JsonObject",
]
