"""Numbering dependency helpers."""

from fastapi import Form, HTTPException

from server.config import settings
from server.numbering.schemas import NumberingOptions


async def parse_options(
    mode: str | None = Form(default=None),
    on_malformed: str | None = Form(default=None),
) -> NumberingOptions:
    if not settings.allow_user_options:
        return NumberingOptions()
    values = {}
    if mode:
        values["mode"] = mode
    if on_malformed:
        values["on_malformed"] = on_malformed
    try:
        return NumberingOptions.model_validate(values)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid options: {exc}") from exc
