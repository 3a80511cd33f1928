# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared API schema base types.

Every request and response model uses camelCase on the wire and accepts
snake_case field names from Python code.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from expertchat.utils.datetime import ensure_utc


class APIModel(BaseModel):
    """Base model for API schemas."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class OkResponse(APIModel):
    """Plain acknowledgement."""

    ok: bool = True
