# -----------------------------------------------------------------------------
# /*
#  * Copyright (C) 2025 CodeStory
#  *
#  * This program is free software; you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation; Version 2.
#  *
#  * This program is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with this program; if not, you can contact us at support@codestory.build
#  */
# -----------------------------------------------------------------------------

import json

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from merges.core.exceptions import ValidationError


class ChunkPlan(BaseModel):
    """One entry of a plan: a chunk name and the files it should own."""

    model_config = ConfigDict(extra="ignore")

    name: str
    files: list[str] = Field(default_factory=list)


_PLAN_ADAPTER = TypeAdapter(list[ChunkPlan])


def parse_plan(raw: str) -> list[ChunkPlan]:
    """Parse a JSON document of the form ``[{"name": ..., "files": [...]}, ...]``."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError("Plan is not valid JSON", str(e)) from e

    try:
        return _PLAN_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Plan must be a list of objects with 'name' and 'files'", str(e)
        ) from e
