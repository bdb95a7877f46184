"""Reform event API schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SaveEventRequest(BaseModel):
    """Payload for saving an event.

    Fields are loosely typed here; the registry reports every missing or
    invalid one in a single 400 response.
    """

    model_config = ConfigDict(populate_by_name=True)

    country_code: Any = Field(default=None, alias="countryCode")
    year: Any = None
    type: Any = None
    title: Any = ""
    desc: Any = ""
    file_url: Any = Field(default=None, alias="fileUrl")


class SaveEventResponse(BaseModel):
    ok: bool = True


class ColorsResponse(BaseModel):
    """Map colouring for one year."""

    year: int
    colors: dict[str, str]
    expression: list[Any]


class PaletteResponse(BaseModel):
    """Reform type colours and the fallback colour."""

    palette: dict[str, str]
    default_color: str = Field(serialization_alias="defaultColor")
