"""Front-matter schema of a vault entry."""

from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vaultsync_core.errors import EntryValidationError


class WikiLink(BaseModel):
    target: str
    label: str
    href: str | None = None
    exists: bool = False


class VaultDocument(BaseModel):
    """Validated front-matter. Fields the schema does not name are kept as-is."""

    model_config = ConfigDict(extra='allow')

    title: str = Field(description='display title, defaults to the file name')
    description: str | None = None
    author: str | None = None
    slug: str | None = Field(default=None, description='overrides the path-derived identifier')
    permalink: str = Field(description='public URL of the entry')
    locale: str = 'en'
    created: datetime | None = None
    updated: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)
    draft: bool = False
    links: list[WikiLink] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    @field_validator('title', mode='before')
    @classmethod
    def coerce_title(cls, value: Any) -> Any:
        # YAML turns titles like 2024 or 1.0 into numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator('created', 'updated', mode='before')
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min, tzinfo=timezone.utc)
        return value


async def parse_data(id: str, data: dict[str, Any], file_path: str) -> dict[str, Any]:
    """
    Validate an entry's front-matter against VaultDocument.

    Returns the JSON-compatible validated data.

    Raises:
        EntryValidationError: the front-matter violates the schema
    """
    try:
        document = VaultDocument.model_validate(data)
    except ValidationError as e:
        errors = '; '.join(
            f'{".".join(str(loc) for loc in error["loc"]) or "<root>"}: {error["msg"]}'
            for error in e.errors()
        )
        raise EntryValidationError(id, f'{errors} (in {file_path})') from e

    return document.model_dump(mode='json')
