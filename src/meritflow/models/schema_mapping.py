"""Column-mapping models: synonym tables resolved against a real header row."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class FieldKind(StrEnum):
    TEXT = "text"
    IDENTIFIER = "identifier"
    EMAIL = "email"
    NUMBER = "number"
    MONEY = "money"
    PERCENT = "percent"
    BOOLEAN = "boolean"
    DATE = "date"
    RATING = "rating"
    RISK = "risk"
    COMPARATIO = "comparatio"
    CURRENCY_CODE = "currency_code"


class FieldSpec(BaseModel):
    """A canonical field and the header spellings that feed it, best first."""

    model_config = {"frozen": True}

    name: str
    kind: FieldKind = FieldKind.TEXT
    synonyms: tuple[str, ...]


class ColumnMapping(BaseModel):
    """Mapping from one or more file columns to a canonical field."""

    target_field: str
    data_type: FieldKind = FieldKind.TEXT
    positions: list[int] = Field(default_factory=list)  # priority order
    source_fields: list[str] = Field(default_factory=list)


class SchemaMapping(BaseModel):
    """Header row resolved against one synonym table."""

    table: str
    column_mappings: list[ColumnMapping] = Field(default_factory=list)
    unmapped_headers: list[str] = Field(default_factory=list)

    @property
    def fields(self) -> set[str]:
        return {m.target_field for m in self.column_mappings}

    def has(self, *names: str) -> bool:
        return any(n in self.fields for n in names)
