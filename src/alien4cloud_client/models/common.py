"""Shared Alien4Cloud wire types.

Alien4Cloud speaks camelCase JSON wrapped in a ``{data, error}`` envelope and
encodes every timestamp as integer milliseconds since the Unix epoch. The
models here capture those conventions once so the per-resource models only
declare their fields.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
)
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MILLISECOND = timedelta(milliseconds=1)


def millis_to_datetime(value: Any) -> datetime:
    """Decode an epoch-milliseconds integer into an aware UTC datetime."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"expected epoch milliseconds, got {value!r}")
    return _EPOCH + timedelta(milliseconds=int(value))


def datetime_to_millis(value: datetime) -> int:
    """Encode a datetime as epoch milliseconds, dropping sub-millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) // _MILLISECOND


A4CTime = Annotated[
    datetime,
    PlainValidator(millis_to_datetime),
    PlainSerializer(datetime_to_millis, return_type=int),
]


class A4CModel(BaseModel):
    """Base model mapping snake_case attributes onto Alien4Cloud camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible mapping sent over the wire."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ErrorInfo(A4CModel):
    code: int | None = None
    message: str = ""


class Envelope(A4CModel, Generic[T]):
    """The ``{data, error}`` wrapper of every Alien4Cloud response."""

    data: T | None = None
    error: ErrorInfo | None = None


class ErrorEnvelope(A4CModel):
    """Error side of the envelope; ``data`` is ignored whatever its shape."""

    error: ErrorInfo | None = None


class FacetedSearchResult(A4CModel):
    """Paging metadata shared by every search endpoint."""

    types: list[str] | None = None
    total_results: int = 0
    from_: int = Field(default=0, alias="from")
    to: int = 0
    query_duration: int = 0
    facets: Any = None


class SearchResult(FacetedSearchResult, Generic[T]):
    data: list[T] = Field(default_factory=list)

    def paging(self) -> FacetedSearchResult:
        """Return the paging metadata without the result items."""
        return FacetedSearchResult.model_validate(
            self.model_dump(by_alias=True, exclude={"data"})
        )


class SearchRequest(A4CModel):
    """Body of the generic ``POST .../search`` endpoints."""

    query: str = ""
    from_: int = Field(default=0, alias="from")
    size: int = 50
    filters: dict[str, list[str]] | None = None


class Tag(A4CModel):
    name: str
    value: str


class Location(A4CModel):
    id: str
    name: str
