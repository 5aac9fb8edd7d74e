from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import Settings
from app.core.lookup.attributes import get_timezone


# =========================
# ENTITY
# =========================
class Entity(BaseModel):
    """
    One identifier handed over by the host application.
    Only `value` is used for the lookup, anything else rides along untouched.
    """

    value: str

    model_config = ConfigDict(extra="allow", frozen=True)


# =========================
# LOOKUP OPTIONS
# =========================
class LookupOptions(BaseModel):
    # Connection
    region: str
    endpoint: Optional[str] = None
    access_key_id: str = ""
    secret_access_key: str = ""

    # Query
    query: str
    query_parameter: str = "{{entity}}"
    limit: int = Field(default=10, ge=1)

    # Projection
    summary_attributes: str = ""
    detail_attributes: str = ""
    document_title_attribute: str = ""

    max_concurrent_queries: int = Field(default=10, ge=1, le=10)
    millis_as_seconds: bool = True
    display_timezone: str = "UTC"

    model_config = ConfigDict(frozen=True)

    @field_validator("display_timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            get_timezone(value)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> "LookupOptions":
        return cls(
            region=settings.AWS_REGION,
            endpoint=settings.DYNAMODB_ENDPOINT,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            query=settings.LOOKUP_QUERY,
            query_parameter=settings.LOOKUP_QUERY_PARAMETER,
            limit=settings.LOOKUP_LIMIT,
            summary_attributes=settings.SUMMARY_ATTRIBUTES,
            detail_attributes=settings.DETAIL_ATTRIBUTES,
            document_title_attribute=settings.DOCUMENT_TITLE_ATTRIBUTE,
            max_concurrent_queries=settings.MAX_CONCURRENT_QUERIES,
            millis_as_seconds=settings.MILLIS_AS_SECONDS,
            display_timezone=settings.DISPLAY_TIMEZONE,
        )

    def merged(self, update: Optional["LookupOptionsUpdate"]) -> "LookupOptions":
        """Defaults with the non-null request overrides applied (and re-validated)."""
        if update is None:
            return self
        return LookupOptions(**{**self.model_dump(), **update.model_dump(exclude_none=True)})

    def connection_key(self) -> tuple:
        """The fields that decide whether an existing client can be reused."""
        return (self.region, self.endpoint, self.access_key_id, self.secret_access_key)


class LookupOptionsUpdate(BaseModel):
    """
    Per-request overrides, merged on top of the configured defaults.
    Connection settings and the concurrency cap are server-side only.
    """

    query: Optional[str] = None
    query_parameter: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    summary_attributes: Optional[str] = None
    detail_attributes: Optional[str] = None
    document_title_attribute: Optional[str] = None
    millis_as_seconds: Optional[bool] = None
    display_timezone: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


# =========================
# LOOKUP REQUEST
# =========================
class LookupRequest(BaseModel):
    entities: List[Entity]
    options: Optional[LookupOptionsUpdate] = None

