"""
SSP Realty - Record Models
============================
Pydantic models for the four record collections and the login exchange.

Record shapes are loose: every documented field is optional and unknown
fields are accepted and stored as given (extra="allow"). Only the fields a
caller actually sent are written to the store, which makes the same model
usable for a full create and a partial update.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so every stored timestamp is comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class Record(BaseModel):
    """Base for stored records. 'id' is the external primary key."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Return only the fields present in the request body."""
        data = self.model_dump(exclude_unset=True)
        data.pop("_id", None)
        return data


# -- Property -----------------------------------------------------------------

class PricingTier(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    unitNumbers: str | None = None
    price: str | None = None
    furnishing: str | None = None


class ConstructionDetails(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    brickType: str | None = None
    cement: str | None = None
    steel: str | None = None
    electrical: str | None = None
    paints: str | None = None


class Property(Record):
    """A listed property or project."""
    title: str | None = None
    location: str | None = None
    price: str | None = None
    beds: int | float | None = None
    baths: int | float | None = None
    sqft: int | float | None = None
    image: str | None = None
    type: str | None = None
    tag: str | None = None
    description: str | None = None
    amenities: list[str] | None = None
    gallery: list[str] | None = None
    phone: str | None = None
    longDescription: str | None = None
    pricingTiers: list[PricingTier] | None = None
    constructionDetails: ConstructionDetails | None = None
    furnishedItems: list[str] | None = None
    offers: list[str] | None = None
    launchDate: str | None = None
    possessionDate: str | None = None
    totalUnits: int | float | None = None
    soldOut: int | float | None = None
    booked: int | float | None = None
    available: int | float | None = None
    createdAt: UtcDatetime | None = None


# -- Team ---------------------------------------------------------------------

class TeamMember(Record):
    """A member of the agency team shown on the site."""
    name: str | None = None
    role: str | None = None
    image: str | None = None
    createdAt: UtcDatetime | None = None


# -- Public submissions -------------------------------------------------------

class Contact(Record):
    """A contact-form submission."""
    name: str | None = None
    email: str | None = None
    message: str | None = None
    created_at: UtcDatetime | None = None


class Lead(Record):
    """A sales lead captured from a property enquiry."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    propertyId: str | None = None
    source: str | None = None
    created_at: UtcDatetime | None = None


# -- Auth ---------------------------------------------------------------------

class LoginRequest(BaseModel):
    """Admin login. Missing fields are treated as a credential mismatch."""
    email: str | None = Field(None, description="Admin email")
    password: str | None = Field(None, description="Admin password")


class LoginResponse(BaseModel):
    """JWT token returned after a successful login."""
    success: bool = True
    token: str
