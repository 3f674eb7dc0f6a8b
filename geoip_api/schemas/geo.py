from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GeolocationRecord(BaseModel):
    """Geolocation data resolved for one address. Missing data is empty, never absent."""

    model_config = ConfigDict(frozen=True)

    ip: Optional[str] = Field(None, description="Requested address, as sent by the client")
    latitude: float = Field(0.0, description="Approximate latitude")
    longitude: float = Field(0.0, description="Approximate longitude")
    time_zone: str = Field("", description="IANA time zone name")
    iso_code: str = Field("", description="ISO 3166-1 alpha-2 country code")
    city: Dict[str, str] = Field(default_factory=dict, description="City names by language code")
    subdivisions: List[Dict[str, str]] = Field(
        default_factory=list, description="Subdivision names by language code, outermost first"
    )
    country: Dict[str, str] = Field(default_factory=dict, description="Country names by language code")
    registered_country: Dict[str, str] = Field(
        default_factory=dict, description="Registered country names by language code"
    )
