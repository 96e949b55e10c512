"""FastNetMon Exporter - Pydantic models for the upstream API and HTTP responses."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class BlockedEntry(BaseModel):
    """A single currently blocked address."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="Blocked IP address")
    identifier: str = Field(..., description="FastNetMon blackhole UUID")

    @property
    def key(self) -> Tuple[str, str]:
        """Label key (ip, uuid) used by the metric store."""
        return self.address, self.identifier


class BlockedValue(BaseModel):
    """One element of the blackhole API ``values`` array."""

    model_config = ConfigDict(extra='ignore', strict=True)

    uuid: str = Field(default="", description="Blackhole UUID")
    ip: str = Field(default="", description="Blocked IP address")

    def to_entry(self) -> BlockedEntry:
        """Convert to a blocked entry."""
        return BlockedEntry(address=self.ip, identifier=self.uuid)


class BlackholeResponse(BaseModel):
    """Blackhole API response body."""

    model_config = ConfigDict(extra='ignore', strict=True)

    success: bool = Field(default=False, description="Whether the API call succeeded")
    values: Optional[List[Optional[BlockedValue]]] = Field(default=None, description="Blocked addresses")


class HealthResponse(BaseModel):
    """Liveness check response."""
    status: str = Field(default="ok", description="Health status")
