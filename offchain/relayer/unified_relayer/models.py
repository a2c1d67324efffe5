"""
Pydantic models for API responses.
"""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Liveness status of the relayer."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field("healthy", description="Fixed health marker")
    timestamp: str = Field(..., description="Current UTC time (ISO-8601)")
    monitored_chains: list[str] = Field(
        default_factory=list,
        alias="monitoredChains",
        description="Chains with a configured RPC URL",
    )
