"""
Exchange model for a single message delivery attempt.

Contains the Pydantic model the host framework hands to redelivery
policies: the failure being handled, message headers, and a property
bag for bookkeeping that survives across redelivery attempts.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from esb_support.uuid_producer import generate_uuid


class Exchange(BaseModel):
    """Schema for an in-flight message exchange.

    Attributes:
        exchange_id: Unique identifier of this exchange (generated if omitted)
        context_name: Name of the hosting context/session
        from_route_id: Identifier of the route the message came from
        exception: Failure raised by the current delivery attempt, if any
        headers: Message headers (e.g. transactionId)
        properties: Exchange-scoped key/value bookkeeping

    Example:
        >>> exchange = Exchange(
        ...     context_name="consumers",
        ...     from_route_id="orders-consumer",
        ...     headers={"transactionId": "tx-001"},
        ... )
        >>> exchange.exception = ConnectionRefusedError("refused")
    """

    exchange_id: str = Field(
        default_factory=generate_uuid,
        description="Unique exchange identifier",
        min_length=1,
    )
    context_name: str = Field(
        default="",
        description="Name of the hosting context/session",
    )
    from_route_id: Optional[str] = Field(
        default=None,
        description="Route the message was consumed from",
    )
    exception: Optional[BaseException] = Field(
        default=None,
        description="Failure of the current delivery attempt",
    )
    headers: Dict[str, Any] = Field(
        default_factory=dict,
        description="Message headers",
    )
    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Exchange-scoped bookkeeping properties",
    )

    model_config = {
        "arbitrary_types_allowed": True,
        "validate_assignment": True,
    }

    @field_validator("exchange_id")
    @classmethod
    def validate_exchange_id(cls, v: str) -> str:
        """Ensure exchange_id is not whitespace-only."""
        if not v.strip():
            raise ValueError("exchange_id cannot be empty or whitespace")
        return v.strip()

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def set_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def get_header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name, default)
