"""
Pydantic models for ASCOM Alpaca API responses.
"""

from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from boltwood_alpaca.api.error_mapper import http_status_for, map_exception_to_alpaca

MAX_CLIENT_TRANSACTION_ID = 4294967295


class AlpacaResponse(BaseModel):
    """
    Standard ASCOM Alpaca response envelope.

    All device API endpoints return this format.
    """
    Value: Any = Field(None, description="Response value (type varies by endpoint)")
    ClientTransactionID: int = Field(0, description="Client transaction ID (echo from request)")
    ServerTransactionID: int = Field(description="Server transaction ID (auto-incremented)")
    ErrorNumber: int = Field(0, description="Error code (0 = success, non-zero = error)")
    ErrorMessage: str = Field("", description="Error message (empty string if no error)")


def parse_client_transaction_id(raw: Optional[str]) -> int:
    """
    Parse ClientTransactionID as an unsigned 32-bit integer.

    Missing or unparseable values become 0.
    """
    if raw is None:
        return 0
    try:
        value = int(raw.strip())
    except ValueError:
        return 0
    if 0 <= value <= MAX_CLIENT_TRANSACTION_ID:
        return value
    return 0


def make_response(
    value: Any,
    client_id: int = 0,
    server_id: int = 0,
    error: Optional[Exception] = None
) -> AlpacaResponse:
    """
    Helper to create Alpaca response.

    Args:
        value: Response value (None for writes and errors).
        client_id: Client transaction ID.
        server_id: Server transaction ID.
        error: Exception (if any).

    Returns:
        AlpacaResponse instance.
    """
    if error is None:
        return AlpacaResponse(
            Value=value,
            ClientTransactionID=client_id,
            ServerTransactionID=server_id,
            ErrorNumber=0,
            ErrorMessage=""
        )

    error_number, error_message = map_exception_to_alpaca(error)
    return AlpacaResponse(
        Value=None,
        ClientTransactionID=client_id,
        ServerTransactionID=server_id,
        ErrorNumber=error_number,
        ErrorMessage=error_message
    )


def to_json_response(response: AlpacaResponse) -> JSONResponse:
    """Serialize an envelope with the HTTP status its ErrorNumber calls for."""
    return JSONResponse(
        status_code=http_status_for(response.ErrorNumber),
        content=response.model_dump()
    )
