"""
Shared schema building blocks.

The API speaks camelCase JSON (``licensePlate``, ``carId``) while the
Python side uses snake_case attributes that match the database
columns.  ``API_MODEL_CONFIG`` wires the two together: requests are
accepted in either spelling and responses are serialised with the
camelCase aliases.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


API_MODEL_CONFIG: Dict[str, Any] = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "from_attributes": True,
}


class CarBrief(BaseModel):
    """The subset of a car embedded in maintenance and expense responses."""

    id: str
    make: str
    model: str
    year: int
    license_plate: str

    model_config = API_MODEL_CONFIG


class MessageResponse(BaseModel):
    message: str = Field(..., examples=["Car deleted successfully"])


class ErrorResponse(BaseModel):
    """Shape of every error body returned by the API."""

    kind: str = Field(..., examples=["NotFound"])
    message: str = Field(..., examples=["Car not found"])
    errors: Optional[List[Dict[str, Any]]] = None
