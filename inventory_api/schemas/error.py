from pydantic import BaseModel
from typing import Dict, Optional, Union


class ErrorResponse(BaseModel):
    """
    Body returned for every failed request.

    `errors` holds a field -> message mapping for validation failures,
    or the failure message for business-rule violations.
    """
    status: int
    message: str
    errors: Optional[Union[Dict[str, str], str]] = None
