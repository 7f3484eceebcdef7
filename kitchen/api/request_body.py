"""Request body parsing shared by the API routers."""
from typing import Any

from fastapi import HTTPException
from pydantic import ValidationError


def parse_body(model, data: Any):
    """Validate a request body, turning pydantic errors into a 400 with readable messages."""
    try:
        return model.model_validate(data if isinstance(data, dict) else {})
    except ValidationError as e:
        errors = [{"loc": [str(p) for p in err["loc"]], "msg": err["msg"]} for err in e.errors()]
        raise HTTPException(status_code=400, detail={"error": "Missing required fields", "errors": errors})
