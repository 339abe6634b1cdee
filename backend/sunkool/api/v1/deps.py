"""
API Dependencies

The identity layer in front of this service authenticates the user and
forwards their id in the X-User-Id header.
"""
from typing import Optional

from fastapi import Header

from sunkool.exceptions import AuthenticationError, ValidationError


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> int:
    """
    Dependency returning the acting user's id.

    Raises:
        AuthenticationError: Header missing or empty
        ValidationError: Header is not an integer id
    """
    if not x_user_id:
        raise AuthenticationError()
    try:
        return int(x_user_id)
    except ValueError:
        raise ValidationError("X-User-Id must be an integer", field="X-User-Id", value=x_user_id)
