"""Pydantic models for authentication payloads."""

from pydantic import BaseModel


class Token(BaseModel):
    """Bearer token returned after a successful login."""

    access_token: str
    token_type: str = "bearer"


__all__ = ["Token"]
