# fuelsoap/response_models/outcome.py
"""
Stage outcomes for response unpacking.

Each unpack stage returns either Ok (the envelope had the expected shape) or
Degraded (it did not, and a fallback value was used). Degradation is never
raised; it is carried in the return type and recorded on the response.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar('T')


class Ok(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T


class Degraded(BaseModel, Generic[T]):
    """
    Attributes:
        value: The fallback value the stage produced.
        reason: Why the envelope could not be read as expected.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T
    reason: str
