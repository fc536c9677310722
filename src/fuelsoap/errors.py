# fuelsoap/errors.py
"""
Structured errors raised by the SOAP client.

Callers never see raw transport exceptions: a failed transport call surfaces
as SoapTransportError (chained to the underlying cause), and a completed call
whose response reports failure surfaces as SoapOperationError carrying that
response unchanged.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fuelsoap.response_models import SoapResponse


class SoapError(RuntimeError):
    """
    Base class for client errors.

    Attributes:
        response: The response attached to the error, or None when the call
                  never produced one.
    """

    def __init__(self, message: str, response: 'SoapResponse | None' = None) -> None:
        super().__init__(message)
        self.response: SoapResponse | None = response


class SoapTransportError(SoapError):
    """The transport call could not be completed, even after one retry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, response=None)


class SoapOperationError(SoapError):
    """A completed call reported failure; the failed response is attached."""

    def __init__(self, message: str, response: 'SoapResponse') -> None:
        super().__init__(message, response=response)
        self.response: SoapResponse = response
