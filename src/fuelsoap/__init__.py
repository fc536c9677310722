# fuelsoap/__init__.py

from .errors import SoapError, SoapOperationError, SoapTransportError
from .response_models import DescribeResponse, SoapResponse
from .soap_client import SoapClient
from .transport import SoapTransport

__all__: list[str] = [
    # response_models
    'DescribeResponse',
    # soap_client.py
    'SoapClient',
    # errors.py
    'SoapError',
    'SoapOperationError',
    'SoapResponse',
    'SoapTransport',
    'SoapTransportError',
]
