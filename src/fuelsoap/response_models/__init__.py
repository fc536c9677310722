"""
Response models for partner API SOAP operations.

SoapResponse unpacks the envelopes of retrieve, create, update, delete and
perform calls; DescribeResponse specializes the results stage for object
definitions.
"""

from fuelsoap.response_models.describe_response import (
    DefinitionsPage,
    DescribeResponse,
    walk_object_definition,
)
from fuelsoap.response_models.outcome import Degraded, Ok
from fuelsoap.response_models.soap_response import (
    STATUS_MORE_DATA,
    STATUS_OK,
    BodyParts,
    ContinuationSource,
    ResultsPage,
    SoapResponse,
)

__all__: list[str] = [
    'STATUS_MORE_DATA',
    'STATUS_OK',
    'BodyParts',
    'ContinuationSource',
    'Degraded',
    'DefinitionsPage',
    'DescribeResponse',
    'Ok',
    'ResultsPage',
    'SoapResponse',
    'walk_object_definition',
]
