# fuelsoap/models.py
"""
Pydantic models for partner API SOAP operations.

Request models describe the input of each SOAP action and know how to render
themselves into the nested message mapping handed to the transport. The
remaining models describe what flows between the client and its transport:
serialization hints (XsiTyped), the raw envelope, and object metadata.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

# Actions understood by the transport
SoapAction = Literal['retrieve', 'create', 'update', 'delete', 'perform', 'describe']

SIMPLE_FILTER_PART: str = 'tns:SimpleFilterPart'
COMPLEX_FILTER_PART: str = 'tns:ComplexFilterPart'


def object_xsi_type(object_type: str) -> str:
    """Return the xsi:type used for objects of the given type, e.g. 'tns:Subscriber'."""
    return f'tns:{object_type}'


class XsiTyped(BaseModel):
    """
    Out-of-band serialization hint: emit the payload with an xsi:type attribute.

    The payload keeps its own keys untouched, so a tagged filter or object can
    still be inspected through .payload. A list payload produces repeated
    elements that all carry the same xsi:type.

    Attributes:
        payload: The wrapped value (mapping, list of mappings, or scalar).
        xsi_type: The qualified type name, e.g. 'tns:SimpleFilterPart'.
    """

    model_config = ConfigDict(frozen=True)

    payload: Any
    xsi_type: str


class RawEnvelope(BaseModel):
    """
    What the transport hands back for one SOAP call.

    Attributes:
        action: The action that produced this envelope.
        status_code: HTTP status code of the reply.
        body: The SOAP Body converted to a mapping of its top-level elements
              (snake_case keys), or None if the reply was not parseable XML.
        http_body: Raw reply text.
        soap_fault: True when the Body carries a SOAP Fault.
        request_message: The message that was sent, kept for continuation and
                         diagnostics.
    """

    model_config = ConfigDict(frozen=True)

    action: SoapAction
    status_code: int
    body: dict[str, Any] | None = None
    http_body: str = ''
    soap_fault: bool = False
    request_message: dict[str, Any] = Field(default_factory=dict)


class ObjectMetadata(BaseModel):
    """
    Field classification of an object type, as returned by describe.

    Every tuple keeps the order in which the service listed the definitions.
    """

    model_config = ConfigDict(frozen=True)

    properties: tuple[str, ...] = ()
    retrievable: tuple[str, ...] = ()
    updatable: tuple[str, ...] = ()
    required: tuple[str, ...] = ()
    extended: tuple[str, ...] = ()
    viewable: tuple[str, ...] = ()
    editable: tuple[str, ...] = ()


# =============================================================================
# Request Models
# =============================================================================


class SoapOperationRequest(BaseModel, ABC):
    """
    Abstract base class for all SOAP operation requests.

    Subclasses must define:
    - action: The transport action name (class attribute)
    - to_soap_message(): The nested message mapping for that action

    This lets the client dispatch any request without knowing its shape.
    """

    model_config = ConfigDict(frozen=True)

    action: ClassVar[SoapAction]

    @abstractmethod
    def to_soap_message(self) -> dict[str, Any]:
        """Build the message mapping handed to the transport."""


class RetrieveRequest(SoapOperationRequest):
    """
    Request model for the retrieve action.

    Attributes:
        object_type: Remote object type, e.g. 'Subscriber'.
        properties: Already-normalized property names.
        filter_part: Already-normalized filter part ({} for no filter).
    """

    action: ClassVar[SoapAction] = 'retrieve'

    object_type: str = Field(..., min_length=1)
    properties: list[str]
    filter_part: dict[str, Any] = Field(default_factory=dict)

    def to_soap_message(self) -> dict[str, Any]:
        return {
            'RetrieveRequest': {
                'ObjectType': self.object_type,
                'Properties': list(self.properties),
                **self.filter_part,
            }
        }


class ContinueRetrieveRequest(SoapOperationRequest):
    """Fetch the next page of a retrieve that reported MoreDataAvailable."""

    action: ClassVar[SoapAction] = 'retrieve'

    request_id: str = Field(..., min_length=1)

    def to_soap_message(self) -> dict[str, Any]:
        return {'RetrieveRequest': {'ContinueRequest': self.request_id}}


class DescribeRequest(SoapOperationRequest):
    """Request the object definition of an object type."""

    action: ClassVar[SoapAction] = 'describe'

    object_type: str = Field(..., min_length=1)

    def to_soap_message(self) -> dict[str, Any]:
        return {
            'DescribeRequests': {
                'ObjectDefinitionRequest': {'ObjectType': self.object_type}
            }
        }


class ObjectsRequest(SoapOperationRequest):
    """
    Shared shape of the create, update and delete actions.

    Attributes:
        object_type: Remote object type; every object is tagged 'tns:{object_type}'.
        objects: Object mappings, with custom attributes already moved under
                 'Attributes'.
    """

    object_type: str = Field(..., min_length=1)
    objects: list[dict[str, Any]]

    def to_soap_message(self) -> dict[str, Any]:
        return {
            'Objects': XsiTyped(
                payload=[dict(item) for item in self.objects],
                xsi_type=object_xsi_type(self.object_type),
            )
        }


class CreateRequest(ObjectsRequest):
    action: ClassVar[SoapAction] = 'create'


class UpdateRequest(ObjectsRequest):
    action: ClassVar[SoapAction] = 'update'


class DeleteRequest(ObjectsRequest):
    action: ClassVar[SoapAction] = 'delete'


class PerformRequest(SoapOperationRequest):
    """
    Invoke a named action (e.g. 'start') against definitions of an object type.

    Attributes:
        object_type: Definition type, e.g. 'EmailSendDefinition'.
        perform_action: The action name sent as the 'Action' element.
        definition: The definition payload (mapping or list of mappings).
    """

    action: ClassVar[SoapAction] = 'perform'

    object_type: str = Field(..., min_length=1)
    perform_action: str = Field(..., min_length=1)
    definition: Any

    def to_soap_message(self) -> dict[str, Any]:
        return {
            'Action': self.perform_action,
            'Definitions': {
                'Definition': XsiTyped(
                    payload=self.definition,
                    xsi_type=object_xsi_type(self.object_type),
                )
            },
        }
