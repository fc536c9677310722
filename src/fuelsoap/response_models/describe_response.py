# fuelsoap/response_models/describe_response.py
"""
Describe responses: object definitions instead of data rows.

A describe reply carries no overall status. Success is therefore decided by
whether the definition could be walked, and a definition that cannot be
walked yields a failed response with an 'Unable to describe ...' message.
"""

import logging
from typing import Any

from pydantic import Field

from fuelsoap.models import ObjectMetadata, RawEnvelope

from .outcome import Degraded, Ok
from .soap_response import (
    STRUCTURAL_ERRORS,
    ResultsPage,
    SoapResponse,
    as_list,
    first_body_element,
    get_field,
)

logger: logging.Logger = logging.getLogger(__name__)

# System property the service lists as retrievable but rejects in retrieves
NON_RETRIEVABLE_PROPERTY: str = 'DataRetentionPeriod'


class DefinitionsPage(ResultsPage):
    """Field definitions of an object type plus their classification."""

    metadata: ObjectMetadata = Field(default_factory=ObjectMetadata)


def _require(element: Any, key: str) -> Any:
    value: Any = get_field(element, key)
    if value is None:
        raise KeyError(key)
    return value


def _is_set(definition: Any, flag: str) -> bool:
    return get_field(definition, flag) in (True, 'true')


def _described_object_type(raw: RawEnvelope) -> str:
    request: Any = raw.request_message.get('DescribeRequests') or {}
    definition_request: Any = request.get('ObjectDefinitionRequest') or {}
    return str(definition_request.get('ObjectType', ''))


def walk_object_definition(definition: Any) -> DefinitionsPage:
    """
    Classify the property and extended-property definitions of an object.

    Raises:
        KeyError, TypeError: If the definition is missing or malformed.
    """
    properties: list[str] = []
    retrievable: list[str] = []
    updatable: list[str] = []
    required: list[str] = []
    extended: list[str] = []
    viewable: list[str] = []
    editable: list[str] = []

    property_definitions: list[Any] = as_list(_require(definition, 'properties'))
    for item in property_definitions:
        name: str = str(_require(item, 'name'))
        if _is_set(item, 'is_retrievable') and name != NON_RETRIEVABLE_PROPERTY:
            retrievable.append(name)
        if _is_set(item, 'is_updatable'):
            updatable.append(name)
        if _is_set(item, 'is_required'):
            required.append(name)
        properties.append(name)

    # Absent when the object has no custom fields; a single entry is not a list
    extended_section: Any = get_field(definition, 'extended_properties') or {}
    extended_definitions: list[Any] = as_list(
        get_field(extended_section, 'extended_property') or []
    )
    for item in extended_definitions:
        name = str(_require(item, 'name'))
        if _is_set(item, 'is_viewable'):
            viewable.append(name)
        if _is_set(item, 'is_editable'):
            editable.append(name)
        extended.append(name)

    return DefinitionsPage(
        rows=tuple(property_definitions + extended_definitions),
        metadata=ObjectMetadata(
            properties=tuple(properties),
            retrievable=tuple(retrievable),
            updatable=tuple(updatable),
            required=tuple(required),
            extended=tuple(extended),
            viewable=tuple(viewable),
            editable=tuple(editable),
        ),
    )


class DescribeResponse(SoapResponse):
    """
    Response of a describe call.

    results holds the raw field definitions; the classification is exposed as
    properties, retrievable, updatable, required, extended, viewable and
    editable.
    """

    metadata: ObjectMetadata = Field(default_factory=ObjectMetadata)

    @classmethod
    def _unpack_results(cls, raw: RawEnvelope) -> Ok[Any] | Degraded[Any]:
        try:
            first: Any = first_body_element(raw.body)
            return Ok(value=walk_object_definition(get_field(first, 'object_definition')))
        except STRUCTURAL_ERRORS as error:
            logger.debug('Object definition walk failed: %r', error)
            return Degraded(
                value=DefinitionsPage(),
                reason=f'Unable to describe {_described_object_type(raw)}',
            )

    @classmethod
    def _status_fields(
        cls, message: str | None, results_stage: Ok[Any] | Degraded[Any]
    ) -> dict[str, Any]:
        if isinstance(results_stage, Degraded):
            return {
                'message': results_stage.reason,
                'success': False,
                'metadata': ObjectMetadata(),
            }
        return {'message': message, 'success': True, 'metadata': results_stage.value.metadata}

    @property
    def properties(self) -> tuple[str, ...]:
        return self.metadata.properties

    @property
    def retrievable(self) -> tuple[str, ...]:
        return self.metadata.retrievable

    @property
    def updatable(self) -> tuple[str, ...]:
        return self.metadata.updatable

    @property
    def required(self) -> tuple[str, ...]:
        return self.metadata.required

    @property
    def extended(self) -> tuple[str, ...]:
        return self.metadata.extended

    @property
    def viewable(self) -> tuple[str, ...]:
        return self.metadata.viewable

    @property
    def editable(self) -> tuple[str, ...]:
        return self.metadata.editable
