"""Tests for DescribeResponse and the object definition walk."""

from collections.abc import Callable
from typing import Any

import pytest

from fuelsoap.models import RawEnvelope
from fuelsoap.response_models import DescribeResponse, walk_object_definition

EnvelopeFactory = Callable[..., RawEnvelope]

DESCRIBE_SUBSCRIBER: dict[str, Any] = {
    'DescribeRequests': {'ObjectDefinitionRequest': {'ObjectType': 'Subscriber'}}
}


def definition_body(definition: Any) -> dict[str, Any]:
    return {'definition_response_msg': {'object_definition': definition, 'request_id': 'd-1'}}


class TestDescribeResponse:
    """Tests for classifying object definitions."""

    def test_full_definition(
        self, make_envelope: EnvelopeFactory, subscriber_definition: dict[str, Any]
    ) -> None:
        response = DescribeResponse.from_envelope(
            make_envelope(subscriber_definition, action='describe')
        )

        assert response.success is True
        assert response.properties == (
            'ID',
            'EmailAddress',
            'Status',
            'DataRetentionPeriod',
            'Attributes',
        )
        assert response.retrievable == ('ID', 'EmailAddress', 'Status')
        assert response.updatable == ('EmailAddress', 'Status', 'Attributes')
        assert response.required == ('EmailAddress',)
        assert response.extended == ('First Name', 'Member Since')
        assert response.viewable == ('First Name', 'Member Since')
        assert response.editable == ('First Name',)
        assert len(response.results) == 7  # noqa: PLR2004

    def test_metadata_cannot_be_mutated(
        self, make_envelope: EnvelopeFactory, subscriber_definition: dict[str, Any]
    ) -> None:
        response = DescribeResponse.from_envelope(
            make_envelope(subscriber_definition, action='describe')
        )

        with pytest.raises(AttributeError):
            response.retrievable.append('Password')  # pyright: ignore[reportAttributeAccessIssue]

        assert isinstance(response.metadata.editable, tuple)
        assert 'Password' not in response.retrievable

    def test_data_retention_period_never_retrievable(
        self, make_envelope: EnvelopeFactory
    ) -> None:
        definition = {
            'properties': [
                {'name': 'DataRetentionPeriod', 'is_retrievable': True},
                {'name': 'Name', 'is_retrievable': True},
            ]
        }

        response = DescribeResponse.from_envelope(
            make_envelope(definition_body(definition), action='describe')
        )

        assert response.retrievable == ('Name',)
        assert 'DataRetentionPeriod' in response.properties

    def test_no_extended_properties(self, make_envelope: EnvelopeFactory) -> None:
        definition = {'properties': [{'name': 'Name', 'is_retrievable': True}]}

        response = DescribeResponse.from_envelope(
            make_envelope(definition_body(definition), action='describe')
        )

        assert response.success is True
        assert response.extended == ()
        assert response.editable == ()

    def test_single_extended_property_and_single_property(
        self, make_envelope: EnvelopeFactory
    ) -> None:
        definition = {
            'properties': {'name': 'Name', 'is_retrievable': 'true', 'is_updatable': 'false'},
            'extended_properties': {
                'extended_property': {'name': 'Nickname', 'is_viewable': True, 'is_editable': True}
            },
        }

        response = DescribeResponse.from_envelope(
            make_envelope(definition_body(definition), action='describe')
        )

        assert response.properties == ('Name',)
        assert response.retrievable == ('Name',)
        assert response.updatable == ()
        assert response.extended == ('Nickname',)
        assert response.editable == ('Nickname',)

    def test_missing_definition_fails_without_raising(
        self, make_envelope: EnvelopeFactory
    ) -> None:
        raw = make_envelope(
            {'definition_response_msg': {'request_id': 'd-1'}},
            action='describe',
            request_message=DESCRIBE_SUBSCRIBER,
        )

        response = DescribeResponse.from_envelope(raw)

        assert response.success is False
        assert response.message == 'Unable to describe Subscriber'
        assert response.retrievable == ()
        assert response.editable == ()
        assert response.degraded_stages == ('results',)

    def test_property_without_name_fails(self, make_envelope: EnvelopeFactory) -> None:
        raw = make_envelope(
            definition_body({'properties': [{'is_retrievable': True}]}),
            action='describe',
            request_message=DESCRIBE_SUBSCRIBER,
        )

        response = DescribeResponse.from_envelope(raw)

        assert response.success is False
        assert response.message == 'Unable to describe Subscriber'
        assert response.properties == ()

    def test_fault_reports_unable_to_describe(self, make_envelope: EnvelopeFactory) -> None:
        raw = make_envelope(
            {'fault': {'faultcode': 'soap:Client', 'faultstring': 'Unknown type'}},
            action='describe',
            soap_fault=True,
            status_code=500,
            request_message=DESCRIBE_SUBSCRIBER,
        )

        response = DescribeResponse.from_envelope(raw)

        assert response.success is False
        assert response.message == 'Unable to describe Subscriber'

    def test_unparseable_reply(self, make_envelope: EnvelopeFactory) -> None:
        raw = make_envelope(
            None, action='describe', http_body='garbage', request_message=DESCRIBE_SUBSCRIBER
        )

        response = DescribeResponse.from_envelope(raw)

        assert response.success is False
        assert response.message == 'Unable to describe Subscriber'
        assert response.body == 'garbage'


class TestWalkObjectDefinition:
    """Tests for walk_object_definition."""

    def test_none_definition_raises(self) -> None:
        with pytest.raises(TypeError):
            walk_object_definition(None)

    def test_missing_properties_raises(self) -> None:
        with pytest.raises(KeyError):
            walk_object_definition({'object_type': 'Subscriber'})

    def test_rows_are_definitions_in_order(self) -> None:
        first = {'name': 'A', 'is_retrievable': True}
        second = {'name': 'B', 'is_required': True}
        extended = {'name': 'C', 'is_viewable': True}

        page = walk_object_definition(
            {
                'properties': [first, second],
                'extended_properties': {'extended_property': [extended]},
            }
        )

        assert page.rows == (first, second, extended)
        assert page.metadata.required == ('B',)
        assert page.metadata.viewable == ('C',)
