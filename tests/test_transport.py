"""Tests for SOAP message serialization and the HTTP transport."""

from datetime import UTC, datetime
from enum import Enum
from unittest.mock import Mock, patch

import pytest
import requests
from lxml import etree

from fuelsoap.models import COMPLEX_FILTER_PART, SIMPLE_FILTER_PART, XsiTyped
from fuelsoap.transport import PARTNER_API_NS, SoapTransport, build_request_element
from fuelsoap.utils import FuelSoapConfig
from fuelsoap.utils.xml_parser import XSI_NS

NS: dict[str, str] = {'p': PARTNER_API_NS}
XSI_TYPE: str = f'{{{XSI_NS}}}type'

RETRIEVE_REPLY: str = """<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <RetrieveResponseMsg xmlns="http://exacttarget.com/wsdl/partnerAPI">
      <OverallStatus>OK</OverallStatus>
      <RequestID>req-1</RequestID>
      <Results><EmailAddress>ada@example.com</EmailAddress></Results>
    </RetrieveResponseMsg>
  </soap:Body>
</soap:Envelope>"""

FAULT_REPLY: str = """<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <soap:Fault>
      <faultcode>soap:Client</faultcode>
      <faultstring>Token expired</faultstring>
    </soap:Fault>
  </soap:Body>
</soap:Envelope>"""


class SubscriberStatus(Enum):
    ACTIVE = 'Active'


def make_reply(text: str, status_code: int = 200) -> Mock:
    reply = Mock(spec=requests.Response)
    reply.text = text
    reply.status_code = status_code
    return reply


class TestBuildRequestElement:
    """Tests for build_request_element."""

    def test_describe_element(self) -> None:
        element = build_request_element(
            'describe',
            {'DescribeRequests': {'ObjectDefinitionRequest': {'ObjectType': 'Subscriber'}}},
        )

        assert etree.QName(element).localname == 'DefinitionRequestMsg'
        assert element.findtext('.//p:ObjectType', namespaces=NS) == 'Subscriber'

    def test_list_becomes_repeated_elements(self) -> None:
        element = build_request_element(
            'retrieve',
            {'RetrieveRequest': {'ObjectType': 'Subscriber', 'Properties': ['ID', 'Status']}},
        )

        assert etree.QName(element).localname == 'RetrieveRequestMsg'
        properties = element.findall('.//p:Properties', namespaces=NS)
        assert [item.text for item in properties] == ['ID', 'Status']

    def test_typed_objects_each_carry_xsi_type(self) -> None:
        element = build_request_element(
            'create',
            {
                'Objects': XsiTyped(
                    payload=[{'EmailAddress': 'a@example.com'}, {'EmailAddress': 'b@example.com'}],
                    xsi_type='tns:Subscriber',
                )
            },
        )

        objects = element.findall('p:Objects', namespaces=NS)
        assert len(objects) == 2  # noqa: PLR2004
        assert all(item.get(XSI_TYPE) == 'tns:Subscriber' for item in objects)

    def test_complex_filter_types(self) -> None:
        left = {'Property': 'Status', 'SimpleOperator': 'equals', 'Value': 'Active'}
        message = {
            'RetrieveRequest': {
                'ObjectType': 'Subscriber',
                'Filter': XsiTyped(
                    payload={
                        'LeftOperand': XsiTyped(payload=left, xsi_type=SIMPLE_FILTER_PART),
                        'LogicalOperator': 'AND',
                    },
                    xsi_type=COMPLEX_FILTER_PART,
                ),
            }
        }

        element = build_request_element('retrieve', message)

        filter_element = element.find('.//p:Filter', namespaces=NS)
        assert filter_element is not None
        assert filter_element.get(XSI_TYPE) == COMPLEX_FILTER_PART
        left_element = filter_element.find('p:LeftOperand', namespaces=NS)
        assert left_element is not None
        assert left_element.get(XSI_TYPE) == SIMPLE_FILTER_PART
        assert left_element.findtext('p:Value', namespaces=NS) == 'Active'

    @pytest.mark.parametrize(
        ('value', 'expected'),
        [
            (True, 'true'),
            (False, 'false'),
            (None, None),
            (42, '42'),
            (SubscriberStatus.ACTIVE, 'Active'),
            (datetime(2025, 11, 14, 15, 30, tzinfo=UTC), '2025-11-14T15:30:00.000+00:00'),
        ],
    )
    def test_scalar_formatting(self, value: object, expected: str | None) -> None:
        element = build_request_element('perform', {'Action': value})

        action = element.find('p:Action', namespaces=NS)
        assert action is not None
        assert action.text == expected


class TestSoapTransport:
    """Tests for SoapTransport.call."""

    @pytest.fixture
    def transport(self, sample_config: FuelSoapConfig) -> SoapTransport:
        return SoapTransport(sample_config, lambda: 'tok-123')

    @patch('fuelsoap.transport.requests.post')
    def test_call_posts_envelope(
        self, mock_post: Mock, transport: SoapTransport, sample_config: FuelSoapConfig
    ) -> None:
        mock_post.return_value = make_reply(RETRIEVE_REPLY)
        message = {'RetrieveRequest': {'ObjectType': 'Subscriber', 'Properties': ['EmailAddress']}}

        raw = transport.call('retrieve', message)

        args, kwargs = mock_post.call_args
        assert args[0] == 'https://soap.test.example.com/Service.asmx'
        assert kwargs['headers']['SOAPAction'] == 'Retrieve'
        assert kwargs['timeout'] == sample_config.client.request_timeout
        assert kwargs['verify'] is True

        sent = etree.fromstring(kwargs['data'])
        assert sent.findtext('.//{http://exacttarget.com}oAuthToken') == 'tok-123'
        assert sent.find('.//p:RetrieveRequestMsg', namespaces=NS) is not None

        assert raw.status_code == 200  # noqa: PLR2004
        assert raw.soap_fault is False
        assert raw.request_message == message
        assert raw.body == {
            'retrieve_response_msg': {
                'overall_status': 'OK',
                'request_id': 'req-1',
                'results': {'email_address': 'ada@example.com'},
            }
        }

    @patch('fuelsoap.transport.requests.post')
    def test_token_is_escaped(self, mock_post: Mock, sample_config: FuelSoapConfig) -> None:
        mock_post.return_value = make_reply(RETRIEVE_REPLY)
        transport = SoapTransport(sample_config, lambda: 'a<b&c')

        transport.call('describe', {'DescribeRequests': {}})

        sent = etree.fromstring(mock_post.call_args.kwargs['data'])
        assert sent.findtext('.//{http://exacttarget.com}oAuthToken') == 'a<b&c'

    @patch('fuelsoap.transport.requests.post')
    def test_fault_reply_is_returned(self, mock_post: Mock, transport: SoapTransport) -> None:
        mock_post.return_value = make_reply(FAULT_REPLY, status_code=500)

        raw = transport.call('retrieve', {'RetrieveRequest': {'ObjectType': 'Subscriber'}})

        assert raw.status_code == 500  # noqa: PLR2004
        assert raw.soap_fault is True
        assert raw.body == {'fault': {'faultcode': 'soap:Client', 'faultstring': 'Token expired'}}

    @patch('fuelsoap.transport.requests.post')
    def test_unparseable_reply(self, mock_post: Mock, transport: SoapTransport) -> None:
        mock_post.return_value = make_reply('<html>Bad Gateway', status_code=502)

        raw = transport.call('retrieve', {'RetrieveRequest': {'ObjectType': 'Subscriber'}})

        assert raw.body is None
        assert raw.http_body == '<html>Bad Gateway'
        assert raw.soap_fault is False

    @patch('fuelsoap.transport.requests.post')
    def test_network_error_propagates(self, mock_post: Mock, transport: SoapTransport) -> None:
        mock_post.side_effect = requests.exceptions.ConnectionError('refused')

        with pytest.raises(requests.exceptions.ConnectionError):
            transport.call('retrieve', {'RetrieveRequest': {'ObjectType': 'Subscriber'}})
