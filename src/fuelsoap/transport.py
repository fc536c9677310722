# fuelsoap/transport.py
"""
SOAP transport for the partner API.

This module turns a message mapping into a SOAP envelope, posts it, and turns
the reply into a RawEnvelope. It uses:
- lxml to serialize the message (honoring XsiTyped hints) and parse replies
- Jinja2 to render the envelope and its oAuth header
- requests for HTTP

The transport never interprets replies beyond parsing: SOAP faults (usually
sent with HTTP 500) are returned as envelopes with soap_fault=True. Only
failures to complete the HTTP exchange are raised.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import requests
from jinja2 import Environment, FileSystemLoader, Template
from lxml import etree

from fuelsoap.models import RawEnvelope, SoapAction, XsiTyped
from fuelsoap.utils import (
    FuelSoapConfig,
    format_for_soap,
    has_soap_fault,
    parse_soap_response,
    soap_body_to_dict,
)
from fuelsoap.utils.xml_parser import XSI_NS

logger: logging.Logger = logging.getLogger(__name__)

PARTNER_API_NS: str = 'http://exacttarget.com/wsdl/partnerAPI'

# action -> (SOAPAction header, request element name)
OPERATIONS: dict[SoapAction, tuple[str, str]] = {
    'retrieve': ('Retrieve', 'RetrieveRequestMsg'),
    'create': ('Create', 'CreateRequest'),
    'update': ('Update', 'UpdateRequest'),
    'delete': ('Delete', 'DeleteRequest'),
    'perform': ('Perform', 'PerformRequestMsg'),
    'describe': ('Describe', 'DefinitionRequestMsg'),
}

# Exceptions meaning "the call did not complete"; the client retries these once
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    requests.exceptions.RequestException,
    OSError,
)


class Transport(Protocol):
    """Anything that can carry one SOAP action and hand back the raw envelope."""

    def call(self, action: SoapAction, message: dict[str, Any]) -> RawEnvelope: ...


# =============================================================================
# Message Serialization
# =============================================================================


def _format_scalar(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, date):
        return format_for_soap(value)
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _append_children(parent: etree._Element, mapping: Mapping[str, Any]) -> None:
    for name, value in mapping.items():
        _append_named(parent, str(name), value, xsi_type=None)


def _append_named(
    parent: etree._Element, name: str, value: Any, xsi_type: str | None
) -> None:
    if isinstance(value, XsiTyped):
        _append_named(parent, name, value.payload, value.xsi_type)
        return

    # Lists become repeated elements sharing the same name (and type)
    if isinstance(value, list | tuple):
        for item in value:
            _append_named(parent, name, item, xsi_type)
        return

    child: etree._Element = etree.SubElement(parent, f'{{{PARTNER_API_NS}}}{name}')
    if xsi_type is not None:
        child.set(f'{{{XSI_NS}}}type', xsi_type)

    if isinstance(value, Mapping):
        _append_children(child, value)
    else:
        child.text = _format_scalar(value)


def build_request_element(action: SoapAction, message: Mapping[str, Any]) -> etree._Element:
    """
    Serialize a message mapping into the request element of an action.

    Example:
        >>> element = build_request_element('describe', {
        ...     'DescribeRequests': {'ObjectDefinitionRequest': {'ObjectType': 'Subscriber'}}
        ... })
        >>> etree.QName(element).localname
        'DefinitionRequestMsg'
    """
    _, element_name = OPERATIONS[action]
    root: etree._Element = etree.Element(
        f'{{{PARTNER_API_NS}}}{element_name}',
        nsmap={None: PARTNER_API_NS, 'tns': PARTNER_API_NS, 'xsi': XSI_NS},
    )
    _append_children(root, message)
    return root


# =============================================================================
# Transport
# =============================================================================


class SoapTransport:
    """
    HTTP transport for the partner API SOAP endpoint.

    Attributes:
        config: Loaded configuration (endpoint, timeouts, SSL verification).
        token_provider: Returns the current token for the oAuth header. Called
                        on every request so a refreshed token is picked up.
        base_soap_headers: HTTP headers shared by all requests; SOAPAction is
                           added per action.
        jinja_env: Environment holding the envelope template.
    """

    def __init__(self, config: FuelSoapConfig, token_provider: Callable[[], str]) -> None:
        self.config: FuelSoapConfig = config
        self.token_provider: Callable[[], str] = token_provider

        self.base_soap_headers: dict[str, str] = {
            'Content-Type': 'text/xml; charset=utf-8',
            'Accept': 'text/xml',
        }

        templates_dir: Path = Path(__file__).parent / 'templates'
        if not templates_dir.exists():
            error_message: str = f'Templates directory not found at: {templates_dir}'
            logger.error(error_message)
            raise FileNotFoundError(error_message)

        self.jinja_env: Environment = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        logger.debug('SOAP transport initialized for %s', config.soap.endpoint_url)

    def _build_headers(self, action: SoapAction) -> dict[str, str]:
        soap_action, _ = OPERATIONS[action]
        return {**self.base_soap_headers, 'SOAPAction': soap_action}

    def _render_envelope(self, action: SoapAction, message: Mapping[str, Any]) -> str:
        """
        Render the full SOAP envelope for an action.

        The request element is serialized by lxml and inserted verbatim; the
        token is escaped by the template.
        """
        template: Template = self.jinja_env.get_template('envelope.xml')
        body_xml: str = etree.tostring(
            build_request_element(action, message), encoding='unicode'
        )
        return template.render(oauth_token=self.token_provider(), body=body_xml)

    def _send_request(
        self, action: SoapAction, headers: dict[str, str], body: str
    ) -> requests.Response:
        """
        Post the envelope.

        HTTP error statuses are not raised here: the partner API reports SOAP
        faults with HTTP 500 and the fault body must reach the unpacker.

        Raises:
            requests.exceptions.Timeout: If the request times out.
            requests.exceptions.RequestException: For other network-level errors.
        """
        try:
            logger.debug(
                'Sending %r to %s (connect/read timeout=%r)',
                action,
                self.config.soap.endpoint_url,
                self.config.client.request_timeout,
            )
            response: requests.Response = requests.post(
                str(self.config.soap.endpoint_url),
                data=body.encode('utf-8'),
                headers=headers,
                timeout=self.config.client.request_timeout,
                verify=self.config.client.verify_ssl,
            )
            logger.debug('Received reply for %r: HTTP %r', action, response.status_code)
            return response

        except requests.exceptions.Timeout as timeout_error:
            logger.error(
                'Request timeout for %r after %r: %r',
                action,
                self.config.client.request_timeout,
                timeout_error,
            )
            raise

        except requests.exceptions.RequestException as request_error:
            logger.error('Network error for %r: %r', action, request_error)
            raise

    def _parse_reply(
        self, action: SoapAction, message: dict[str, Any], reply: requests.Response
    ) -> RawEnvelope:
        body: dict[str, Any] | None = None
        soap_fault: bool = False
        try:
            root: etree._Element = parse_soap_response(reply.text)
            body = soap_body_to_dict(root)
            soap_fault = has_soap_fault(root)
        except (etree.XMLSyntaxError, ValueError) as parse_error:
            logger.warning('Reply to %r is not a SOAP envelope: %r', action, parse_error)
            logger.debug('***RESPONSE BODY***')
            logger.debug(reply.text)

        if soap_fault:
            logger.warning('SOAP fault returned for %r (HTTP %r)', action, reply.status_code)

        return RawEnvelope(
            action=action,
            status_code=reply.status_code,
            body=body,
            http_body=reply.text,
            soap_fault=soap_fault,
            request_message=message,
        )

    def call(self, action: SoapAction, message: dict[str, Any]) -> RawEnvelope:
        """
        Execute one SOAP action.

        Args:
            action: One of retrieve, create, update, delete, perform, describe.
            message: The message mapping built by a request model.

        Returns:
            The parsed reply, including fault replies.

        Raises:
            requests.exceptions.RequestException: If the HTTP exchange fails.
        """
        logger.info('Executing SOAP action: %r', action)
        headers: dict[str, str] = self._build_headers(action)
        body: str = self._render_envelope(action, message)
        reply: requests.Response = self._send_request(action, headers, body)
        return self._parse_reply(action, message, reply)
