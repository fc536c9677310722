# fuelsoap/utils/xml_parser.py
"""
XML parsing utilities for partner API SOAP responses.

Provides helper functions for parsing SOAP XML responses with proper
namespace handling, and for converting the Body into the nested mapping
shape the response unpacker walks.
"""

import re
from typing import Any

from lxml import etree

SOAP_ENV_NS: str = 'http://schemas.xmlsoap.org/soap/envelope/'
XSI_NS: str = 'http://www.w3.org/2001/XMLSchema-instance'

_ACRONYM_BOUNDARY: re.Pattern[str] = re.compile(r'([A-Z]+)([A-Z][a-z])')
_WORD_BOUNDARY: re.Pattern[str] = re.compile(r'([a-z\d])([A-Z])')


def parse_soap_response(xml_string: str) -> etree._Element:
    """
    Parse a SOAP XML response string into an lxml Element.

    Args:
        xml_string: The raw XML response from the SOAP API.

    Returns:
        The root element of the parsed XML tree.

    Raises:
        etree.XMLSyntaxError: If the XML is malformed.
    """
    return etree.fromstring(xml_string.encode('utf-8'))


def extract_soap_body(root: etree._Element) -> etree._Element:
    """
    Extract the Body element from a SOAP envelope.

    Raises:
        ValueError: If no Body element is found.
    """
    body: etree._Element | None = root.find(
        './/soap:Body', namespaces={'soap': SOAP_ENV_NS}
    )

    if body is None:
        raise ValueError('No SOAP Body element found in response')

    return body


def has_soap_fault(root: etree._Element) -> bool:
    """Return True if the SOAP envelope carries a Fault element."""
    return root.find('.//soap:Fault', namespaces={'soap': SOAP_ENV_NS}) is not None


def to_snake_case(name: str) -> str:
    """
    Convert an XML element name to snake_case.

    Example:
        >>> to_snake_case('OverallStatus')
        'overall_status'
        >>> to_snake_case('RequestID')
        'request_id'
    """
    name = _ACRONYM_BOUNDARY.sub(r'\1_\2', name)
    name = _WORD_BOUNDARY.sub(r'\1_\2', name)
    return name.replace('-', '_').lower()


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _is_nil(element: etree._Element) -> bool:
    return element.get(f'{{{XSI_NS}}}nil') in {'1', 'true'}


def _typecast(text: str | None) -> Any:
    if text is None:
        return None
    stripped: str = text.strip()
    if stripped == 'true':
        return True
    if stripped == 'false':
        return False
    return stripped


def element_to_dict(element: etree._Element) -> Any:
    """
    Convert an XML element into nested Python values.

    Rules:
    - leaf elements become their text ('true'/'false' become booleans)
    - xsi:nil elements become None
    - child elements become a dict keyed by snake_case local name
    - repeated sibling names are collected into a list, in document order

    Comments and processing instructions are ignored.
    """
    if _is_nil(element):
        return None

    children: list[etree._Element] = [
        child for child in element if isinstance(child.tag, str)
    ]
    if not children:
        return _typecast(element.text)

    data: dict[str, Any] = {}
    for child in children:
        key: str = to_snake_case(_local_name(child))
        value: Any = element_to_dict(child)

        if key not in data:
            data[key] = value
        elif isinstance(data[key], list):
            # element_to_dict never returns a list, so a list means repetition
            data[key].append(value)
        else:
            data[key] = [data[key], value]

    return data


def soap_body_to_dict(root: etree._Element) -> dict[str, Any]:
    """
    Convert the SOAP Body of an envelope into a mapping of its top-level
    elements, e.g. {'retrieve_response_msg': {...}} or {'fault': {...}}.

    Raises:
        ValueError: If no Body element is found.
    """
    body: etree._Element = extract_soap_body(root)
    converted: Any = element_to_dict(body)
    return converted if isinstance(converted, dict) else {}
