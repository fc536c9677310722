# fuelsoap/utils/attributes.py
"""Helpers for custom attribute (extended property) payloads."""

from collections.abc import Mapping
from typing import Any


def format_name_value_pairs(attributes: Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    Convert a mapping of attribute values into the Name/Value pair list the
    partner API expects under an object's 'Attributes' element.

    Example:
        >>> format_name_value_pairs({'First Name': 'Ada'})
        [{'Name': 'First Name', 'Value': 'Ada'}]
    """
    return [{'Name': name, 'Value': value} for name, value in attributes.items()]
