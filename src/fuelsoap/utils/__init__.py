# fuelsoap/utils/__init__.py

from .attributes import format_name_value_pairs
from .auth import request_token
from .config_loader import FuelSoapConfig, load_config
from .datetime_utils import format_for_soap
from .logger import setup_logger
from .xml_parser import (
    element_to_dict,
    extract_soap_body,
    has_soap_fault,
    parse_soap_response,
    soap_body_to_dict,
    to_snake_case,
)

__all__: list[str] = [
    # config_loader.py
    'FuelSoapConfig',
    # xml_parser.py
    'element_to_dict',
    'extract_soap_body',
    # datetime_utils.py
    'format_for_soap',
    # attributes.py
    'format_name_value_pairs',
    'has_soap_fault',
    'load_config',
    'parse_soap_response',
    # auth.py
    'request_token',
    # logger.py
    'setup_logger',
    'soap_body_to_dict',
    'to_snake_case',
]
