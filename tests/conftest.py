"""Pytest configuration and shared fixtures for FuelSoap tests."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest
import yaml

from fuelsoap.models import RawEnvelope
from fuelsoap.soap_client import SoapClient
from fuelsoap.utils import FuelSoapConfig

EnvelopeFactory = Callable[..., RawEnvelope]


@pytest.fixture
def sample_config() -> FuelSoapConfig:
    """Create a sample FuelSoapConfig for testing."""
    config_dict: dict[str, Any] = {
        'auth': {
            'client_id': 'test_client',
            'client_secret': 'test_secret',
            'auth_url': 'https://auth.test.example.com/v1/requestToken',
        },
        'soap': {
            'endpoint_url': 'https://soap.test.example.com/Service.asmx',
        },
        'client': {
            'request_timeout': [10, 30],
            'verify_ssl': True,
        },
        'logging': {
            'console_level': 'INFO',
            'file_level': 'DEBUG',
            'file_path': 'test_fuelsoap.log',
        },
    }
    return FuelSoapConfig.model_validate(config_dict)


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config: FuelSoapConfig) -> Path:
    """Create a temporary config file for testing."""
    config_path: Path = tmp_path / 'config.yaml'

    config_dict: dict[str, Any] = sample_config.model_dump(mode='json')
    # SecretStr dumps masked; write the real value back
    config_dict['auth']['client_secret'] = 'test_secret'

    config_path.write_text(yaml.safe_dump(config_dict, sort_keys=False))

    return config_path


@pytest.fixture
def make_envelope() -> EnvelopeFactory:
    """Build RawEnvelope objects the way the transport would."""

    def _make(
        body: dict[str, Any] | None,
        action: str = 'retrieve',
        soap_fault: bool = False,
        http_body: str = '<raw/>',
        status_code: int = 200,
        request_message: dict[str, Any] | None = None,
    ) -> RawEnvelope:
        return RawEnvelope(
            action=action,  # pyright: ignore[reportArgumentType]
            status_code=status_code,
            body=body,
            http_body=http_body,
            soap_fault=soap_fault,
            request_message=request_message or {},
        )

    return _make


@pytest.fixture
def subscriber_definition() -> dict[str, Any]:
    """Describe body for a Subscriber with two custom attributes."""
    return {
        'definition_response_msg': {
            'object_definition': {
                'object_type': 'Subscriber',
                'properties': [
                    {'name': 'ID', 'is_retrievable': True, 'is_updatable': False, 'is_required': False},
                    {'name': 'EmailAddress', 'is_retrievable': True, 'is_updatable': True, 'is_required': True},
                    {'name': 'Status', 'is_retrievable': True, 'is_updatable': True, 'is_required': False},
                    {'name': 'DataRetentionPeriod', 'is_retrievable': True, 'is_updatable': False, 'is_required': False},
                    {'name': 'Attributes', 'is_retrievable': False, 'is_updatable': True, 'is_required': False},
                ],
                'extended_properties': {
                    'extended_property': [
                        {'name': 'First Name', 'is_viewable': True, 'is_editable': True},
                        {'name': 'Member Since', 'is_viewable': True, 'is_editable': False},
                    ]
                },
            },
            'request_id': 'describe-1',
        }
    }


@pytest.fixture
def mock_transport() -> Mock:
    """A transport double; tests set call.return_value / side_effect."""
    return Mock(spec=['call'])


@pytest.fixture
def client(sample_config: FuelSoapConfig, mock_transport: Mock) -> Iterator[SoapClient]:
    """A SoapClient wired to mock_transport with token requests patched out."""
    with patch('fuelsoap.soap_client.request_token', return_value='test-token'):
        yield SoapClient(config=sample_config, transport=mock_transport)
