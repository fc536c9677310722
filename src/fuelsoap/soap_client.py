# fuelsoap/soap_client.py
"""
Partner API SOAP Client

This module provides the high-level client for CRUD-style operations against
the marketing-automation SOAP API. It normalizes caller input into request
models, dispatches them through a transport with a one-retry policy, and
unpacks the replies into SoapResponse / DescribeResponse objects.
"""

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

from fuelsoap.errors import SoapOperationError, SoapTransportError
from fuelsoap.models import (
    ContinueRetrieveRequest,
    CreateRequest,
    DeleteRequest,
    DescribeRequest,
    ObjectsRequest,
    PerformRequest,
    RawEnvelope,
    RetrieveRequest,
    SoapOperationRequest,
    UpdateRequest,
)
from fuelsoap.normalizers import normalize_filter, normalize_properties
from fuelsoap.response_models import DescribeResponse, SoapResponse
from fuelsoap.transport import TRANSPORT_ERRORS, SoapTransport, Transport
from fuelsoap.utils import (
    FuelSoapConfig,
    format_name_value_pairs,
    load_config,
    request_token,
)

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)

# One call plus exactly one retry
MAX_ATTEMPTS: int = 2

ATTRIBUTES_KEY: str = 'Attributes'

R = TypeVar('R', bound=SoapResponse)


class SoapClient:
    """
    Client for the partner API SOAP operations.

    The client owns two pieces of shared mutable state, the SOAP header token
    and the lazily built transport. Both are guarded by a lock so one client
    can be shared between threads.

    Attributes:
        config: The loaded configuration.
        internal_token: Token placed in the SOAP oAuth header; populated by
                        refresh() before the first call.

    Usage:
        >>> client = SoapClient()
        >>> response = client.get('Subscriber', ['EmailAddress', 'Status'])
        >>> if response.success:
        ...     for row in response.results:
        ...         print(row['email_address'])
        >>>
        >>> client.post('Subscriber', {'EmailAddress': 'ada@example.com', 'First Name': 'Ada'})
    """

    def __init__(
        self,
        config_path: Path | None = None,
        config: FuelSoapConfig | None = None,
        transport: Transport | None = None,
    ) -> None:
        """
        Initialize the client.

        No network call is made here: the token is requested lazily before the
        first SOAP call.

        Args:
            config_path: Optional path to the configuration file.
            config: Optional pre-loaded configuration. If provided, config_path
                    is ignored.
            transport: Optional transport to use instead of SoapTransport.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValidationError: If the config file is invalid.
        """
        if config is not None:
            self.config: FuelSoapConfig = config
            logger.debug('Initializing SoapClient with injected configuration')
        elif config_path is not None:
            logger.info('Loading configuration from: %r', config_path)
            self.config = load_config(config_path)
        else:
            logger.info('Loading configuration from default location')
            self.config = load_config()

        self.internal_token: str = ''
        self._transport: Transport | None = transport
        self._lock: threading.RLock = threading.RLock()

    # ========================================================================
    # Authentication and Transport
    # ========================================================================

    def refresh(self) -> None:
        """
        Request a new SOAP header token.

        Raises:
            requests.exceptions.RequestException: If the token request fails.
            RuntimeError: If the token endpoint returns no token.
        """
        with self._lock:
            logger.info('Refreshing SOAP token')
            try:
                self.internal_token = request_token(self.config)
            except Exception as auth_error:
                logger.error('Failed to obtain SOAP token: %r', auth_error)
                raise

    def _current_token(self) -> str:
        with self._lock:
            return self.internal_token

    @property
    def transport(self) -> Transport:
        """The transport, refreshing the token first if none is present."""
        with self._lock:
            if not self.internal_token:
                self.refresh()
            if self._transport is None:
                self._transport = SoapTransport(self.config, self._current_token)
            return self._transport

    # ========================================================================
    # Dispatch
    # ========================================================================

    def _call_transport(self, request: SoapOperationRequest) -> RawEnvelope:
        """
        Send a request, retrying exactly once on transport failure.

        Raises:
            SoapTransportError: If both attempts fail, or at once (no retry)
                if the transport raises anything other than a transport error.
            requests.exceptions.RequestException: If the token refresh that
                precedes the first call fails (not retried).
        """
        message: dict[str, Any] = request.to_soap_message()
        transport: Transport = self.transport
        last_error: Exception | None = None

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return transport.call(request.action, message)
            except TRANSPORT_ERRORS as transport_error:
                last_error = transport_error
                logger.warning(
                    'Transport failure for %r (attempt %d of %d): %r',
                    request.action,
                    attempt,
                    MAX_ATTEMPTS,
                    transport_error,
                )
            except Exception as unexpected_error:
                logger.error(
                    'Unexpected failure in %r transport call: %r', request.action, unexpected_error
                )
                raise SoapTransportError(
                    f'{request.action} failed: {unexpected_error!r}'
                ) from unexpected_error

        logger.error('Giving up on %r after %d attempts', request.action, MAX_ATTEMPTS)
        raise SoapTransportError(
            f'{request.action} failed after {MAX_ATTEMPTS} attempts: {last_error!r}'
        ) from last_error

    def _dispatch(
        self,
        request: SoapOperationRequest,
        response_class: type[R],
    ) -> R:
        """
        Send a request and unpack the reply.

        If unpacking fails unexpectedly, a best-effort failed response is built
        from the envelope instead.
        """
        raw: RawEnvelope | None = self._call_transport(request)
        if raw is None:
            raise SoapTransportError(f'{request.action} returned no envelope')

        try:
            response: R = response_class.from_envelope(raw, self)
        except Exception as unpack_error:
            logger.exception('Failed to unpack %r response', request.action)
            return response_class.degraded_from(raw, repr(unpack_error), self)

        logger.info(
            'SOAP action %r finished (HTTP %r, success=%s)',
            request.action,
            response.code,
            response.success,
        )
        return response

    def continue_retrieve(self, request_id: str) -> SoapResponse:
        """Fetch the next page of a retrieve. Used by SoapResponse.continue_request()."""
        return self._dispatch(ContinueRetrieveRequest(request_id=request_id), SoapResponse)

    # ========================================================================
    # Object Metadata
    # ========================================================================

    def describe(self, object_type: str) -> DescribeResponse:
        """
        Describe an object type.

        Never raises for a malformed definition: the returned response then has
        success=False and a message naming the object type.
        """
        return self._dispatch(DescribeRequest(object_type=object_type), DescribeResponse)

    def get_all_object_properties(self, object_type: str) -> DescribeResponse:
        """
        Describe an object type, requiring success.

        Raises:
            SoapOperationError: Carrying the failed describe response.
        """
        response: DescribeResponse = self.describe(object_type)
        if not response.success:
            raise SoapOperationError(f'Unable to get {object_type}', response)
        return response

    def get_retrievable_properties(self, object_type: str) -> list[str]:
        return list(self.get_all_object_properties(object_type).retrievable)

    def get_editable_properties(self, object_type: str) -> list[str]:
        """Names of the custom attributes that can be written on object_type."""
        return list(self.get_all_object_properties(object_type).editable)

    # ========================================================================
    # Operations
    # ========================================================================

    def get(
        self,
        object_type: str,
        properties: Any = None,
        search_filter: Any = None,
    ) -> SoapResponse:
        """
        Retrieve objects of a type.

        Args:
            object_type: Remote object type, e.g. 'Subscriber'.
            properties: None (all retrievable properties), a name, a list of
                        names, or a mapping whose keys are names.
            search_filter: None, a simple filter
                           {'Property': ..., 'SimpleOperator': ..., 'Value': ...},
                           or a complex filter with 'LogicalOperator',
                           'LeftOperand' and 'RightOperand'.

        Returns:
            The retrieve response. A failure while resolving properties (a
            failed describe) is returned as that failed response, not raised.

        Raises:
            SoapTransportError: If the transport fails twice.
        """
        try:
            request = RetrieveRequest(
                object_type=object_type,
                properties=normalize_properties(
                    properties, lambda: self.get_retrievable_properties(object_type)
                ),
                filter_part=normalize_filter(search_filter),
            )
            return self._dispatch(request, SoapResponse)
        except SoapOperationError as operation_error:
            logger.warning('Retrieve of %r failed: %s', object_type, operation_error)
            return operation_error.response

    def post(self, object_type: str, properties: Any) -> SoapResponse:
        """Create one object (mapping) or several (list of mappings)."""
        return self._cud(CreateRequest, object_type, properties)

    def patch(self, object_type: str, properties: Any) -> SoapResponse:
        """Update one object (mapping) or several (list of mappings)."""
        return self._cud(UpdateRequest, object_type, properties)

    def delete(self, object_type: str, properties: Any) -> SoapResponse:
        """Delete one object (mapping) or several (list of mappings)."""
        return self._cud(DeleteRequest, object_type, properties)

    def perform(self, object_type: str, properties: Any, action: str) -> SoapResponse:
        """
        Invoke a named action against definitions of a type.

        Example:
            >>> client.perform('EmailSendDefinition', {'CustomerKey': 'welcome'}, 'start')
        """
        return self._dispatch(
            PerformRequest(
                object_type=object_type, perform_action=action, definition=properties
            ),
            SoapResponse,
        )

    def _cud(
        self,
        request_class: type[ObjectsRequest],
        object_type: str,
        properties: Any,
    ) -> SoapResponse:
        """
        Shared create/update/delete builder.

        Keys naming an editable custom attribute of object_type are moved out
        of each object into its 'Attributes' list as Name/Value pairs. The
        caller's mappings are copied, never modified.

        Raises:
            SoapOperationError: If the object type cannot be described.
            SoapTransportError: If the transport fails twice.
        """
        attribute_names: set[str] = set(self.get_editable_properties(object_type))

        items: list[Mapping[str, Any]] = (
            [properties] if isinstance(properties, Mapping) else list(properties)
        )

        objects: list[dict[str, Any]] = []
        for item in items:
            standard: dict[str, Any] = {}
            custom: dict[str, Any] = {}
            for key, value in item.items():
                if key in attribute_names:
                    custom[key] = value
                else:
                    standard[key] = value

            if custom:
                existing: Any = standard.get(ATTRIBUTES_KEY) or []
                if not isinstance(existing, list):
                    existing = [existing]
                standard[ATTRIBUTES_KEY] = existing + format_name_value_pairs(custom)
            objects.append(standard)

        logger.debug(
            'Built %d %r object(s) for %s', len(objects), object_type, request_class.action
        )
        return self._dispatch(
            request_class(object_type=object_type, objects=objects), SoapResponse
        )

    def __repr__(self) -> str:
        return (
            f'SoapClient('
            f'endpoint={self.config.soap.endpoint_url}, '
            f'authenticated={bool(self.internal_token)}'
            f')'
        )
