# fuelsoap/response_models/soap_response.py
"""
Unpacking of raw SOAP envelopes into SoapResponse objects.

The unpack pipeline is strictly sequential:

1. HTTP status code
2. Message (fault string or overall status) and request id
3. Success flag (message == 'OK')
4. Result rows (absent -> [], single row -> [row])
5. More-data flag (overall status == 'MoreDataAvailable')

Stages 2 and 4 read the envelope body and may find it malformed. They then
return a Degraded outcome with a fallback value instead of raising, so a badly
shaped reply still yields a response. Subclasses customize stage 4 and the
success/message decision only (see DescribeResponse).
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol, Self

from pydantic import BaseModel, ConfigDict, PrivateAttr

from fuelsoap.models import RawEnvelope

from .outcome import Degraded, Ok

logger: logging.Logger = logging.getLogger(__name__)

STATUS_OK: str = 'OK'
STATUS_MORE_DATA: str = 'MoreDataAvailable'

# Lookup failures that mean "the envelope does not have the expected shape"
STRUCTURAL_ERRORS: tuple[type[Exception], ...] = (
    KeyError,
    IndexError,
    TypeError,
    AttributeError,
)


class ContinuationSource(Protocol):
    """Anything able to fetch the next page of a retrieve by request id."""

    def continue_retrieve(self, request_id: str) -> 'SoapResponse': ...


# =============================================================================
# Envelope Access Helpers
# =============================================================================


def first_body_element(body: Any) -> Any:
    """
    Return the first top-level element of an envelope body mapping.

    Raises:
        TypeError: If the body is not a mapping (e.g. unparseable reply).
        KeyError: If the body is empty.
    """
    if not isinstance(body, Mapping):
        raise TypeError(f'Expected a mapping SOAP body, got {type(body).__name__}')
    if not body:
        raise KeyError('SOAP body has no elements')
    return next(iter(body.values()))


def get_field(element: Any, key: str) -> Any:
    """Return element[key], or None if absent. Raises TypeError for non-mappings."""
    if not isinstance(element, Mapping):
        raise TypeError(f'Cannot read {key!r} from {type(element).__name__}')
    return element.get(key)


def as_list(value: Any) -> list[Any]:
    """Wrap a single element in a list; a list is returned as a copy."""
    if isinstance(value, list):
        return list(value)
    return [value]


# =============================================================================
# Stage Values
# =============================================================================


class BodyParts(BaseModel):
    """What stage 2 reads from the envelope."""

    model_config = ConfigDict(frozen=True)

    body: Any = None
    message: str | None = None
    request_id: str | None = None


class ResultsPage(BaseModel):
    """What stage 4 reads from the envelope."""

    model_config = ConfigDict(frozen=True)

    rows: tuple[Any, ...] = ()
    more: bool = False


def _unpack_body(raw: RawEnvelope) -> Ok[BodyParts] | Degraded[BodyParts]:
    try:
        first: Any = first_body_element(raw.body)
        request_id: Any = get_field(first, 'request_id')

        if raw.soap_fault:
            message: Any = get_field(get_field(raw.body, 'fault'), 'faultstring')
        else:
            message = get_field(first, 'overall_status')

        return Ok(
            value=BodyParts(
                body=raw.body,
                message=None if message is None else str(message),
                request_id=None if request_id is None else str(request_id),
            )
        )
    except STRUCTURAL_ERRORS as error:
        # Fall back to the raw transport text
        return Degraded(
            value=BodyParts(
                body=raw.body if raw.body is not None else raw.http_body,
                message=raw.http_body,
            ),
            reason=f'unreadable envelope body: {error!r}',
        )


# =============================================================================
# Response
# =============================================================================


class SoapResponse(BaseModel):
    """
    The normalized outcome of one SOAP call.

    Instances are created by from_envelope() and never change afterwards;
    continue_request() returns a new response for the next page.

    Attributes:
        code: HTTP status code of the reply.
        success: True iff the overall status is 'OK'.
        message: Fault string, overall status, or raw reply text when the
                 envelope could not be read.
        results: Result rows of this page (field-name -> value mappings).
        more: True when the service reported MoreDataAvailable.
        request_id: Identifier used to fetch the next page.
        body: The envelope body mapping (or raw text when unparseable).
        degraded_stages: Names of unpack stages that fell back to defaults.

    Example:
        >>> response = client.get('Subscriber', ['EmailAddress'])
        >>> rows = list(response.results)
        >>> while response.more:
        ...     response = response.continue_request()
        ...     rows.extend(response.results)
    """

    model_config = ConfigDict(frozen=True)

    code: int | None = None
    success: bool = False
    message: str | None = None
    results: tuple[Any, ...] = ()
    more: bool = False
    request_id: str | None = None
    body: Any = None
    degraded_stages: tuple[str, ...] = ()

    _client: ContinuationSource | None = PrivateAttr(default=None)

    @classmethod
    def from_envelope(
        cls, raw: RawEnvelope, client: ContinuationSource | None = None
    ) -> Self:
        """
        Unpack a raw envelope into a response.

        Args:
            raw: The envelope returned by the transport.
            client: Used by continue_request() to fetch further pages.

        Returns:
            A response whose success flag reflects the envelope; malformed
            envelopes produce a failed or empty response, never an exception.
        """
        body_stage: Ok[BodyParts] | Degraded[BodyParts] = _unpack_body(raw)
        results_stage: Ok[Any] | Degraded[Any] = cls._unpack_results(raw)

        degraded: list[str] = []
        for stage_name, stage in (('body', body_stage), ('results', results_stage)):
            if isinstance(stage, Degraded):
                logger.warning(
                    'Degraded %s stage for %r response: %s', stage_name, raw.action, stage.reason
                )
                degraded.append(stage_name)

        parts: BodyParts = body_stage.value
        page: ResultsPage = results_stage.value

        response: Self = cls(
            code=raw.status_code,
            body=parts.body,
            request_id=parts.request_id,
            results=page.rows,
            more=page.more,
            degraded_stages=tuple(degraded),
            **cls._status_fields(parts.message, results_stage),
        )
        response._client = client
        return response

    @classmethod
    def degraded_from(
        cls, raw: RawEnvelope, reason: str, client: ContinuationSource | None = None
    ) -> Self:
        """
        Best-effort failed response for an envelope that could not be unpacked.

        Used by the client when its own post-processing fails after the
        transport already returned.
        """
        logger.warning('Building best-effort %r response: %s', raw.action, reason)
        response: Self = cls(
            code=raw.status_code,
            success=False,
            message=raw.http_body or reason,
            body=raw.body if raw.body is not None else raw.http_body,
            degraded_stages=('body', 'results'),
        )
        response._client = client
        return response

    @classmethod
    def _unpack_results(cls, raw: RawEnvelope) -> Ok[Any] | Degraded[Any]:
        """Stage 4/5: read result rows and the more-data flag."""
        try:
            first: Any = first_body_element(raw.body)
            more: bool = get_field(first, 'overall_status') == STATUS_MORE_DATA
            rows: Any = get_field(first, 'results')
            page_rows: tuple[Any, ...] = () if rows is None else tuple(as_list(rows))
            return Ok(value=ResultsPage(rows=page_rows, more=more))
        except STRUCTURAL_ERRORS as error:
            return Degraded(value=ResultsPage(), reason=f'unreadable results: {error!r}')

    @classmethod
    def _status_fields(
        cls, message: str | None, results_stage: Ok[Any] | Degraded[Any]
    ) -> dict[str, Any]:
        """Stage 3: the final message and success flag."""
        return {'message': message, 'success': message == STATUS_OK}

    def continue_request(self) -> 'SoapResponse | None':
        """
        Fetch the next page of a retrieve.

        Returns:
            A new response for the next page, or None (with no call made) when
            the service did not report more data.

        Raises:
            RuntimeError: If more data is available but the response is not
                          bound to a client.
            SoapTransportError: If the continuation call fails twice.
        """
        if not self.more:
            logger.info('No more data')
            return None

        if not self.request_id:
            logger.warning('More data reported but no request id to continue from')
            return None

        if self._client is None:
            raise RuntimeError('Response is not bound to a client; cannot continue')

        logger.debug('Continuing retrieve for request id %r', self.request_id)
        return self._client.continue_retrieve(self.request_id)

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'success={self.success}, '
            f'message={self.message!r}, '
            f'results={len(self.results)}, '
            f'more={self.more})'
        )
