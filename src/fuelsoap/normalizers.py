# fuelsoap/normalizers.py
"""
Input normalization for retrieve requests.

Callers may pass property selectors and filters in several shapes. Each shape
is turned into an explicit variant model exactly once, at the API boundary
(property_selector() / filter_expression()); everything downstream works on
the variant's own behavior instead of inspecting raw input types.

Normalization never fails: every input shape has a defined outcome, with
"treat as absent" as the fallback.
"""

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from fuelsoap.models import COMPLEX_FILTER_PART, SIMPLE_FILTER_PART, XsiTyped

LOGICAL_OPERATOR: str = 'LogicalOperator'
OPERAND_KEYS: tuple[str, str] = ('LeftOperand', 'RightOperand')

# Lazily produces the retrievable property names of the object type
RetrievableLookup = Callable[[], list[str]]


# =============================================================================
# Property Selectors
# =============================================================================


class AbsentProperties(BaseModel):
    """No selection: every retrievable property of the object type."""

    model_config = ConfigDict(frozen=True)
    kind: Literal['absent'] = 'absent'

    def resolve(self, retrievable: RetrievableLookup) -> list[str]:
        return list(retrievable())


class SingleProperty(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal['single'] = 'single'
    name: str

    def resolve(self, retrievable: RetrievableLookup) -> list[str]:
        return [self.name]


class PropertyList(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal['list'] = 'list'
    names: list[str]

    def resolve(self, retrievable: RetrievableLookup) -> list[str]:
        return list(self.names)


class KeyedProperties(BaseModel):
    """Selection by the keys of a mapping; the values are ignored."""

    model_config = ConfigDict(frozen=True)
    kind: Literal['keyed'] = 'keyed'
    mapping: dict[str, Any]

    def resolve(self, retrievable: RetrievableLookup) -> list[str]:
        return list(self.mapping)


PropertySelector = Annotated[
    AbsentProperties | SingleProperty | PropertyList | KeyedProperties,
    Field(discriminator='kind'),
]

_SELECTOR_TYPES = (AbsentProperties, SingleProperty, PropertyList, KeyedProperties)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Mapping | list | tuple | set | frozenset):
        return len(value) == 0
    return False


def _scalar_name(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def property_selector(value: Any) -> PropertySelector:
    """
    Build the selector variant for a caller-supplied property argument.

    Accepts None/blank, a single name (str, enum member or other scalar),
    an iterable of names, a mapping whose keys are names, or an existing
    selector variant (returned as is).
    """
    if isinstance(value, _SELECTOR_TYPES):
        return value
    if _is_blank(value):
        return AbsentProperties()
    if isinstance(value, Mapping):
        return KeyedProperties(mapping={_scalar_name(key): item for key, item in value.items()})
    if isinstance(value, str | Enum):
        return SingleProperty(name=_scalar_name(value))
    if isinstance(value, Iterable):
        # Materialized first so an exhausted generator counts as blank
        names: list[str] = [_scalar_name(name) for name in value]
        if not names:
            return AbsentProperties()
        return PropertyList(names=names)
    return SingleProperty(name=_scalar_name(value))


def normalize_properties(value: Any, retrievable: RetrievableLookup) -> list[str]:
    """
    Turn a property argument into the ordered list of field names to retrieve.

    Args:
        value: Caller-supplied selector in any supported shape.
        retrievable: Called only when the selector is absent; errors it raises
                     (a failed describe) propagate unchanged.

    Returns:
        A new list; the caller's input is never mutated.
    """
    return property_selector(value).resolve(retrievable)


# =============================================================================
# Filter Expressions
# =============================================================================


class NoFilter(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal['none'] = 'none'

    def to_filter_part(self) -> dict[str, Any]:
        return {}


class SimpleFilter(BaseModel):
    """A leaf condition, e.g. {'Property': 'EmailAddress', 'SimpleOperator': 'equals', 'Value': ...}."""

    model_config = ConfigDict(frozen=True)
    kind: Literal['simple'] = 'simple'
    condition: dict[str, Any]

    def to_filter_part(self) -> dict[str, Any]:
        return {
            'Filter': XsiTyped(payload=dict(self.condition), xsi_type=SIMPLE_FILTER_PART)
        }


class ComplexFilter(BaseModel):
    """
    Two leaf conditions joined by a LogicalOperator (AND / OR).

    Only the two operands are tagged as simple filter parts; an operand that
    is itself a logical combination is not supported by this shape.
    """

    model_config = ConfigDict(frozen=True)
    kind: Literal['complex'] = 'complex'
    expression: dict[str, Any]

    def to_filter_part(self) -> dict[str, Any]:
        expression: dict[str, Any] = dict(self.expression)
        for operand_key in OPERAND_KEYS:
            if operand_key in expression:
                expression[operand_key] = XsiTyped(
                    payload=expression[operand_key], xsi_type=SIMPLE_FILTER_PART
                )
        return {'Filter': XsiTyped(payload=expression, xsi_type=COMPLEX_FILTER_PART)}


FilterExpression = Annotated[
    NoFilter | SimpleFilter | ComplexFilter,
    Field(discriminator='kind'),
]

_FILTER_TYPES = (NoFilter, SimpleFilter, ComplexFilter)


def filter_expression(value: Any) -> FilterExpression:
    """
    Build the filter variant for a caller-supplied filter argument.

    Anything that is not a non-empty mapping (or an existing variant) means
    "no filter".
    """
    if isinstance(value, _FILTER_TYPES):
        return value
    if not isinstance(value, Mapping) or not value:
        return NoFilter()
    condition: dict[str, Any] = {str(key): item for key, item in value.items()}
    if LOGICAL_OPERATOR in condition:
        return ComplexFilter(expression=condition)
    return SimpleFilter(condition=condition)


def normalize_filter(value: Any) -> dict[str, Any]:
    """
    Turn a filter argument into the filter part merged into a retrieve message.

    Returns {} for no filter, otherwise {'Filter': XsiTyped(...)}. This is a
    one-way transform: normalizing its own output again wraps it in another
    simple filter part.
    """
    return filter_expression(value).to_filter_part()
