"""Per-feature view-state schema: parsing, defaulting, filter validation.

Call context:
    ``ListVM`` uses :func:`evolve` for every mutation and
    :func:`validate_filters` before applying filter changes. The app layer
    calls :func:`parse` (via ``ListVM.restore``) when a feature view mounts
    with a previously saved payload.

All functions here are pure: they never mutate their inputs and never log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .view_state import (
    DeviceFilters,
    DeviceViewState,
    FeatureKey,
    FilterModel,
    ListViewState,
    ReportFilters,
    ReportViewState,
    SecurityFilters,
    SecurityViewState,
)

T = TypeVar("T")
StateT = TypeVar("StateT", bound=ListViewState)
FeatureLike = Union[FeatureKey, str]


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Tagged success/failure outcome of a validation step."""

    value: Optional[T] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ValidationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ValidationError) -> "ValidationResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried ``ValidationError``."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class ViewStateSchema:
    """Binds a feature to its view-state and filter models."""

    feature: FeatureKey
    state_model: Type[ListViewState]
    filter_model: Type[FilterModel]

    def defaults(self) -> ListViewState:
        return self.state_model()

    def parse(self, payload: Optional[Mapping[str, Any]]) -> ListViewState:
        """Build a validated state; omitted fields take their defaults."""
        if payload is None:
            return self.defaults()
        if not isinstance(payload, Mapping):
            raise ValidationError.single("", "View state payload must be a mapping.")
        try:
            return self.state_model.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

    def safe_parse(self, payload: Optional[Mapping[str, Any]]) -> ValidationResult[ListViewState]:
        try:
            return ValidationResult.success(self.parse(payload))
        except ValidationError as exc:
            return ValidationResult.failure(exc)

    def validate_filters(self, filters: Optional[Mapping[str, Any]]) -> ValidationResult[FilterModel]:
        """Check ``filters`` against the feature's optional-field set."""
        if filters is None:
            return ValidationResult.success(self.filter_model())
        if isinstance(filters, self.filter_model):
            return ValidationResult.success(filters)
        if not isinstance(filters, Mapping):
            return ValidationResult.failure(
                ValidationError.single("filters", "Filters must be a mapping.")
            )
        try:
            return ValidationResult.success(self.filter_model.model_validate(dict(filters)))
        except PydanticValidationError as exc:
            return ValidationResult.failure(ValidationError.from_pydantic(exc, prefix=("filters",)))


SCHEMAS: Dict[FeatureKey, ViewStateSchema] = {
    FeatureKey.DEVICES: ViewStateSchema(FeatureKey.DEVICES, DeviceViewState, DeviceFilters),
    FeatureKey.SECURITY: ViewStateSchema(FeatureKey.SECURITY, SecurityViewState, SecurityFilters),
    FeatureKey.REPORTS: ViewStateSchema(FeatureKey.REPORTS, ReportViewState, ReportFilters),
}


def feature_key(feature: FeatureLike) -> FeatureKey:
    """Normalize a feature enum or string key; unknown features raise ``ValueError``."""
    if isinstance(feature, FeatureKey):
        return feature
    try:
        return FeatureKey(str(feature).strip().lower())
    except ValueError:
        known = ", ".join(key.value for key in FeatureKey)
        raise ValueError(f"Unknown feature '{feature}'. Expected one of: {known}.") from None


def schema_for(feature: FeatureLike) -> ViewStateSchema:
    return SCHEMAS[feature_key(feature)]


def schema_for_state(state: ListViewState) -> ViewStateSchema:
    for schema in SCHEMAS.values():
        if type(state) is schema.state_model:
            return schema
    raise ValueError(f"No schema registered for {type(state).__name__}.")


def defaults(feature: FeatureLike) -> ListViewState:
    return schema_for(feature).defaults()


def parse(feature: FeatureLike, payload: Optional[Mapping[str, Any]]) -> ListViewState:
    return schema_for(feature).parse(payload)


def safe_parse(feature: FeatureLike, payload: Optional[Mapping[str, Any]]) -> ValidationResult[ListViewState]:
    return schema_for(feature).safe_parse(payload)


def validate_filters(feature: FeatureLike, filters: Optional[Mapping[str, Any]]) -> ValidationResult[FilterModel]:
    return schema_for(feature).validate_filters(filters)


def serialize(state: ListViewState) -> Dict[str, Any]:
    """Return a JSON-serializable camelCase payload accepted by :func:`parse`."""
    payload = state.model_dump(mode="json", by_alias=True)
    filters = getattr(state, "filters", None)
    if isinstance(filters, FilterModel):
        payload["filters"] = filters.active()
    return payload


def evolve(state: StateT, **changes: Any) -> StateT:
    """Return a re-validated copy of ``state`` with ``changes`` applied.

    Raises:
        ValidationError: When a changed field violates its constraint.
    """
    unknown = set(changes) - set(type(state).model_fields)
    if unknown:
        raise ValueError(f"Unknown view-state fields: {', '.join(sorted(unknown))}")
    data = {name: getattr(state, name) for name in type(state).model_fields}
    data.update(changes)
    try:
        return type(state).model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


__all__ = [
    "SCHEMAS",
    "ValidationResult",
    "ViewStateSchema",
    "defaults",
    "evolve",
    "feature_key",
    "parse",
    "safe_parse",
    "schema_for",
    "schema_for_state",
    "serialize",
    "validate_filters",
]
