"""Field mapping registry: how each Google Shopping attribute is produced."""

import inspect
import logging
from dataclasses import dataclass
from html import escape
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union
from pydantic import BaseModel

from .context import FeedContext
from .models.catalog_models import Variant
from .widgets import Widget, TextWidget

logger = logging.getLogger("google_shopping_feed")

WidgetSource = Union[Widget, Callable[[], Widget]]


class UnknownFieldError(KeyError):
    """Raised when a field name has no registered mapping."""


class InvalidOverrideError(ValueError):
    """Raised when an override value is not accepted by the field's widget."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field


@dataclass(frozen=True)
class Constant:
    """Resolves to the same value for every variant."""
    value: Any


@dataclass(frozen=True)
class Computed:
    """Resolves by calling func(variant) or func(variant, context)."""
    func: Callable[..., Any]
    accepts_context: bool = False


@dataclass(frozen=True)
class StoredColumn:
    """Resolves to the administrator override, or default when none is stored."""
    default: Any = None


Resolver = Union[Constant, Computed, StoredColumn]


@dataclass(frozen=True)
class FieldMapping:
    """A registered feed attribute."""
    name: str
    resolver: Resolver
    widget: Optional[WidgetSource] = None

    @property
    def kind(self) -> str:
        if isinstance(self.resolver, Constant):
            return "constant"
        if isinstance(self.resolver, StoredColumn):
            return "stored"
        return "computed"

    @property
    def stored(self) -> bool:
        return isinstance(self.resolver, StoredColumn)

    @property
    def default(self) -> Any:
        if isinstance(self.resolver, StoredColumn):
            return self.resolver.default
        return None

    def editor(self) -> Optional[Widget]:
        """Widget used to edit a stored column; text input unless one was given."""
        if not self.stored:
            return None
        if self.widget is None:
            return TextWidget()
        if callable(self.widget):
            return self.widget()
        return self.widget


def _accepts_context(func: Callable[..., Any]) -> bool:
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = [
        p for p in parameters
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return len(positional) >= 2


def _to_feed_value(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_feed_value(v) for v in value]
    return value


class MappingBuilder:
    """
    Returned by FieldMappingRegistry.define; registers the mapping for one field.

    Example:
        registry.define("channel").constant("online")
        registry.define("condition").as_stored_column(default="new")

        @registry.define("offer_id").compute
        def offer_id(variant):
            return variant.sku
    """

    def __init__(self, registry: "FieldMappingRegistry", name: str):
        self._registry = registry
        self.name = name

    def constant(self, value: Any) -> FieldMapping:
        return self._registry._register(FieldMapping(self.name, Constant(value)))

    def compute(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register func as the resolver. Returns func so this can be used as a decorator."""
        self._registry._register(
            FieldMapping(self.name, Computed(func, accepts_context=_accepts_context(func)))
        )
        return func

    def as_stored_column(
        self,
        default: Any = None,
        widget: Optional[WidgetSource] = None,
    ) -> FieldMapping:
        return self._registry._register(
            FieldMapping(self.name, StoredColumn(default), widget=widget)
        )


class FieldMappingRegistry:
    """Ordered mapping from feed attribute name to its FieldMapping."""

    def __init__(self):
        self._mappings: Dict[str, FieldMapping] = {}

    def define(self, name: str) -> MappingBuilder:
        """Start (re)defining a field. The last definition of a name wins."""
        return MappingBuilder(self, name)

    def _register(self, mapping: FieldMapping) -> FieldMapping:
        if mapping.name in self._mappings:
            logger.debug(
                "field_redefined",
                extra={"field": mapping.name, "previous": self._mappings[mapping.name].kind, "kind": mapping.kind},
            )
        self._mappings[mapping.name] = mapping
        return mapping

    def get(self, name: str) -> FieldMapping:
        try:
            return self._mappings[name]
        except KeyError:
            raise UnknownFieldError(name) from None

    def names(self) -> List[str]:
        return list(self._mappings)

    def stored_columns(self) -> List[FieldMapping]:
        return [m for m in self._mappings.values() if m.stored]

    def __contains__(self, name: object) -> bool:
        return name in self._mappings

    def __iter__(self) -> Iterator[FieldMapping]:
        return iter(list(self._mappings.values()))

    def __len__(self) -> int:
        return len(self._mappings)

    def resolve_field(
        self,
        name: str,
        variant: Variant,
        context: Optional[FeedContext] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Resolve a single field for a variant. None means the field is absent."""
        resolver = self.get(name).resolver

        if isinstance(resolver, Constant):
            value = resolver.value
        elif isinstance(resolver, StoredColumn):
            value = (overrides or {}).get(name)
            if value is None:
                value = resolver.default
        elif resolver.accepts_context:
            value = resolver.func(variant, context)
        else:
            value = resolver.func(variant)

        return _to_feed_value(value)

    def resolve(
        self,
        variant: Variant,
        context: Optional[FeedContext] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Build the feed record for a variant.

        Args:
            variant: Variant to describe
            context: Optional request context for resolvers that use it
            overrides: Stored column values saved by an administrator

        Returns:
            Mapping of field name to value, without absent (None) fields
        """
        record: Dict[str, Any] = {}
        for name in self._mappings:
            value = self.resolve_field(name, variant, context, overrides)
            if value is not None:
                record[name] = value
        return record

    def validate_overrides(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Coerce submitted values through each stored column's widget.

        Blank values come back as None, meaning "remove the override".

        Raises:
            UnknownFieldError: if a key is not a stored column
            InvalidOverrideError: if the widget rejects a value
        """
        cleaned: Dict[str, Any] = {}
        for name, value in values.items():
            if name not in self._mappings or not self._mappings[name].stored:
                raise UnknownFieldError(name)
            try:
                cleaned[name] = self._mappings[name].editor().coerce(value)
            except ValueError as exc:
                raise InvalidOverrideError(name, str(exc)) from None
        return cleaned

    def render_field(self, name: str, value: Any = None) -> str:
        """Render the editor for a stored column, pre-filled with value or its default."""
        mapping = self.get(name)
        widget = mapping.editor()
        if widget is None:
            raise UnknownFieldError(name)
        if value is None:
            value = mapping.default
        label = name.replace("_", " ").capitalize()
        return (
            f'<div class="field" id="google_product_{escape(name)}_field">'
            f'<label for="google_product_{escape(name)}">{escape(label)}</label>'
            f"{widget.render(name, value)}"
            "</div>"
        )

    def render_form(self, overrides: Optional[Mapping[str, Any]] = None) -> str:
        """Render editors for every stored column."""
        overrides = overrides or {}
        return "\n".join(
            self.render_field(m.name, overrides.get(m.name)) for m in self.stored_columns()
        )
