"""Editor widgets for administrator-overridable feed fields."""

from html import escape
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field


def _input_name(field_name: str) -> str:
    return f"google_product[{field_name}]"


def _input_id(field_name: str) -> str:
    return f"google_product_{field_name}"


def _class_attr(css_class: Optional[str]) -> str:
    return f' class="{escape(css_class)}"' if css_class else ""


class SelectWidget(BaseModel):
    """Drop-down of (label, value) choices."""
    kind: Literal["select"] = "select"
    choices: List[Tuple[str, str]] = Field(default_factory=list)
    include_blank: Optional[str] = None
    css_class: Optional[str] = "select2"

    @classmethod
    def from_values(cls, values, **kwargs) -> "SelectWidget":
        """Build a select whose labels are the values themselves."""
        return cls(choices=[(v, v) for v in values], **kwargs)

    def coerce(self, value: Any) -> Optional[str]:
        """Submitted value as stored; blank clears it."""
        if value is None or value == "":
            return None
        value = str(value)
        if value not in {choice for _, choice in self.choices}:
            raise ValueError(f"{value!r} is not one of the choices")
        return value

    def render(self, field_name: str, value: Any = None) -> str:
        selected = None if value is None else str(value)
        options = []
        if self.include_blank is not None:
            options.append(f'<option value="">{escape(self.include_blank)}</option>')
        for label, choice in self.choices:
            flag = ' selected="selected"' if choice == selected else ""
            options.append(
                f'<option value="{escape(choice)}"{flag}>{escape(label)}</option>'
            )
        return (
            f'<select name="{escape(_input_name(field_name))}" '
            f'id="{escape(_input_id(field_name))}"{_class_attr(self.css_class)}>'
            + "".join(options)
            + "</select>"
        )


class CheckboxWidget(BaseModel):
    """Boolean checkbox. An unchecked box still submits "0"."""
    kind: Literal["checkbox"] = "checkbox"
    css_class: Optional[str] = None

    def coerce(self, value: Any) -> Optional[bool]:
        return None if value is None else _truthy(value)

    def render(self, field_name: str, value: Any = None) -> str:
        name = escape(_input_name(field_name))
        checked = ' checked="checked"' if _truthy(value) else ""
        return (
            f'<input name="{name}" type="hidden" value="0" />'
            f'<input type="checkbox" value="1" name="{name}" '
            f'id="{escape(_input_id(field_name))}"{_class_attr(self.css_class)}{checked} />'
        )


class TextWidget(BaseModel):
    """Single-line text input."""
    kind: Literal["text"] = "text"
    placeholder: Optional[str] = None
    css_class: Optional[str] = None

    def coerce(self, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value)

    def render(self, field_name: str, value: Any = None) -> str:
        attrs = ""
        if value is not None:
            attrs += f' value="{escape(str(value))}"'
        if self.placeholder:
            attrs += f' placeholder="{escape(self.placeholder)}"'
        return (
            f'<input type="text" name="{escape(_input_name(field_name))}" '
            f'id="{escape(_input_id(field_name))}"{attrs}{_class_attr(self.css_class)} />'
        )


Widget = Annotated[
    Union[SelectWidget, CheckboxWidget, TextWidget],
    Field(discriminator="kind"),
]


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
