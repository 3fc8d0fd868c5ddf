"""
Module: fields

Purpose:
    Provides the Field dataclass - one node of a library's semantics tree -
    and the codec for its polymorphic "options" attribute. Select fields
    carry options as {"value", "label"} objects, library fields carry them as
    plain strings; both live under the same JSON key, so the declared type
    decides how the payload is read.

Key Functions:
    - Field.from_dict() / Field.to_dict(): Serialization
    - Field.select() / Field.library(): Constructors that encode options
    - select_options(field): Decode select-shaped options (or ())
    - library_options(field): Decode library-shaped options (or ())
    - decode_options(field): Strict decode, raises AmbiguousSchemaError
    - parse_semantics() / dump_semantics(): Whole semantics arrays
    - iter_fields(): Depth-first walk with dotted paths

Dependencies:
    - dataclasses (std)
    - h5p_toolkit.errors: AmbiguousSchemaError

Used By:
    - core.models.library.Library.fields
    - core.schemas.validator: Options shape checks
    - semantics: Bundled semantics decoding
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

from h5p_toolkit.core.utils.serialization import object_list, string_list
from h5p_toolkit.errors import AmbiguousSchemaError


class FieldType(str, Enum):
    """Field type vocabulary. Other tags are allowed and kept as strings."""
    GROUP = "group"
    TEXT = "text"
    BOOLEAN = "boolean"
    SELECT = "select"
    LIST = "list"
    NUMBER = "number"
    LIBRARY = "library"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class SelectOption:
    """One (value, label) choice of a select field."""

    value: str
    label: str

    def to_dict(self) -> dict:
        return {"value": self.value, "label": self.label}


@dataclass(frozen=True, slots=True)
class ShowRule:
    """Show the owning field when `field` equals `equals`."""

    field: str
    equals: Any

    def to_dict(self) -> dict:
        return {"field": self.field, "equals": self.equals}

    @classmethod
    def from_dict(cls, data: dict) -> ShowRule:
        return cls(field=data.get("field", ""), equals=data.get("equals"))


@dataclass(frozen=True, slots=True)
class ShowWhen:
    """Conditional visibility rules (showWhen widget)."""

    rules: Tuple[ShowRule, ...] = ()
    extra: Dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"rules": [rule.to_dict() for rule in self.rules]}
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ShowWhen:
        """
        Raises:
            ValueError: If data is not an object or rules is not a list of objects
        """
        if not isinstance(data, dict):
            raise ValueError(f"showWhen must be a JSON object, got {type(data).__name__}")
        return cls(
            rules=tuple(ShowRule.from_dict(rule) for rule in object_list(data, "rules")),
            extra={k: v for k, v in data.items() if k != "rules"},
        )


# Python attribute -> JSON key, in the order keys are written
_SCALAR_KEYS: Tuple[Tuple[str, str], ...] = (
    ("label", "label"),
    ("description", "description"),
    ("importance", "importance"),
    ("optional", "optional"),
    ("default", "default"),
    ("common", "common"),
    ("widget", "widget"),
    ("placeholder", "placeholder"),
    ("expanded", "expanded"),
    ("entity", "entity"),
    ("min", "min"),
    ("max", "max"),
    ("default_num", "defaultNum"),
    ("step", "step"),
    ("decimals", "decimals"),
    ("unit", "unit"),
    ("max_length", "maxLength"),
)

_STRUCTURED_KEYS = frozenset({"name", "type", "fields", "field", "options", "tags", "showWhen"})
_KNOWN_KEYS = frozenset(key for _, key in _SCALAR_KEYS) | _STRUCTURED_KEYS


@dataclass(frozen=True, slots=True)
class Field:
    """
    Semantics field node (immutable tree structure).

    Group fields nest an ordered tuple of child fields; list fields carry a
    single item template in `field`. The `options` attribute holds the raw
    JSON list exactly as written; read it through select_options() or
    library_options(), which consult `type` first. A non-list options value
    is kept as written so it can be reported rather than lost.

    Attributes:
        name: Parameter name the field edits
        type: Type tag (see FieldType)
        fields: Group children, None when the key is absent
        options: Raw options (a tuple for a JSON list), or None when absent
        tags: Tag strings, None when the key is absent
        extra: Unrecognised JSON keys, written back unchanged

    Example:
        >>> f = Field.library("content", ["H5P.MultiChoice 1.16"])
        >>> library_options(f)
        ('H5P.MultiChoice 1.16',)
        >>> select_options(f)
        ()
    """

    name: str
    type: str
    label: Optional[str] = None
    description: Optional[str] = None
    importance: Optional[str] = None
    optional: Optional[bool] = None
    default: Any = None
    common: Optional[bool] = None
    widget: Optional[str] = None
    placeholder: Optional[str] = None
    fields: Optional[Tuple[Field, ...]] = None
    expanded: Optional[bool] = None
    entity: Optional[str] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    default_num: Optional[int] = None
    field: Optional[Field] = None
    options: Any = None
    step: Optional[Union[int, float]] = None
    decimals: Optional[int] = None
    unit: Optional[str] = None
    max_length: Optional[int] = None
    tags: Optional[Tuple[str, ...]] = None
    show_when: Optional[ShowWhen] = None
    extra: Dict[str, Any] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the node on construction."""
        if not isinstance(self.type, str) or not self.type:
            raise ValueError(f"Field {self.name!r} must declare a type")
        if self.fields and self.type != FieldType.GROUP:
            raise ValueError(f"Only group fields can nest fields ({self.name!r} is {self.type!r})")

    # ─────────────────────────────────────────────────────────────────────────
    # Constructors
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def select(
        cls,
        name: str,
        options: Iterable[Union[SelectOption, Tuple[str, str]]],
        **kwargs: Any,
    ) -> Field:
        """Create a select field, encoding options as value/label objects."""
        encoded = []
        for option in options:
            if not isinstance(option, SelectOption):
                option = SelectOption(*option)
            encoded.append(option.to_dict())
        return cls(name=name, type=FieldType.SELECT.value, options=tuple(encoded), **kwargs)

    @classmethod
    def library(cls, name: str, options: Iterable[str], **kwargs: Any) -> Field:
        """Create a library field, encoding options as plain strings."""
        return cls(
            name=name,
            type=FieldType.LIBRARY.value,
            options=tuple(str(option) for option in options),
            **kwargs,
        )

    @classmethod
    def group(cls, name: str, fields: Sequence[Field], **kwargs: Any) -> Field:
        return cls(name=name, type=FieldType.GROUP.value, fields=tuple(fields), **kwargs)

    @classmethod
    def list_of(cls, name: str, item: Field, **kwargs: Any) -> Field:
        return cls(name=name, type=FieldType.LIST.value, field=item, **kwargs)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        """Serialize to the semantics.json object form."""
        d: Dict[str, Any] = {"name": self.name, "type": self.type}
        for attr, key in _SCALAR_KEYS:
            value = getattr(self, attr)
            if value is not None:
                d[key] = value
        if self.fields is not None:
            d["fields"] = [child.to_dict() for child in self.fields]
        if self.field is not None:
            d["field"] = self.field.to_dict()
        if self.options is not None:
            d["options"] = list(self.options) if isinstance(self.options, tuple) else self.options
        if self.tags is not None:
            d["tags"] = list(self.tags)
        if self.show_when is not None:
            d["showWhen"] = self.show_when.to_dict()
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Field:
        """
        Deserialize from a semantics.json object.

        Keys this class does not model, and modelled keys holding JSON null,
        are kept in `extra` so that to_dict() writes them back.

        Raises:
            ValueError: If data is not an object, lacks a type, or a structural
                member (name, fields, field, tags, showWhen) has the wrong JSON
                type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Field must be a JSON object, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {}
        for attr, key in _SCALAR_KEYS:
            if data.get(key) is not None:
                kwargs[attr] = data[key]

        extra = {
            key: value for key, value in data.items()
            if key not in _KNOWN_KEYS or (value is None and key not in ("name", "type"))
        }

        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValueError(f"Field name must be a string, got {type(name).__name__}")
        item = data.get("field")
        if item is not None and not isinstance(item, dict):
            raise ValueError(f"Field {name!r}: 'field' must be an object")
        options = data.get("options")
        show_when = data.get("showWhen")

        return cls(
            name=name,
            type=data.get("type", ""),
            fields=(
                None if data.get("fields") is None
                else tuple(cls.from_dict(child) for child in object_list(data, "fields"))
            ),
            field=cls.from_dict(item) if item is not None else None,
            options=tuple(options) if isinstance(options, list) else options,
            tags=None if data.get("tags") is None else string_list(data, "tags"),
            show_when=ShowWhen.from_dict(show_when) if show_when is not None else None,
            extra=extra,
            **kwargs,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Options codec
# ─────────────────────────────────────────────────────────────────────────────

def _decode_select(options: Any) -> Optional[Tuple[SelectOption, ...]]:
    if not isinstance(options, tuple):
        return None
    decoded = []
    for item in options:
        if not isinstance(item, dict):
            return None
        value, label = item.get("value"), item.get("label")
        if not isinstance(value, str) or not isinstance(label, str):
            return None
        decoded.append(SelectOption(value=value, label=label))
    return tuple(decoded)


def _decode_library(options: Any) -> Optional[Tuple[str, ...]]:
    if not isinstance(options, tuple) or not all(isinstance(item, str) for item in options):
        return None
    return tuple(options)


def select_options(field: Field) -> Tuple[SelectOption, ...]:
    """
    Decode the options of a select field.

    Returns () for any other type, and for a select field whose options are
    not all objects with string "value" and "label" keys.
    """
    if field.type != FieldType.SELECT or not field.options:
        return ()
    return _decode_select(field.options) or ()


def library_options(field: Field) -> Tuple[str, ...]:
    """
    Decode the options of a library field.

    Returns () for any other type, and for a library field whose options are
    not all strings.
    """
    if field.type != FieldType.LIBRARY or not field.options:
        return ()
    return _decode_library(field.options) or ()


def options_mismatch(field: Field) -> Optional[str]:
    """Describe why a field's options do not fit its type, or None if they do."""
    if field.options is None or field.options == ():
        return None
    if field.type in (FieldType.SELECT, FieldType.LIBRARY) and not isinstance(field.options, tuple):
        return f"{field.type} options must be a list"
    if field.type == FieldType.SELECT and _decode_select(field.options) is None:
        return "select options must be objects with string 'value' and 'label'"
    if field.type == FieldType.LIBRARY and _decode_library(field.options) is None:
        return "library options must be strings"
    return None


def decode_options(field: Field) -> Union[Tuple[SelectOption, ...], Tuple[str, ...]]:
    """
    Strictly decode options according to the field type.

    Raises:
        AmbiguousSchemaError: If the payload shape does not match the type
    """
    problem = options_mismatch(field)
    if problem:
        raise AmbiguousSchemaError(field.name, field.type, problem)
    if field.type == FieldType.SELECT:
        return select_options(field)
    if field.type == FieldType.LIBRARY:
        return library_options(field)
    return ()


# ─────────────────────────────────────────────────────────────────────────────
# Semantics arrays
# ─────────────────────────────────────────────────────────────────────────────

def parse_semantics(data: Any) -> Tuple[Field, ...]:
    """
    Decode a semantics.json array into Field nodes.

    Raises:
        ValueError: If data is not a list of field objects
    """
    if not isinstance(data, list):
        raise ValueError(f"Semantics must be a JSON array, got {type(data).__name__}")
    return tuple(Field.from_dict(item) for item in data)


def dump_semantics(fields: Iterable[Field]) -> list:
    return [f.to_dict() for f in fields]


def iter_fields(fields: Iterable[Field], prefix: str = "") -> Iterator[Tuple[str, Field]]:
    """
    Walk fields depth-first, yielding (dotted_path, field).

    List templates appear as "<list>[]" in the path.
    """
    for f in fields:
        path = f"{prefix}.{f.name}" if prefix else f.name
        yield path, f
        if f.fields:
            yield from iter_fields(f.fields, path)
        if f.field is not None:
            yield from iter_fields((f.field,), f"{path}[]")
