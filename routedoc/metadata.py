"""
Controller Metadata Extraction

Turns documentation markers into immutable descriptors. The generator only
ever reads descriptors, never the markers themselves, so a descriptor built
by hand documents exactly like a decorated class.
"""

import dataclasses
import inspect
import logging
import sys
import types
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    ClassVar,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .markers import (
    CONTROLLER_ATTR,
    RESPONSE_ATTR,
    TAG_ATTR,
    Controller,
    From,
    Property,
    Response,
    route_markers,
)

logger = logging.getLogger("routedoc.metadata")

EMPTY = inspect.Parameter.empty


@dataclass(frozen=True)
class UnresolvedType:
    """Placeholder for an annotation that could not be evaluated."""
    text: str


@dataclass(frozen=True)
class FieldDescriptor:
    """
    One documented field of a data-transfer type.

    Attributes:
        name: Field name
        type: Declared type with ``Annotated``/``Optional`` stripped,
              ``None`` when undeclared
        example: Example value (``None`` when not declared)
        description: Field description
    """
    name: str
    type: Any = None
    example: Any = None
    description: Optional[str] = None


@dataclass(frozen=True)
class TypeDescriptor:
    type: Any
    qualified_name: str
    fields: Tuple[FieldDescriptor, ...] = ()

    @property
    def short_name(self) -> str:
        return short_name(self.qualified_name)


@dataclass(frozen=True)
class ParameterDescriptor:
    """
    Handler parameter.

    Attributes:
        name: Parameter name
        type: Declared type with ``Annotated``/``Optional`` stripped
        source: Bind source from ``From(...)``, ``None`` when unbound
    """
    name: str
    type: Any = None
    source: Optional[str] = None


@dataclass(frozen=True)
class ResponseDescriptor:
    model: Any = None
    is_array: bool = False


@dataclass(frozen=True)
class TagDescriptor:
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Metadata for a single documented controller method.

    Attributes:
        handler_name: Method identifier
        path: Path relative to the controller prefix
        http_method: Upper-case HTTP method
        summary: Declared summary, ``None`` when absent
        description: Declared description, ``None`` when absent
        handler: The underlying function
        parameters: Handler parameters except ``self``/``cls``
        response: Response-type marker payload, if any
        return_type: Return annotation, ``EMPTY`` when undeclared
    """
    handler_name: str
    path: str
    http_method: str
    summary: Optional[str] = None
    description: Optional[str] = None
    handler: Any = None
    parameters: Tuple[ParameterDescriptor, ...] = ()
    response: Optional[ResponseDescriptor] = None
    return_type: Any = EMPTY


@dataclass(frozen=True)
class ControllerDescriptor:
    """
    Complete documentation metadata for a controller class.

    Attributes:
        class_name: Controller class name
        qualified_name: "module.ClassName"
        prefix: Path prefix for all operations
        tag: First declared tag, ``None`` when the class has no tag
        operations: Documented operations in declaration order
    """
    class_name: str
    qualified_name: str
    prefix: str = ""
    tag: Optional[TagDescriptor] = None
    operations: Tuple[OperationDescriptor, ...] = ()


# ─── Names ───────────────────────────────────────────────────────────────────

def qualified_name(tp: Any) -> str:
    """Fully-qualified "module.QualName" identifier of a class."""
    if isinstance(tp, UnresolvedType):
        return tp.text
    module = getattr(tp, "__module__", None)
    name = getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None) or repr(tp)
    if module and module != "builtins":
        return f"{module}.{name}"
    return name


def short_name(name: str) -> str:
    """Last segment of a qualified identifier ("a.b:C" and "a.b.C" give "C")."""
    return name.replace(":", ".").rsplit(".", 1)[-1]


# ─── Type helpers ────────────────────────────────────────────────────────────

def split_annotated(tp: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """Split ``Annotated[X, *extras]`` into ``(X, extras)``."""
    if get_origin(tp) is Annotated:
        return tp.__origin__, tuple(tp.__metadata__)
    return tp, ()


def unwrap_optional(tp: Any) -> Any:
    """``Optional[X]`` and ``X | None`` give ``X``; other unions are left alone."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        non_none = [a for a in get_args(tp) if a is not type(None)]
        if len(non_none) == 1:
            return non_none[0]
    return tp


def strip_type(tp: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """Remove ``Annotated`` and ``Optional`` layers, collecting extras."""
    extras: Tuple[Any, ...] = ()
    while True:
        base, more = split_annotated(tp)
        base = unwrap_optional(base)
        extras += more
        if base is tp:
            return base, extras
        tp = base


_NON_USER_MODULES = ("builtins", "typing", "typing_extensions")


def is_user_class(tp: Any) -> bool:
    """
    A class that is neither a builtin (``int``, ``dict``, ``list``...) nor a
    typing construct. ``typing.Any`` is a class from Python 3.11 on.
    """
    if tp is Any or not isinstance(tp, type):
        return False
    return tp.__module__ not in _NON_USER_MODULES


# ─── Hint resolution ─────────────────────────────────────────────────────────

def resolve_hints(obj: Any) -> Dict[str, Any]:
    """
    Resolve type hints of a class or function, keeping ``Annotated`` extras.

    Unresolvable forward references degrade to ``UnresolvedType`` instead of
    failing the whole object.
    """
    try:
        return get_type_hints(obj, include_extras=True)
    except (NameError, AttributeError, SyntaxError, TypeError) as exc:
        logger.warning("Unresolved annotation on %s (%s); resolving hints one by one",
                       qualified_name(obj), exc)

    hints: Dict[str, Any] = {}
    sources = reversed(obj.__mro__) if isinstance(obj, type) else [inspect.unwrap(obj)]
    for source in sources:
        module = sys.modules.get(getattr(source, "__module__", None) or "")
        globalns = dict(vars(module)) if module else {}
        localns = {source.__name__: source} if isinstance(source, type) else None
        for name, annotation in inspect.get_annotations(source).items():
            hints[name] = _evaluate(annotation, globalns, localns)
    return hints


def _evaluate(annotation: Any, globalns: Dict[str, Any], localns: Optional[Dict[str, Any]]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    # resolved as a class attribute, so ClassVar is accepted
    holder = type("_AnnotationHolder", (), {"__annotations__": {"value": annotation}})
    try:
        return get_type_hints(holder, globalns, localns, include_extras=True)["value"]
    except (NameError, AttributeError, SyntaxError, TypeError):
        return UnresolvedType(annotation)


# ─── Descriptors ─────────────────────────────────────────────────────────────

def describe_type(tp: Any) -> TypeDescriptor:
    """
    Describe the documented fields of a data-transfer type.

    Fields come from the resolved annotations (base classes first), skipping
    private names. Example and description are read from ``Property`` extras
    or from dataclass field metadata.
    """
    hints = resolve_hints(tp) if isinstance(tp, type) else {}
    dc_fields = {f.name: f for f in dataclasses.fields(tp)} if dataclasses.is_dataclass(tp) else {}

    fields: List[FieldDescriptor] = []
    for name, annotation in hints.items():
        if name.startswith("_"):
            continue
        if get_origin(annotation) is ClassVar:
            continue
        field_type, extras = strip_type(annotation)
        example, description = None, None

        dc_field = dc_fields.get(name)
        if dc_field is not None and dc_field.metadata:
            example = dc_field.metadata.get("example")
            description = dc_field.metadata.get("description")

        for extra in extras:
            if isinstance(extra, Property):
                example = extra.example
                description = extra.description
                break

        fields.append(FieldDescriptor(
            name=name,
            type=field_type,
            example=example,
            description=description,
        ))

    return TypeDescriptor(type=tp, qualified_name=qualified_name(tp), fields=tuple(fields))


def describe_controller(controller_class: Any) -> Optional[ControllerDescriptor]:
    """
    Extract documentation metadata from a controller class.

    Returns:
        ControllerDescriptor, or None when the class has no ``@Controller``
        marker of its own.

    Example:
        descriptor = describe_controller(UsersController)
    """
    marker = vars(controller_class).get(CONTROLLER_ATTR)
    if not isinstance(marker, Controller):
        return None

    tag = None
    tags = vars(controller_class).get(TAG_ATTR) or []
    if tags:
        tag = TagDescriptor(name=tags[0].name, description=tags[0].description)

    operations = [
        _describe_operation(name, func)
        for name, func in _iter_methods(controller_class)
        if route_markers(func)
    ]

    return ControllerDescriptor(
        class_name=controller_class.__name__,
        qualified_name=qualified_name(controller_class),
        prefix=marker.prefix or "",
        tag=tag,
        operations=tuple(operations),
    )


def _iter_methods(cls: type):
    """Methods in declaration order, own class first, each name once."""
    seen = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen:
                continue
            if isinstance(member, (staticmethod, classmethod)):
                member = member.__func__
            if not inspect.isfunction(member):
                continue
            seen.add(name)
            yield name, member


def _describe_operation(name: str, func: Any) -> OperationDescriptor:
    route = route_markers(func)[0]
    hints = resolve_hints(func)

    response = None
    marker = getattr(func, RESPONSE_ATTR, None)
    if isinstance(marker, Response):
        response = ResponseDescriptor(model=marker.model, is_array=marker.is_array)

    return OperationDescriptor(
        handler_name=name,
        path=route.path or "",
        http_method=route.method,
        summary=route.summary,
        description=route.description,
        handler=func,
        parameters=tuple(_describe_parameters(func, hints)),
        response=response,
        return_type=hints.get("return", EMPTY),
    )


def _describe_parameters(func: Any, hints: Dict[str, Any]) -> List[ParameterDescriptor]:
    params = []
    for param_name in inspect.signature(func).parameters:
        if param_name in ("self", "cls"):
            continue
        param_type, extras = strip_type(hints.get(param_name))
        source = next((extra.source for extra in extras if isinstance(extra, From)), None)
        params.append(ParameterDescriptor(name=param_name, type=param_type, source=source))
    return params
