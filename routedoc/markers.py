"""
Documentation Markers

Class, method and parameter markers read by the OpenAPI generator.
Markers attach metadata without import-time side effects; nothing is
registered globally.

Example:
    @Controller(prefix="/users")
    @Tag("Users", "User management")
    class UsersController:

        @GET("/{id}", summary="Fetch one user")
        @Response(UserDto)
        def show(self, id: int) -> UserDto:
            ...

        @POST("/")
        def create(self, body: Annotated[CreateUser, From(JSON)]) -> UserDto:
            ...
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, TypeVar, Union


F = TypeVar('F', bound=Callable[..., Any])
C = TypeVar('C', bound=type)

CONTROLLER_ATTR = '__controller_marker__'
TAG_ATTR = '__tag_markers__'
ROUTE_ATTR = '__route_markers__'
RESPONSE_ATTR = '__response_marker__'
RESPONSE_MODEL_ATTR = '__response_model__'

JSON = 'json'
QUERY = 'query'


class Controller:
    """
    Controller-level marker.

    Only classes carrying this marker contribute operations. The marker is
    read from the class itself, subclasses do not inherit it.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def __call__(self, cls: C) -> C:
        setattr(cls, CONTROLLER_ATTR, self)
        return cls

    def __repr__(self) -> str:
        return f"Controller(prefix={self.prefix!r})"


class Tag:
    """
    Class-level grouping tag.

    When several tags are stacked, the top-most one is used.
    """

    def __init__(self, name: str, description: Optional[str] = None):
        self.name = name
        self.description = description

    def __call__(self, cls: C) -> C:
        # Decorators apply bottom-up; prepend to keep source order.
        existing = list(vars(cls).get(TAG_ATTR, []))
        setattr(cls, TAG_ATTR, [self] + existing)
        return cls

    def __repr__(self) -> str:
        return f"Tag(name={self.name!r}, description={self.description!r})"


class Route:
    """
    Operation-level marker.

    Attaches path, HTTP method and documentation text to a controller
    method. A method carrying several route markers is documented once,
    from the top-most marker.
    """

    method: str = 'GET'

    def __init__(
        self,
        path: str = "",
        method: Optional[str] = None,
        *,
        summary: Optional[str] = None,
        description: Optional[str] = None,
    ):
        """
        Args:
            path: Path relative to the controller prefix
            method: HTTP method (defaults to the class-level method)
            summary: Operation summary (defaults to the method name)
            description: Longer operation description
        """
        self.path = path
        if method is not None:
            self.method = method.upper()
        self.summary = summary
        self.description = description

    def __call__(self, func: F) -> F:
        existing = list(getattr(func, ROUTE_ATTR, []))
        setattr(func, ROUTE_ATTR, [self] + existing)
        return func

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r}, method={self.method!r})"


class GET(Route):
    """GET operation marker."""
    method = 'GET'


class POST(Route):
    """POST operation marker."""
    method = 'POST'


class PUT(Route):
    """PUT operation marker."""
    method = 'PUT'


class PATCH(Route):
    """PATCH operation marker."""
    method = 'PATCH'


class DELETE(Route):
    """DELETE operation marker."""
    method = 'DELETE'


class HEAD(Route):
    """HEAD operation marker."""
    method = 'HEAD'


class OPTIONS(Route):
    """OPTIONS operation marker."""
    method = 'OPTIONS'


class Response:
    """
    Response-type marker.

    ``model`` may be a class or a dotted import path ("app.dto.UserDto").
    A path that cannot be imported is treated as if no model was declared.
    """

    def __init__(self, model: Union[type, str, None] = None, is_array: bool = False):
        self.model = model
        self.is_array = is_array

    def __call__(self, func: F) -> F:
        # Applied bottom-up, so the last write is the top-most marker.
        setattr(func, RESPONSE_ATTR, self)
        return func

    def __repr__(self) -> str:
        return f"Response(model={self.model!r}, is_array={self.is_array!r})"


@dataclass(frozen=True)
class From:
    """
    Bind-source marker for handler parameters.

    Usage: ``body: Annotated[CreateUser, From("json")]``
    """
    source: str


@dataclass(frozen=True)
class Property:
    """
    Field documentation marker.

    Usage: ``age: Annotated[int, Property(example=42, description="Age")]``
    """
    example: Any = None
    description: Optional[str] = None


def response_model(cls: C) -> C:
    """Mark a class as a structured response type expanded into a named schema."""
    setattr(cls, RESPONSE_MODEL_ATTR, True)
    return cls


def is_response_model(tp: Any) -> bool:
    """Check whether ``tp`` is a class marked with ``@response_model``."""
    return isinstance(tp, type) and bool(getattr(tp, RESPONSE_MODEL_ATTR, False))


def has_controller_marker(cls: Any) -> bool:
    """Check whether ``cls`` itself carries a ``@Controller`` marker."""
    return isinstance(cls, type) and isinstance(vars(cls).get(CONTROLLER_ATTR), Controller)


def route_markers(func: Any) -> List[Route]:
    """Route markers attached to ``func``, in source order."""
    return list(getattr(func, ROUTE_ATTR, []))
