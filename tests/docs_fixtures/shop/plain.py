from routedoc import GET

from .users import UsersController


class NotAController:

    @GET("/hidden")
    def hidden(self) -> dict:
        return {}


class InheritedController(UsersController):
    """Subclass without its own marker."""
