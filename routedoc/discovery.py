"""
Controller discovery.

Finds controller classes inside Python packages and resolves dotted
identifiers back to objects. The generator only sees the identifiers,
which are returned sorted so that document order is reproducible.
"""

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Any, Callable, Iterable, List, Optional, Set

from .faults import ControllerImportFault, DiscoveryFault
from .markers import has_controller_marker

logger = logging.getLogger("routedoc.discovery")


def load_object(identifier: str) -> Any:
    """
    Import the object named by ``"pkg.mod.Name"`` or ``"pkg.mod:Name"``.

    Raises:
        ControllerImportFault: the module or attribute does not exist.
    """
    if ":" in identifier:
        module_name, _, attr_path = identifier.partition(":")
    else:
        module_name, _, attr_path = identifier.rpartition(".")

    if not module_name or not attr_path:
        raise ControllerImportFault(identifier, "expected 'module.Name' or 'module:Name'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ControllerImportFault(identifier, str(exc)) from exc

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise ControllerImportFault(identifier, f"no attribute '{part}'") from exc
    return obj


def load_type(identifier: str) -> Optional[type]:
    """Resolve a dotted identifier to a class, or None if there is no such class."""
    try:
        obj = load_object(identifier)
    except ControllerImportFault as fault:
        logger.debug("Type %r not loadable: %s", identifier, fault.message)
        return None
    return obj if isinstance(obj, type) else None


class ControllerFinder:
    """
    Scans packages for controller classes.

    Usage::

        finder = ControllerFinder()
        finder.find("myapp.controllers")
        # ['myapp.controllers.orders.OrdersController',
        #  'myapp.controllers.users.UsersController']
    """

    def __init__(self, predicate: Callable[[Any], bool] = has_controller_marker):
        self.predicate = predicate

    def find(self, package_name: str) -> List[str]:
        """
        Identifiers of all matching classes in a package and its subpackages.

        Raises:
            DiscoveryFault: the package or one of its modules fails to import.
        """
        root = self._import(package_name)
        found: Set[str] = set()

        for module in self._iter_modules(root):
            found.update(self._scan_module(module))

        identifiers = sorted(found)
        logger.debug("Found %d controller(s) in %s", len(identifiers), package_name)
        return identifiers

    def find_all(self, package_names: Iterable[str]) -> List[str]:
        """Identifiers from several packages, each package in the given order."""
        identifiers: List[str] = []
        for package_name in package_names:
            for identifier in self.find(package_name):
                if identifier not in identifiers:
                    identifiers.append(identifier)
        return identifiers

    def _iter_modules(self, root: ModuleType):
        yield root
        if not hasattr(root, "__path__"):
            return

        def _onerror(name: str) -> None:
            raise DiscoveryFault(name, "package failed to import while walking")

        for _, name, _ in pkgutil.walk_packages(root.__path__, root.__name__ + ".", onerror=_onerror):
            yield self._import(name)

    def _scan_module(self, module: ModuleType) -> List[str]:
        identifiers = []
        for _, obj in inspect.getmembers(module, inspect.isclass):
            # Skip re-exports, count each class where it is defined
            if obj.__module__ != module.__name__:
                continue
            if self.predicate(obj):
                identifiers.append(f"{obj.__module__}.{obj.__qualname__}")
        return identifiers

    @staticmethod
    def _import(name: str) -> ModuleType:
        try:
            return importlib.import_module(name)
        except Exception as exc:
            raise DiscoveryFault(name, str(exc)) from exc
