"""
Procedure registry - namespaces procedure sets for dispatch
"""

import logging
from typing import Any, Dict, Optional

from rpc.errors import NotFound
from rpc.procedures.base import Procedure, ProcedureSet
from rpc.procedures.users import build_user_procedures
from services.users_service import get_users_service

logger = logging.getLogger(__name__)


class ProcedureRegistry:
    """Maps "<namespace>.<operation>" paths to procedures"""

    def __init__(self):
        self._sets: Dict[str, ProcedureSet] = {}

    def register(self, namespace: str, procedure_set: ProcedureSet) -> "ProcedureRegistry":
        if not namespace or "." in namespace:
            raise ValueError(f"Invalid namespace: {namespace!r}")
        if namespace in self._sets:
            raise ValueError(f"Namespace already registered: {namespace}")
        self._sets[namespace] = procedure_set
        logger.info(f"Registered procedures {namespace}.{{{', '.join(procedure_set.names())}}}")
        return self

    def resolve(self, path: str) -> Procedure:
        """Find the procedure for a path or raise NotFound"""
        namespace, _, operation = path.partition(".")
        procedure_set = self._sets.get(namespace)
        procedure = procedure_set.get(operation) if procedure_set and operation else None
        if procedure is None:
            raise NotFound(f"Procedure not found: {path}")
        return procedure

    def describe(self) -> Dict[str, Any]:
        """Catalogue of every registered procedure path"""
        catalogue = {}
        for namespace, procedure_set in self._sets.items():
            for name in procedure_set.names():
                catalogue[f"{namespace}.{name}"] = procedure_set.procedures[name].describe()
            for alias, target in procedure_set.aliases.items():
                catalogue[f"{namespace}.{alias}"] = {
                    **procedure_set.procedures[target].describe(),
                    "alias_of": f"{namespace}.{target}",
                }
        return catalogue


def build_registry(users_service=None) -> ProcedureRegistry:
    """Build the application registry"""
    registry = ProcedureRegistry()
    registry.register("user", build_user_procedures(users_service or get_users_service()))
    return registry


# Global registry instance
_registry: Optional[ProcedureRegistry] = None


def get_registry() -> ProcedureRegistry:
    """Get the global procedure registry"""
    global _registry
    if _registry is None:
        _registry = build_registry()
    return _registry
