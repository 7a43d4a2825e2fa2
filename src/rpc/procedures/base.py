"""
Procedure definitions: a named handler with a declared input contract
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from rpc.contracts.base import ContractField
from rpc.errors import ValidationError
from rpc.validator import get_validator

logger = logging.getLogger(__name__)


class ProcedureKind(str, Enum):
    """Read procedures are safe to retry and cache, write procedures are not"""
    QUERY = "query"
    MUTATION = "mutation"


Handler = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class Procedure:
    """A single callable operation"""
    name: str
    kind: ProcedureKind
    handler: Handler
    input_fields: List[ContractField] = field(default_factory=list)
    description: str = ""

    async def call(self, raw_input: Any) -> Any:
        """Validate input, then run the handler. Nothing runs on invalid input."""
        result = get_validator().validate(raw_input, self.input_fields)
        if not result.ok:
            raise ValidationError(
                result.first_message(),
                [e.to_dict() for e in result.errors]
            )
        return await self.handler(result.values)

    def describe(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "description": self.description,
            "input": [
                {"name": f.name, "type": f.type.value} for f in self.input_fields
            ],
        }


class ProcedureSet:
    """Procedures of one entity domain, addressed by operation name"""

    def __init__(self, procedures: List[Procedure], aliases: Optional[Dict[str, str]] = None):
        self.procedures: Dict[str, Procedure] = {}
        for procedure in procedures:
            if procedure.name in self.procedures:
                raise ValueError(f"Duplicate procedure: {procedure.name}")
            self.procedures[procedure.name] = procedure

        self.aliases = dict(aliases or {})
        for alias, target in self.aliases.items():
            if target not in self.procedures:
                raise ValueError(f"Alias {alias} points to unknown procedure {target}")

    def get(self, name: str) -> Optional[Procedure]:
        name = self.aliases.get(name, name)
        return self.procedures.get(name)

    def names(self) -> List[str]:
        return list(self.procedures.keys())
