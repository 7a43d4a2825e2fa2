"""
Validator component - deterministic validation of procedure input against contracts
"""

import logging
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from rpc.contracts.base import ConstraintKind, ContractField, FieldType, ResourceContract

logger = logging.getLogger(__name__)


@dataclass
class FieldError:
    """Validation error for one input field"""
    field: str
    message: str
    code: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass
class ValidationResult:
    """Outcome of validating one input payload"""
    errors: List[FieldError] = field(default_factory=list)
    values: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def first_message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None


def _type_matches(field_def: ContractField, value: Any) -> bool:
    if field_def.type == FieldType.INTEGER:
        # bool is a subclass of int but never a valid id
        return isinstance(value, int) and not isinstance(value, bool)
    if field_def.type in (FieldType.STRING, FieldType.TEXT):
        return isinstance(value, str)
    if field_def.type == FieldType.BOOLEAN:
        return isinstance(value, bool)
    return True


class Validator:
    """Deterministic validator for procedure input"""

    def validate(
        self,
        payload: Any,
        input_fields: List[ContractField],
        strip_text: bool = True
    ) -> ValidationResult:
        """
        Validate an input payload against a list of contract fields

        Args:
            payload: Decoded JSON input
            input_fields: Fields the procedure accepts
            strip_text: Trim surrounding whitespace from text values that pass

        Returns:
            ValidationResult with field-tagged errors, or the cleaned values
        """
        result = ValidationResult()

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            result.errors.append(FieldError("input", "Input must be an object", "invalid_type"))
            return result

        allowed = {f.name for f in input_fields}
        for key in payload:
            if key not in allowed:
                result.errors.append(FieldError(str(key), f"Unknown field: {key}", "unknown_field"))

        for field_def in input_fields:
            value = payload.get(field_def.name)
            error = self._validate_field(field_def, value)
            if error:
                result.errors.append(error)
                continue
            if strip_text and isinstance(value, str) and field_def.type == FieldType.TEXT:
                value = value.strip()
            result.values[field_def.name] = value

        if result.errors:
            logger.info(f"Input validation failed: {[e.field for e in result.errors]}")
        return result

    def _validate_field(self, field_def: ContractField, value: Any) -> Optional[FieldError]:
        """Return the first failing check for a field, if any"""
        if value is None:
            required = next(
                (c for c in field_def.constraints if c.kind == ConstraintKind.REQUIRED), None
            )
            if required is not None or not field_def.nullable:
                message = required.message if required else f"{field_def.name} is required"
                return FieldError(field_def.name, message, "required")
            return None

        if not _type_matches(field_def, value):
            return FieldError(
                field_def.name,
                f"Expected {field_def.type.value} for {field_def.name}",
                "invalid_type"
            )

        for constraint in field_def.constraints:
            if not constraint.check(value):
                return FieldError(field_def.name, constraint.message, constraint.kind.value)
        return None


def input_fields_for(contract: ResourceContract, *names: str) -> List[ContractField]:
    """Pick named fields from a contract as procedure input.

    The delete procedure takes the primary key as input even though it is not
    writable, so fields are marked required here."""
    fields = []
    for name in names:
        field_def = contract.get_field(name)
        if field_def is None:
            raise ValueError(f"Field does not exist on {contract.resource}: {name}")
        fields.append(field_def.model_copy(update={"nullable": False}))
    return fields


# Global validator instance
_validator: Optional[Validator] = None


def get_validator() -> Validator:
    """Get the global validator instance"""
    global _validator
    if _validator is None:
        _validator = Validator()
    return _validator
