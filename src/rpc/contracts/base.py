"""
Base contract models for resource definitions
"""

import re
from typing import List, Literal, Optional
from pydantic import BaseModel
from enum import Enum


class FieldType(str, Enum):
    """Supported field types in contracts"""
    INTEGER = "integer"
    STRING = "string"
    TEXT = "text"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


class ConstraintKind(str, Enum):
    """Declarative constraints checked before a write reaches the store"""
    REQUIRED = "required"
    NON_BLANK = "non_blank"
    PATTERN = "pattern"


class FieldConstraint(BaseModel):
    """A single constraint on an input field"""
    kind: ConstraintKind
    message: str
    pattern: Optional[str] = None

    def check(self, value) -> bool:
        """Return True when the value satisfies this constraint"""
        if self.kind == ConstraintKind.REQUIRED:
            return value is not None
        if self.kind == ConstraintKind.NON_BLANK:
            return isinstance(value, str) and value.strip() != ""
        if self.kind == ConstraintKind.PATTERN:
            return isinstance(value, str) and re.fullmatch(self.pattern, value) is not None
        return False


class ContractField(BaseModel):
    """Field definition within a resource contract"""
    name: str
    type: FieldType
    nullable: bool = True
    unique: bool = False
    primary_key: bool = False
    readable: bool = True
    writable: bool = False
    wire_name: Optional[str] = None  # camelCase key on the wire when it differs
    constraints: List[FieldConstraint] = []

    @property
    def alias(self) -> str:
        return self.wire_name or self.name


class ResourceContract(BaseModel):
    """Complete resource contract: table layout plus field rules"""
    version: str
    resource: str
    table: str
    fields: List[ContractField]
    order_by: List[str] = []
    order_dir: Literal["asc", "desc"] = "asc"

    def get_field(self, field_name: str) -> Optional[ContractField]:
        """Get field definition by name"""
        return next((f for f in self.fields if f.name == field_name), None)

    def is_field_readable(self, field_name: str) -> bool:
        """Check if field is readable"""
        field = self.get_field(field_name)
        return field is not None and field.readable

    def is_field_writable(self, field_name: str) -> bool:
        """Check if field is writable"""
        field = self.get_field(field_name)
        return field is not None and field.writable

    def readable_fields(self) -> List[ContractField]:
        """Fields of the read shape"""
        return [f for f in self.fields if f.readable]

    def writable_fields(self) -> List[ContractField]:
        """Fields of the write shape (server-assigned fields excluded)"""
        return [f for f in self.fields if f.writable]

    def primary_key(self) -> Optional[ContractField]:
        return next((f for f in self.fields if f.primary_key), None)
