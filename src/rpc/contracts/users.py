"""
Users resource contract definitions
"""

from rpc.contracts.base import (
    ResourceContract, ContractField, FieldType, FieldConstraint, ConstraintKind
)

# local-part@domain with at least one dot in the domain
EMAIL_PATTERN = r"[^@\s]+@[^@\s.]+(\.[^@\s.]+)+"


def get_users_contract() -> ResourceContract:
    """Get users resource contract"""

    fields = [
        ContractField(
            name="id",
            type=FieldType.INTEGER,
            nullable=False,
            primary_key=True,
            readable=True,
            writable=False  # Assigned by the store sequence
        ),
        ContractField(
            name="name",
            type=FieldType.TEXT,
            nullable=False,
            readable=True,
            writable=True,
            constraints=[
                FieldConstraint(kind=ConstraintKind.REQUIRED, message="Name is required"),
                FieldConstraint(kind=ConstraintKind.NON_BLANK, message="Name is required"),
            ]
        ),
        ContractField(
            name="email",
            type=FieldType.TEXT,
            nullable=False,
            unique=True,
            readable=True,
            writable=True,
            constraints=[
                FieldConstraint(kind=ConstraintKind.REQUIRED, message="Email is required"),
                FieldConstraint(
                    kind=ConstraintKind.PATTERN,
                    message="Invalid email address",
                    pattern=EMAIL_PATTERN
                ),
            ]
        ),
        ContractField(
            name="created_at",
            type=FieldType.TIMESTAMP,
            nullable=False,
            readable=True,
            writable=False,  # Set once by the store at insertion
            wire_name="createdAt"
        )
    ]

    return ResourceContract(
        version="1.0.0",
        resource="users",
        table="users",
        fields=fields,
        # id breaks ties between rows inserted within the same timestamp tick
        order_by=["created_at", "id"],
        order_dir="asc"
    )
