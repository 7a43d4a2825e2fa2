"""
User procedures: list, create and delete
"""

import logging
from typing import Any, Dict, List

from models.user import DeleteResult
from rpc.contracts.users import get_users_contract
from rpc.procedures.base import Procedure, ProcedureKind, ProcedureSet
from rpc.validator import input_fields_for

logger = logging.getLogger(__name__)


def build_user_procedures(service) -> ProcedureSet:
    """
    Build the user procedure set on top of a users service

    Args:
        service: Object with list_users / insert_user / delete_user coroutines

    Returns:
        ProcedureSet with list (alias getAll), create and delete
    """
    contract = get_users_contract()

    async def list_users(_: Dict[str, Any]) -> List[Dict[str, Any]]:
        users = await service.list_users()
        return [user.to_wire() for user in users]

    async def create_user(values: Dict[str, Any]) -> Dict[str, Any]:
        user = await service.insert_user(values["name"], values["email"])
        logger.info(f"Created user {user.id}")
        return user.to_wire()

    async def delete_user(values: Dict[str, Any]) -> Dict[str, Any]:
        # No existence check: deleting an absent id succeeds as well
        await service.delete_user(values["id"])
        return DeleteResult(success=True).model_dump()

    return ProcedureSet(
        [
            Procedure(
                name="list",
                kind=ProcedureKind.QUERY,
                handler=list_users,
                description="All users ordered by creation time"
            ),
            Procedure(
                name="create",
                kind=ProcedureKind.MUTATION,
                handler=create_user,
                input_fields=input_fields_for(contract, "name", "email"),
                description="Create a user"
            ),
            Procedure(
                name="delete",
                kind=ProcedureKind.MUTATION,
                handler=delete_user,
                input_fields=input_fields_for(contract, "id"),
                description="Delete a user by id"
            ),
        ],
        aliases={"getAll": "list"}
    )
