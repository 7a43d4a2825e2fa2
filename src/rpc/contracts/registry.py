"""
Contract registry for centralized contract management
"""

from typing import Dict
from rpc.contracts.base import ResourceContract
from rpc.contracts.users import get_users_contract


def get_all_contracts() -> Dict[str, ResourceContract]:
    """Get all resource contracts keyed by resource name"""
    return {
        "users": get_users_contract()
    }


def get_available_resources() -> list[str]:
    """Get list of all available resource names"""
    return list(get_all_contracts().keys())
