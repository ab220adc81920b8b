"""
Content component - validated content items and their lifecycle.
"""

from .component import (
    run,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from .models import (
    CreateItemInput,
    DeleteItemInput,
    GetItemInput,
    ItemListOutput,
    ItemOperationOutput,
    ItemOutput,
    ListItemsInput,
    UpdateItemInput,
)
from .ports import ContentItemRepoPort, ContentModelLookupPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_update",
    # Input models
    "CreateItemInput",
    "DeleteItemInput",
    "GetItemInput",
    "ListItemsInput",
    "UpdateItemInput",
    # Output models
    "ItemListOutput",
    "ItemOperationOutput",
    "ItemOutput",
    # Ports
    "ContentItemRepoPort",
    "ContentModelLookupPort",
    "TimePort",
]
