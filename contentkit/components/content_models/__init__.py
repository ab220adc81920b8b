"""
Content models component - runtime-defined content schemas.
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
    CreateModelInput,
    DeleteModelInput,
    GetModelInput,
    ListModelsInput,
    ModelListOutput,
    ModelOperationOutput,
    ModelOutput,
    UpdateModelInput,
)
from .ports import ContentModelRepoPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_update",
    # Input models
    "CreateModelInput",
    "DeleteModelInput",
    "GetModelInput",
    "ListModelsInput",
    "UpdateModelInput",
    # Output models
    "ModelListOutput",
    "ModelOperationOutput",
    "ModelOutput",
    # Ports
    "ContentModelRepoPort",
    "TimePort",
]
