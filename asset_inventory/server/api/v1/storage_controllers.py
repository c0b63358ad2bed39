"""
API endpoints for managing storage controllers.

Provides list/search, show, create, update and delete operations for the
storage controller inventory, plus the blank and edit templates, the change
history of a controller and field-name introspection used by clients to build
search forms.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from asset_inventory.core.database.entities.storage_controllers import StorageController
from asset_inventory.core.errors import RecordNotFoundError
from asset_inventory.core.logging_config import get_logger
from asset_inventory.core.models.io.storage_controllers import (
    FieldNamesRead,
    SearchFormRead,
    StorageControllerCreate,
    StorageControllerRead,
    StorageControllerSearchItem,
    StorageControllerSearchResponse,
    StorageControllerTemplate,
    StorageControllerUpdate,
    StorageControllerVersionRead,
)
from asset_inventory.core.search import OPERATORS, Search, searchable_fields
from asset_inventory.server.core.config import Settings, get_settings
from asset_inventory.server.core.security import ReadAuthDep, WriteAuthDep
from asset_inventory.server.deps import (
    ControllerId,
    LockedStorageControllerDep,
    SessionDep,
    StorageControllerDep,
    StorageControllerRepositoryDep,
    VersionRepositoryDep,
)

logger = get_logger(__name__)

router = APIRouter(tags=["storage-controllers"])

VERSIONS_INCLUDE = "versions"
SEARCH_INCLUDES = (VERSIONS_INCLUDE,)


@router.get(
    "",
    response_model=StorageControllerSearchResponse,
    summary="List and Search Storage Controllers",
    description="Retrieve storage controllers matching the query-string search parameters. "
    "Parameters that cannot be applied are reported in `errors` instead of failing the request.",
    response_description="A page of matching storage controllers.",
    responses={
        200: {"description": "Search executed"},
    },
)
async def list_storage_controllers(
    auth: ReadAuthDep,
    request: Request,
    session: SessionDep,
    versions_repository: VersionRepositoryDep,
    config: Settings = Depends(get_settings),
) -> StorageControllerSearchResponse:
    """
    List storage controllers.

    Supported parameters, repeated values of one key are OR-ed:

    - **<field>**: Case-insensitive substring match (equality for numbers and booleans).
    - **exact_<field>**: Equality.
    - **regex_<field>**: Regular expression match on text fields.
    - **exclude_<field>**: Drop rows whose field contains the value.
    - **greater_than_<field>** / **less_than_<field>**: Ordered comparison.
    - **sort**: Field to sort by, prefix with `-` for descending (default `name`).
    - **limit** / **offset**: Pagination.
    - **include**: `versions` embeds each controller's change history.
    """
    search = Search(
        StorageController,
        request.query_params.multi_items(),
        default_sort="name",
        default_limit=config.default_page_size,
        max_limit=config.max_page_size,
        allowed_includes=SEARCH_INCLUDES,
    )
    result = await search.search(session)
    if result.errors:
        logger.info(f"Storage controller search ignored parameters: {result.errors}")

    items = [StorageControllerSearchItem.model_validate(controller) for controller in result.results]
    if VERSIONS_INCLUDE in result.requested_includes:
        history = await versions_repository.list_for_controllers(item.id for item in items)
        for item in items:
            item.versions = [StorageControllerVersionRead.model_validate(v) for v in history.get(item.id, [])]

    return StorageControllerSearchResponse(
        results=items,
        total=result.total,
        limit=result.limit,
        offset=result.offset,
        errors=result.errors,
        includes=result.requested_includes,
    )


@router.get(
    "/new",
    response_model=StorageControllerTemplate,
    summary="New Storage Controller Template",
    description="Retrieve a blank storage controller populated with default values, for building creation forms.",
)
async def new_storage_controller(
    auth: ReadAuthDep,
) -> StorageControllerTemplate:
    """Return a blank storage controller with every field at its default."""
    return StorageControllerTemplate()


@router.get(
    "/field_names",
    response_model=FieldNamesRead,
    summary="Storage Controller Field Names",
    description="List the column names of the storage controller table in declaration order.",
)
async def storage_controller_field_names(
    auth: ReadAuthDep,
) -> FieldNamesRead:
    """Return the storage controller column names."""
    return FieldNamesRead(field_names=StorageController.field_names())


@router.get(
    "/search",
    response_model=SearchFormRead,
    summary="Storage Controller Search Form",
    description="Retrieve the searchable fields, operators and includes together with an example record.",
)
async def storage_controller_search_form(
    auth: ReadAuthDep,
    repository: StorageControllerRepositoryDep,
) -> SearchFormRead:
    """
    Bootstrap a search form.

    The example is the first stored controller, or null on an empty inventory.
    """
    example = await repository.first()
    return SearchFormRead(
        fields=searchable_fields(StorageController),
        operators=list(OPERATORS),
        includes=list(SEARCH_INCLUDES),
        example=StorageControllerRead.model_validate(example) if example else None,
    )


@router.post(
    "",
    response_model=StorageControllerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Storage Controller",
    description="Create a new storage controller. The creation is recorded as version 1 of its history.",
    response_description="The created storage controller with its generated ID.",
    responses={
        201: {"description": "Storage controller created successfully"},
        422: {"description": "Invalid storage controller data"},
    },
)
async def create_storage_controller(
    auth: WriteAuthDep,
    payload: StorageControllerCreate,
    request: Request,
    response: Response,
    repository: StorageControllerRepositoryDep,
) -> StorageControllerRead:
    """
    Create a storage controller.

    - **name**: Controller name, required.
    - **node_name**: Inventoried node the controller is installed in.
    - **physical_drive_count**: Number of attached drives (default 0).
    - **battery_backed**: Whether the cache is protected (default false).
    """
    controller = StorageController(**payload.model_dump())
    controller = await repository.create(controller, actor=auth.actor)
    response.headers["Location"] = str(request.url_for("show_storage_controller", controller_id=controller.id))
    return StorageControllerRead.model_validate(controller)


@router.get(
    "/{controller_id}",
    response_model=StorageControllerRead,
    summary="Get Storage Controller",
    description="Retrieve a storage controller by its unique identifier.",
    responses={
        200: {"description": "Storage controller found"},
        404: {"description": "Storage controller not found"},
    },
)
async def show_storage_controller(
    auth: ReadAuthDep,
    controller: StorageControllerDep,
) -> StorageControllerRead:
    """Return one storage controller."""
    return StorageControllerRead.model_validate(controller)


@router.get(
    "/{controller_id}/edit",
    response_model=StorageControllerRead,
    summary="Edit Storage Controller Template",
    description="Retrieve the current values of a storage controller for building edit forms.",
    responses={
        200: {"description": "Storage controller found"},
        404: {"description": "Storage controller not found"},
    },
)
async def edit_storage_controller(
    auth: WriteAuthDep,
    controller: StorageControllerDep,
) -> StorageControllerRead:
    """Return the storage controller as the starting point of an edit."""
    return StorageControllerRead.model_validate(controller)


@router.get(
    "/{controller_id}/version_history",
    response_model=List[StorageControllerVersionRead],
    summary="Storage Controller Version History",
    description="Retrieve every recorded change of a storage controller, oldest first. "
    "History stays available after the controller is deleted.",
    responses={
        200: {"description": "History retrieved"},
        404: {"description": "No storage controller with this ID ever existed"},
    },
)
async def storage_controller_version_history(
    auth: ReadAuthDep,
    controller_id: ControllerId,
    repository: StorageControllerRepositoryDep,
    versions_repository: VersionRepositoryDep,
) -> List[StorageControllerVersionRead]:
    """Return the change history of a storage controller."""
    versions = await versions_repository.list_for_controller(controller_id)
    if not versions and await repository.get_by_id(controller_id) is None:
        raise RecordNotFoundError("StorageController", controller_id)
    return [StorageControllerVersionRead.model_validate(version) for version in versions]


@router.put(
    "/{controller_id}",
    response_model=StorageControllerRead,
    summary="Update Storage Controller",
    description="Update an existing storage controller. Only provided fields are changed.",
    responses={
        200: {"description": "Storage controller updated successfully"},
        404: {"description": "Storage controller not found"},
        422: {"description": "Invalid storage controller data"},
    },
)
@router.patch(
    "/{controller_id}",
    response_model=StorageControllerRead,
    summary="Partially Update Storage Controller",
    description="Alias of PUT; only provided fields are changed.",
    responses={
        200: {"description": "Storage controller updated successfully"},
        404: {"description": "Storage controller not found"},
        422: {"description": "Invalid storage controller data"},
    },
)
async def update_storage_controller(
    auth: WriteAuthDep,
    payload: StorageControllerUpdate,
    controller: LockedStorageControllerDep,
    repository: StorageControllerRepositoryDep,
) -> StorageControllerRead:
    """
    Update a storage controller.

    Fields absent from the body keep their value. Changed fields are recorded
    as a new version; a request that changes nothing records nothing.
    """
    changes = payload.model_dump(exclude_unset=True)
    controller = await repository.update(controller, changes, actor=auth.actor)
    return StorageControllerRead.model_validate(controller)


@router.delete(
    "/{controller_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Storage Controller",
    description="Permanently delete a storage controller. Its history is kept.",
    responses={
        204: {"description": "Storage controller deleted successfully"},
        404: {"description": "Storage controller not found"},
    },
)
async def delete_storage_controller(
    auth: WriteAuthDep,
    controller: LockedStorageControllerDep,
    repository: StorageControllerRepositoryDep,
) -> None:
    """Delete a storage controller, recording its final state in the history."""
    await repository.delete(controller.id, actor=auth.actor)
