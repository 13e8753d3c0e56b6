from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel
from ..models.files import FileNodeInfo, SizeResult, SortDirection, WriteResult, WriteStatus
from .files import DiskService


class ContentRequest(BaseModel):
    path: str
    contents: str = ""
    append: bool = False


class ContentResponse(BaseModel):
    path: str
    contents: str


def to_http_exception(e: Exception) -> HTTPException:
    """Map a service error to the matching HTTP error."""
    if isinstance(e, FileNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


def make_router(service: DiskService, prefix: str = "/files") -> APIRouter:
    """Make the routes that drive a disk service over HTTP.

    Args:
        service (DiskService): The service to expose.
        prefix (str, optional): The routes prefix. Defaults to "/files".

    Returns:
        APIRouter: The router, to be included in an application.
    """
    router = APIRouter(prefix=prefix)

    @router.get("/tree", response_model=FileNodeInfo)
    async def get_tree(path: str = "", recurse: bool = False,
                       depth: Optional[int] = Query(default=None, ge=0),
                       sort: Optional[SortDirection] = None):
        try:
            return await service.scan(path, recurse=recurse, depth=depth, sort=sort)
        except (OSError, ValueError) as e:
            raise to_http_exception(e)

    @router.get("/size", response_model=SizeResult)
    async def get_size(path: str = ""):
        try:
            return await service.get_size(path)
        except (OSError, ValueError) as e:
            raise to_http_exception(e)

    @router.get("/find", response_model=FileNodeInfo)
    async def find_file(name: str, folder: str = ""):
        try:
            found = await service.find(name, folder)
        except (OSError, ValueError) as e:
            raise to_http_exception(e)
        if found is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"File {name} not found")
        return found

    @router.get("/largest", response_model=List[FileNodeInfo])
    async def get_largest(folder: str = "", limit: int = Query(default=10, ge=1)):
        try:
            return await service.largest(folder, limit=limit)
        except (OSError, ValueError) as e:
            raise to_http_exception(e)

    @router.get("/content", response_model=ContentResponse)
    async def get_content(path: str):
        try:
            contents = await service.read_file(path)
        except (OSError, ValueError) as e:
            raise to_http_exception(e)
        return ContentResponse(path=path, contents=contents)

    @router.put("/content", response_model=WriteResult)
    async def put_content(request: ContentRequest):
        try:
            result = await service.write_file(request.path, request.contents, append=request.append)
        except (OSError, ValueError) as e:
            raise to_http_exception(e)
        if result.status == WriteStatus.BLOCKED:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.detail)
        if result.status == WriteStatus.FAILED:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.detail)
        return result

    @router.delete("", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_path(path: str):
        try:
            deleted = await service.delete(path)
        except ValueError as e:
            raise to_http_exception(e)
        if not deleted:
            if await service.path_exists(path):
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                                    detail=f"Path {path} could not be deleted")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Path {path} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
