# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: member CRUD, hierarchy tree, search, cascading delete."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from member_service.core.dependencies import get_member_service
from member_service.core.errors import ConflictError, NotFoundError, ValidationError
from member_service.schemas import (
    CascadeResult, MemberCreate, MemberOut, MemberUpdate, SearchResult,
)
from member_service.services.member_service import MemberService

router = APIRouter(prefix="/api/v1", tags=["Members"])


@router.post("/members", status_code=201, response_model=MemberOut)
async def create_member(body: MemberCreate,
                        service: MemberService = Depends(get_member_service)):
    try:
        result = await service.create_member(
            name=body.name, phone=body.phone, email=body.email,
            address=body.address, upline_id=body.upline_id,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.message)
    return MemberOut(**result)


@router.put("/members/{member_id}", response_model=MemberOut)
async def update_member(member_id: int, body: MemberUpdate,
                        service: MemberService = Depends(get_member_service)):
    try:
        result = await service.update_member(member_id, body.changes())
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    return MemberOut(**result)


@router.get("/members/tree")
async def get_tree(service: MemberService = Depends(get_member_service)):
    try:
        return await service.get_tree()
    except NotFoundError as exc:
        # a member vanished mid-build; partial trees are never returned
        raise HTTPException(status_code=404, detail=f"Hierarchy changed during build: {exc.message}")


@router.get("/members", response_model=List[SearchResult])
async def search_members(q: str = Query(default="", max_length=255),
                         service: MemberService = Depends(get_member_service)):
    return await service.search(q)


@router.delete("/members/cascade/{member_id}", response_model=CascadeResult)
async def delete_member_cascade(member_id: int,
                                service: MemberService = Depends(get_member_service)):
    try:
        return await service.delete_member_cascade(member_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except ConflictError as exc:
        # a downline was attached under the subtree while it was being removed
        raise HTTPException(status_code=409, detail=exc.message)


@router.delete("/members/{member_id}", response_model=MemberOut)
async def delete_member(member_id: int,
                        service: MemberService = Depends(get_member_service)):
    try:
        result = await service.delete_member(member_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.message)
    return MemberOut(**result)
