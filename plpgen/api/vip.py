# plpgen/api/vip.py
"""
VIP list routes.

Reads are public; writes need the X-Admin-Code header.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from plpgen.core.config import settings
from plpgen.db import get_store
from plpgen.lib.vip_store import VipStore
from plpgen.models.vip import VipList, VipUser

router = APIRouter(prefix="/vip", tags=["VIP"])


def get_vip_store() -> VipStore:
    return VipStore(get_store())


def require_admin(x_admin_code: Optional[str] = Header(None)) -> None:
    """An unset ADMIN_CODE locks writes entirely."""
    if not settings.admin_code or x_admin_code != settings.admin_code:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin code")


@router.get("", response_model=VipList)
async def list_vip(store: VipStore = Depends(get_vip_store)):
    """List all VIP users."""
    return await store.load()


@router.get("/{user_id}", response_model=VipUser)
async def get_vip(user_id: str, store: VipStore = Depends(get_vip_store)):
    """Get one VIP user."""
    user = await store.get(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post(
    "",
    response_model=VipList,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def add_vip(user: VipUser, store: VipStore = Depends(get_vip_store)):
    """Add a VIP user; ids are unique."""
    data = await store.add(user)
    if data is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User id already exists")
    return data


@router.delete("/{user_id}", response_model=VipList, dependencies=[Depends(require_admin)])
async def delete_vip(user_id: str, store: VipStore = Depends(get_vip_store)):
    """Remove a VIP user."""
    data = await store.remove(user_id)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return data
