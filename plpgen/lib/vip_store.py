# plpgen/lib/vip_store.py
"""
The VIP list, stored as a single JSON document in the KV store.
"""
from typing import Optional

from pydantic import ValidationError

from plpgen.core.logging import log
from plpgen.lib.kv_store import KeyValueStore
from plpgen.models.vip import VipList, VipUser

DATA_KEY = "vip.json"


class VipStore:

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def load(self) -> VipList:
        """Missing or unreadable documents read as an empty list."""
        raw = await self.store.get(DATA_KEY)
        if not raw:
            return VipList()
        try:
            return VipList.model_validate_json(raw)
        except ValidationError as e:
            log("VIP", f"⚠️ Stored VIP list unreadable, starting empty ({e.error_count()} error(s))")
            return VipList()

    async def save(self, data: VipList) -> None:
        await self.store.put(DATA_KEY, data.model_dump_json(indent=2))

    async def get(self, user_id: str) -> Optional[VipUser]:
        data = await self.load()
        return next((u for u in data.vip_users if u.id == user_id), None)

    async def add(self, user: VipUser) -> Optional[VipList]:
        """Append user; None if the id is already taken."""
        data = await self.load()
        if any(u.id == user.id for u in data.vip_users):
            return None
        data.vip_users.append(user)
        await self.save(data)
        log("VIP", f"Added {user.id}")
        return data

    async def remove(self, user_id: str) -> Optional[VipList]:
        """Remove user_id; None if it was not present."""
        data = await self.load()
        remaining = [u for u in data.vip_users if u.id != user_id]
        if len(remaining) == len(data.vip_users):
            return None
        data.vip_users = remaining
        await self.save(data)
        log("VIP", f"Removed {user_id}")
        return data
