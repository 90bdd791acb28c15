from .vip import VipList, VipUser

__all__ = ["VipList", "VipUser"]
