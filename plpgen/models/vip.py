from typing import List

from pydantic import BaseModel, Field, field_validator


class VipUser(BaseModel):
    id: str = Field(min_length=1)
    month: str = Field(min_length=1)
    start_date: str = Field(min_length=1)

    @field_validator("id", "month", "start_date", mode="before")
    @classmethod
    def _coerce_to_str(cls, value):
        # Clients send numeric ids/months as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class VipList(BaseModel):
    vip_users: List[VipUser] = Field(default_factory=list)
