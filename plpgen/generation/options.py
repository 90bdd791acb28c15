# plpgen/generation/options.py
"""
Options for one generation batch.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NameMode = Literal["random", "fixed"]

MAX_UNIT_COUNT = 200
DEFAULT_TEXT2 = "15/11/2025"
DEFAULT_LAST_NAME = "Ahmed"


class GenerationOptions(BaseModel):
    """Validated by whoever collects them; immutable once a batch starts."""
    model_config = ConfigDict(frozen=True)

    count: int = Field(10, ge=1, le=MAX_UNIT_COUNT)
    first_mode: NameMode = "random"
    fixed_first: str = ""
    last_mode: NameMode = "random"
    fixed_last: str = DEFAULT_LAST_NAME
    text2: str = DEFAULT_TEXT2
