"""Runtime settings, read from the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

_PREFIX = "EVENT_MANAGER_"


class Settings(BaseModel):
    # bounds how many days a single /events query may scan
    max_window_days: int = Field(default=3660, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        values = {}
        for name in cls.model_fields:
            raw = os.environ.get(_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls(**values)
