from typing import Any, Dict

from pydantic import BaseModel, Field


class SettingUpdate(BaseModel):
    key: str = Field(..., min_length=1)
    value: Any


class CurrencyRatesIn(BaseModel):
    usd_try: float = Field(0, ge=0)
    eur_try: float = Field(0, ge=0)


class SettingsRead(BaseModel):
    settings: Dict[str, Any]
