# hub/routers/settings.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from hub.database import get_db
from hub.models import AppSetting, CURRENCY_RATES_KEY, User
from hub.schemas.settings import CurrencyRatesIn, SettingsRead, SettingUpdate
from hub.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=SettingsRead)
def read_settings(response: Response, db: Session = Depends(get_db)):
    # Rates change during the day; clients must not cache them
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    rows = db.query(AppSetting).order_by(AppSetting.key).all()
    return {"settings": {row.key: row.value for row in rows}}


@router.put("/")
def update_setting(
    setting_in: SettingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    key = setting_in.key.strip()
    if not key or setting_in.value is None:
        raise HTTPException(status_code=400, detail="key and value are required")

    value = setting_in.value
    if key == CURRENCY_RATES_KEY:
        if not isinstance(value, dict):
            raise HTTPException(status_code=400, detail="currency_rates must be an object")
        try:
            value = CurrencyRatesIn(**value).model_dump()
        except ValidationError:
            raise HTTPException(status_code=400, detail="Exchange rates must be non-negative numbers")

    row = db.query(AppSetting).filter(AppSetting.key == key).first()
    if row:
        row.value = value
        row.updated_by = current_user.id
    else:
        db.add(AppSetting(key=key, value=value, updated_by=current_user.id))

    db.commit()
    logger.info("Setting '%s' updated by %s: %s", key, current_user.username, value)
    return {"success": True}
