from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BeforeValidator

from hub.services.pricing import to_number


def _blank_to_none(val):
    if isinstance(val, str):
        val = val.strip()
        return val or None
    return val


# Numbers coming from forms: invalid or missing values become 0 instead of a 422
LooseDecimal = Annotated[Decimal, BeforeValidator(lambda v: to_number(v))]

# Strings trimmed, empty strings stored as NULL
TrimmedStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
