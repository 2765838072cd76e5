from sqlalchemy.orm import Session
from sqlalchemy import func


def get_next_sale_number(db: Session, model) -> int:
    """
    Next sequential sale number for a sales table (RetailSale or B2BSale).
    MAX(sale_number) + 1, starting at 1 on an empty table.
    """
    max_number = db.query(func.max(model.sale_number)).scalar()

    if max_number is None:
        return 1
    return max_number + 1
