from sqlalchemy.orm import Session

from hub.models import User


def get_user_by_username(db: Session, username: str):
    """Usernames are stored lower-cased."""
    return db.query(User).filter(User.username == username.lower().strip()).first()
