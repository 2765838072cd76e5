from hub.core.config import get_settings
from hub.core.enums import UserRole
from hub.database import SessionLocal, engine
# Everything comes through hub.models so every table is registered on Base
from hub.models import Base, User, AppSetting, CURRENCY_RATES_KEY
from hub.security import get_password_hash


def init_db():
    settings = get_settings()

    print("--- Creating tables ---")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("--- Seeding ---")

        # 1. ADMIN USER
        username = settings.seed_admin_username.lower().strip()
        if not db.query(User).filter(User.username == username).first():
            db.add(User(
                username=username,
                display_name=username.capitalize(),
                password_hash=get_password_hash(settings.seed_admin_password),
                role=UserRole.ADMIN,
                is_active=True,
            ))
            print(f"Admin user '{username}' created.")

        # 2. CURRENCY RATES (0 = not set yet, foreign prices show as unavailable)
        if not db.query(AppSetting).filter(AppSetting.key == CURRENCY_RATES_KEY).first():
            db.add(AppSetting(key=CURRENCY_RATES_KEY, value={"usd_try": 0, "eur_try": 0}))
            print("Default currency_rates setting created.")

        db.commit()
    finally:
        db.close()

    print("--- Done ---")


if __name__ == "__main__":
    init_db()
