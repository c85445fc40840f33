"""Database initialization script."""

from src.catalog.core.services import DbManageService, DbSessionService


def init_db(drop: bool = False) -> None:
    """Create all database tables, optionally dropping them first."""
    database_service = DbSessionService()
    manage = DbManageService(database_service.engine)
    if drop:
        manage.drop_all()
    manage.create_all()
    database_service.dispose()


if __name__ == "__main__":
    init_db()
