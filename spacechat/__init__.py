from spacechat.models import Base


def init_db(engine=None):
    """Create tables (simple dev mode)."""
    if engine is None:
        from spacechat.db import engine
    Base.metadata.create_all(bind=engine)
