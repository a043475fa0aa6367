from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base shared by every model.

    Importing app.models.activity / participation / message / user registers
    their tables on Base.metadata (used by Alembic autogenerate and tests).
    """

    pass
