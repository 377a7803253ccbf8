# ------------------------------ IMPORTS ------------------------------
from .connection import get_db, init_db, drop_db, transaction, engine, Base, SessionLocal

__all__ = ["get_db", "init_db", "drop_db", "transaction", "engine", "Base", "SessionLocal"]
