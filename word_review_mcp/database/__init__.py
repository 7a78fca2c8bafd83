from .connection import get_connection, init_database, open_database, set_db_path
from .schema import add_missing_columns, create_tables

__all__ = [
    "get_connection",
    "init_database",
    "open_database",
    "set_db_path",
    "add_missing_columns",
    "create_tables",
]
