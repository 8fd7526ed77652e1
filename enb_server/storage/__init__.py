from ._schema import SCHEMA_VERSION, SCHEMA_SQL
from ._tx import Transactor
from .accounts import AccountRepo, RANKABLE_COLUMNS
from .invitations import InvitationRepo
from .transactions import TransactionRepo, insert_transaction
from .manager import StorageManager

__all__ = [
    "SCHEMA_VERSION",
    "SCHEMA_SQL",
    "Transactor",
    "AccountRepo",
    "RANKABLE_COLUMNS",
    "InvitationRepo",
    "TransactionRepo",
    "insert_transaction",
    "StorageManager",
]
