from cardboard.db.models.account import Account, AuthSession
from cardboard.db.models.board import Board
from cardboard.db.models.category import Category
from cardboard.db.models.card import Card
from cardboard.db.models.storage_object import StorageObject

__all__ = ["Account", "AuthSession", "Board", "Category", "Card", "StorageObject"]
