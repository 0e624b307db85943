"""
Initializes the shared storage instance used across the API.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
