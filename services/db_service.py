# services/db_service.py

from pymongo import MongoClient
from config.settings import settings

_client = None

def get_db():
    """
    Return the application database handle.

    MongoClient connects lazily, so building it here does not touch the
    network until the first query.
    """
    global _client
    if _client is None:
        _client = MongoClient(settings.MONGODB_URI)
    return _client[settings.DB_NAME]
