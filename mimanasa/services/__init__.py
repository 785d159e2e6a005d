from mimanasa.services.http_client import create_http_client
from mimanasa.services.library_api import APIError, LibraryAPI, NetworkError

__all__ = ["APIError", "LibraryAPI", "NetworkError", "create_http_client"]
