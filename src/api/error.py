from typing import Dict

from fastapi import status
from src.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def to_http_error(error: Error, status_by_code: Dict[str, int]) -> Exception:
    """ClientError for the codes a route expects, ServerError for anything else"""
    status_code = status_by_code.get(error.code)
    if status_code is None:
        return ServerError(error)
    return ClientError(error, status_code=status_code)
