from fastapi import status

from bastion.libs.result import Error

UNAUTHORIZED = Error("UNAUTHORIZED", "Authentication required")


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def unauthorized() -> ClientError:
    """Every credential and token failure looks the same to the caller"""
    return ClientError(UNAUTHORIZED, status_code=status.HTTP_401_UNAUTHORIZED)
