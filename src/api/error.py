from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class NotAuthenticatedError(ClientError):
    """No valid session. The response never says whether the token was
    unknown, expired or revoked."""

    def __init__(self):
        super().__init__(
            Error("NOT_AUTHENTICATED", "Not authenticated"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)
