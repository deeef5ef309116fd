"""
Custom Exceptions for KHW Console
"""


class KHWException(Exception):
    """Base exception for all KHW console errors"""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# Backend API Exceptions
class ApiError(KHWException):
    """Backend API call failed"""

    pass


class ApiResponseError(ApiError):
    """Backend answered with an error envelope (success=false)"""

    pass


class ApiTransportError(ApiError):
    """Request never produced a usable response (network/HTTP/parse error)"""

    pass


# Compare Exceptions
class VersionFetchFailedError(KHWException):
    """One or both manual versions could not be loaded"""

    pass
