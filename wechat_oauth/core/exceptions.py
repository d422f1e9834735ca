"""Shared exceptions module."""

from typing import Optional


class WeChatOAuthException(Exception):
    """Base exception for the WeChat OAuth client."""

    def __init__(self, message: Optional[str] = "WeChat OAuth request failed"):
        """Create a new WeChatOAuthException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class ConfigurationError(WeChatOAuthException):
    """Exception raised when the client id or secret is missing."""

    def __init__(self, message: Optional[str] = "WeChat client is not configured"):
        """Create a new ConfigurationError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class MissingCodeError(WeChatOAuthException):
    """Exception raised when no authorization code is available for an exchange."""

    def __init__(self, message: Optional[str] = "Missing required key `code`"):
        """Create a new MissingCodeError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class TransportError(WeChatOAuthException):
    """Exception raised when a request to WeChat fails at the network level."""

    def __init__(self, url: str, message: Optional[str] = "Request to WeChat failed"):
        """Create a new TransportError instance.

        Args:
        ----
            url (str): The URL that was requested.
            message (str, optional): The error message. Has default message.

        """
        self.url = url
        super().__init__(f"{message} ({url})")


class DecodeError(WeChatOAuthException):
    """Exception raised when a WeChat response cannot be decoded into a payload."""

    def __init__(
        self,
        message: Optional[str] = "Could not decode WeChat response",
        body: Optional[str] = None,
    ):
        """Create a new DecodeError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.
            body (str, optional): The raw response body, if any.

        """
        self.body = body
        super().__init__(message)


class ProviderError(WeChatOAuthException):
    """Exception raised when WeChat answers with an error status or errcode."""

    def __init__(
        self,
        message: Optional[str] = "WeChat returned an error",
        status_code: Optional[int] = None,
        errcode: Optional[int] = None,
        errmsg: Optional[str] = None,
    ):
        """Create a new ProviderError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.
            status_code (int, optional): HTTP status of the response.
            errcode (int, optional): WeChat ``errcode`` from the response body.
            errmsg (str, optional): WeChat ``errmsg`` from the response body.

        """
        self.status_code = status_code
        self.errcode = errcode
        self.errmsg = errmsg
        super().__init__(message)
