from __future__ import annotations


class PixelCipherError(Exception):
    """Base exception for pixel-cipher errors"""


class InputError(PixelCipherError, ValueError):
    """Raised when plaintext, file selection or passphrase is missing"""


class ArtifactIOError(PixelCipherError, OSError):
    """Raised when a text file or image cannot be read or written"""


class AuthenticationError(PixelCipherError):
    """Raised when authentication fails (wrong passphrase or corrupted data)"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class EncodeError(PixelCipherError):
    def __init__(self, message: str = "Could not encrypt and encode the text."):
        super().__init__(message)


class DecodeError(PixelCipherError):
    def __init__(self, message: str = "Could not decode the image. Check the PIN and the image file."):
        super().__init__(message)


class BusyError(PixelCipherError):
    """Raised when an operation is started while another one is in flight"""
