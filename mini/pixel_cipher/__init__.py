"""Pixel-Cipher package: AES-256-GCM encrypted text stored as PNG pixels.

Modules:
- crypto: PBKDF2-HMAC-SHA256 key derivation and AES-256-GCM encryption/decryption
- embedder: one payload byte per pixel in the red channel, zero-terminated
- image_utils: RGBA PNG load/save via Pillow
- orchestrator: encode/decode pipelines, passphrase prompting, image lifecycle
- errors: exception hierarchy
- cli: command-line interface (encode/decode/info)
- gui: Tkinter desktop front end
"""

__version__ = "1.0.0"

__all__ = [
    "crypto",
    "embedder",
    "errors",
    "image_utils",
    "orchestrator",
]
