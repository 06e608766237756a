"""Encode and decode pipelines.

encode: plaintext -> AES-256-GCM payload -> RGBA PNG
decode: image -> payload -> plaintext

The Orchestrator is strictly sequential. It asks the injected passphrase
provider once per operation and owns at most one generated image at a time.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .crypto import CryptoProvider
from .embedder import embed_payload, extract_payload, payload_dimensions
from .errors import (
    ArtifactIOError,
    AuthenticationError,
    BusyError,
    DecodeError,
    EncodeError,
    InputError,
)
from .image_utils import ImageSource, RasterSurface

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_NAME = "encrypted_text.png"
DEFAULT_TEXT_NAME = "decrypted_text.txt"

# Takes a prompt, returns the passphrase or None when the user cancels.
PassphraseProvider = Callable[[str], Optional[str]]


class OrchestratorState(enum.Enum):
    IDLE = "idle"
    ENCODING = "encoding"
    DECODING = "decoding"


@dataclass
class GeneratedImage:
    """A PNG produced by the encode pipeline, held in a temporary file until released."""

    path: str
    width: int
    height: int
    payload_length: int
    released: bool = field(default=False)

    def read_bytes(self) -> bytes:
        self._check_alive()
        with open(self.path, "rb") as f:
            return f.read()

    def save(self, dest: Union[str, "os.PathLike[str]"]) -> str:
        self._check_alive()
        try:
            shutil.copyfile(self.path, dest)
        except OSError as e:
            raise ArtifactIOError(f"Could not save image: {e}") from e
        return os.fspath(dest)

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        logger.debug("Released generated image %s", self.path)

    def _check_alive(self) -> None:
        if self.released:
            raise ArtifactIOError("Generated image has already been released")


def read_text_file(path: Union[str, "os.PathLike[str]"]) -> bytes:
    """Read the full contents of a plaintext file as bytes."""
    if not path:
        raise InputError("Please select a text file to encode.")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ArtifactIOError(f"Error reading file: {e.strerror or e}") from e
    if not data:
        raise InputError("The selected text file is empty.")
    return data


def write_text_file(path: Union[str, "os.PathLike[str]"], text: Union[str, bytes]) -> None:
    data = text.encode("utf-8") if isinstance(text, str) else text
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ArtifactIOError(f"Error writing file: {e.strerror or e}") from e


def decode_text(plaintext: bytes) -> str:
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError:
        return plaintext.decode("utf-8", errors="replace")


class Orchestrator:
    def __init__(
        self,
        passphrase_provider: PassphraseProvider,
        crypto: Optional[CryptoProvider] = None,
        surface: Optional[RasterSurface] = None,
    ):
        self.passphrase_provider = passphrase_provider
        self.crypto = crypto or CryptoProvider()
        self.surface = surface or RasterSurface()
        self.state = OrchestratorState.IDLE
        self.current_image: Optional[GeneratedImage] = None

    def __enter__(self) -> "Orchestrator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._release_image()

    def encode(self, plaintext: Union[str, bytes]) -> GeneratedImage:
        """Encrypt plaintext under a prompted passphrase and render it as a PNG."""
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        self._enter(OrchestratorState.ENCODING)
        try:
            if not plaintext:
                raise InputError("Please enter text to encode.")
            passphrase = self._ask("Enter PIN for encryption:", "Encryption cancelled: PIN is required.")
            self._release_image()
            try:
                key = self.crypto.derive_key(passphrase)
                payload = self.crypto.encrypt(plaintext, key)
                width, height = payload_dimensions(len(payload))
                pixels = embed_payload(payload, out=self.surface.allocate(width, height))
                png = self.surface.to_png(pixels)
                path = self._write_temp(png)
            except Exception as e:
                logger.error("Encoding failed: %s: %s", type(e).__name__, e)
                raise EncodeError() from e
            self.current_image = GeneratedImage(path, width, height, len(payload))
            logger.info("Encoded %d plaintext bytes into a %dx%d image", len(plaintext), width, height)
            return self.current_image
        finally:
            self.state = OrchestratorState.IDLE

    def decode(self, image: ImageSource) -> bytes:
        """Recover the plaintext hidden in `image` using a prompted passphrase."""
        self._enter(OrchestratorState.DECODING)
        try:
            if image is None:
                raise InputError("Please select an image to decode.")
            passphrase = self._ask("Enter PIN to decrypt the text:", "Decryption cancelled: PIN is required.")
            pixels = self.surface.load(image)
            self._release_image()
            try:
                payload = extract_payload(pixels)
            except ValueError as e:
                raise ArtifactIOError(f"Could not read pixel data: {e}") from e
            try:
                key = self.crypto.derive_key(passphrase)
                plaintext = self.crypto.decrypt(payload, key)
            except AuthenticationError as e:
                logger.warning("Authentication failed for a %d byte payload", len(payload))
                raise DecodeError() from e
            logger.info("Decoded %d plaintext bytes from a %d byte payload", len(plaintext), len(payload))
            return plaintext
        finally:
            self.state = OrchestratorState.IDLE

    def _enter(self, state: OrchestratorState) -> None:
        if self.state is not OrchestratorState.IDLE:
            raise BusyError(f"Cannot start {state.value} while {self.state.value}")
        self.state = state

    def _ask(self, prompt: str, cancelled: str) -> str:
        passphrase = self.passphrase_provider(prompt)
        if not passphrase:
            logger.info("Passphrase prompt cancelled")
            raise InputError(cancelled)
        return passphrase

    def _release_image(self) -> None:
        if self.current_image is not None:
            self.current_image.release()
            self.current_image = None

    @staticmethod
    def _write_temp(png: bytes) -> str:
        fd, path = tempfile.mkstemp(prefix="pixel-cipher-", suffix=".png")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(png)
        except OSError:
            os.remove(path)
            raise
        return path
