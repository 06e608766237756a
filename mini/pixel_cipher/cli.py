from __future__ import annotations

import logging
from typing import Optional

import click

from .embedder import extract_payload
from .errors import PixelCipherError
from .image_utils import load_image_rgba
from .orchestrator import (
    DEFAULT_IMAGE_NAME,
    Orchestrator,
    decode_text,
    read_text_file,
    write_text_file,
)

PASSWORD_ENVVAR = "PIXEL_CIPHER_PASSWORD"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging; secrets and plaintext are never logged."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _passphrase_provider(password: Optional[str]):
    def provide(prompt: str) -> Optional[str]:
        if password:
            return password
        try:
            return click.prompt(prompt.rstrip(":"), hide_input=True, default="", show_default=False)
        except click.Abort:
            return None

    return provide


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Pixel-Cipher CLI: encrypt text into a PNG and back."""
    setup_logging(verbose)


@cli.command()
@click.option("--text", "text", help="Text to encrypt (surrounding whitespace is trimmed)")
@click.option("--file", "text_path", type=click.Path(dir_okay=False), help="Plain-text file to encrypt")
@click.option("--out", "out_path", default=DEFAULT_IMAGE_NAME, show_default=True, help="Output PNG")
@click.option("--password", envvar=PASSWORD_ENVVAR, help="PIN for AES-256-GCM encryption (prompted if omitted)")
def encode(text: Optional[str], text_path: Optional[str], out_path: str, password: Optional[str]):
    """Encrypt text and render the ciphertext as a PNG image."""
    if text is not None and text_path:
        raise click.UsageError("Use either --text or --file, not both.")
    try:
        if text_path:
            plaintext = read_text_file(text_path)
        else:
            plaintext = (text or "").strip().encode("utf-8")
        with Orchestrator(_passphrase_provider(password)) as orchestrator:
            image = orchestrator.encode(plaintext)
            image.save(out_path)
    except PixelCipherError as e:
        raise click.ClickException(str(e))
    click.echo(f"Encrypted PNG ({image.width}x{image.height}) saved to: {out_path}")


@cli.command()
@click.option("--in", "in_path", required=True, type=click.Path(dir_okay=False), help="Encrypted PNG")
@click.option("--out", "out_path", help="Write the decrypted text here instead of printing it")
@click.option("--password", envvar=PASSWORD_ENVVAR, help="PIN used at encryption time (prompted if omitted)")
def decode(in_path: str, out_path: Optional[str], password: Optional[str]):
    """Extract and decrypt the text hidden in a PNG image."""
    try:
        with Orchestrator(_passphrase_provider(password)) as orchestrator:
            plaintext = orchestrator.decode(in_path)
        if out_path:
            write_text_file(out_path, plaintext)
    except PixelCipherError as e:
        raise click.ClickException(str(e))
    if out_path:
        click.echo(f"Decrypted text saved to: {out_path}")
    else:
        click.echo(decode_text(plaintext))


@cli.command()
@click.option("--in", "in_path", required=True, type=click.Path(dir_okay=False), help="Encrypted PNG")
def info(in_path: str):
    """Show image dimensions and the length of the embedded payload."""
    try:
        pixels = load_image_rgba(in_path)
    except PixelCipherError as e:
        raise click.ClickException(str(e))
    height, width = pixels.shape[:2]
    click.echo(f"Image: {width}x{height}")
    click.echo(f"Payload: {len(extract_payload(pixels))} bytes")


if __name__ == "__main__":
    cli()
