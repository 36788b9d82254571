import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import requests

from . import settings

logger = logging.getLogger(__name__)

Location = str | Path


class SourceUnavailableError(Exception):
    """A source file could not be fetched or read. No retry is attempted."""

    def __init__(self, location: Location, reason: str):
        self.location = str(location)
        self.reason = reason
        super().__init__(f"Source unavailable: {self.location} ({reason})")


def _is_url(location: Location) -> bool:
    return str(location).startswith(("http://", "https://"))


def resolve_location(location: Location) -> Location:
    """URLs and absolute paths are used as-is; bare names resolve under INPUT_DIR."""
    if _is_url(location):
        return str(location)
    path = Path(location)
    return path if path.is_absolute() else settings.INPUT_DIR / path


def _decode(content: bytes, name: str) -> str:
    """
    Decodes raw bytes with an encoding fallback:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can decode any byte sequence.
    """
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info(f"INFO: UTF-8 decoding failed for {name}. Retrying with 'latin-1'.")
        return content.decode("latin-1")


def load_source_text(location: Location) -> str:
    """
    Reads one source as text from a local path or an http(s) URL.
    Raises SourceUnavailableError on any acquisition failure.
    """
    resolved = resolve_location(location)

    if _is_url(resolved):
        try:
            response = requests.get(str(resolved), timeout=settings.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise SourceUnavailableError(resolved, str(e)) from e
        return _decode(response.content, str(resolved))

    path = Path(resolved)
    try:
        content = path.read_bytes()
    except FileNotFoundError as e:
        raise SourceUnavailableError(path, "file not found") from e
    except OSError as e:
        raise SourceUnavailableError(path, str(e)) from e
    return _decode(content, path.name)


def fetch_sources(locations: dict[str, Location | None]) -> dict[str, str | None]:
    """
    Fetches several sources concurrently and waits for all of them.
    Each key maps to the source text, or None when the source is not
    configured or could not be read; the caller decides whether that is fatal.
    """
    texts: dict[str, str | None] = {key: None for key in locations}
    pending = {key: loc for key, loc in locations.items() if loc}

    for key in locations.keys() - pending.keys():
        logger.info(f"  > INFO: No location configured for '{key}'.")

    if not pending:
        return texts

    with ThreadPoolExecutor(max_workers=len(pending)) as executor:
        futures = {
            key: executor.submit(load_source_text, loc) for key, loc in pending.items()
        }
        for key, future in futures.items():
            try:
                texts[key] = future.result()
                logger.info(f"  > Loaded '{key}': {pending[key]}")
            except SourceUnavailableError as e:
                logger.warning(f"  > ⚠️  Could not load '{key}': {e}")

    return texts
