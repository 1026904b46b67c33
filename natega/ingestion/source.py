"""Tabular record source for ingestion — local CSV path or http(s) URL.

Each row must expose seating_no, arabic_name and total_degree columns.
Structured CSV input is parsed directly with the csv module.
"""

import csv
import io
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

SEATING_NO = "seating_no"
ARABIC_NAME = "arabic_name"
TOTAL_DEGREE = "total_degree"

REQUIRED_COLUMNS = (SEATING_NO, ARABIC_NAME, TOTAL_DEGREE)


class SourceUnavailableError(RuntimeError):
    """The ingestion source could not be read or is not a student table."""


@dataclass(frozen=True)
class SourceRow:
    """One data row with its physical line number in the source."""

    line_number: int
    fields: Mapping[str, str | None]


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


async def fetch_source_text(
    location: str,
    *,
    timeout: float = 60.0,
    encoding: str = "utf-8-sig",
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Read the whole source as text.

    Raises:
        SourceUnavailableError: On missing files, HTTP failures or
            undecodable content.
    """
    if is_remote(location):
        try:
            async with httpx.AsyncClient(
                timeout=timeout, follow_redirects=True, transport=transport,
            ) as client:
                response = await client.get(location)
                response.raise_for_status()
                content = response.content
        except httpx.HTTPError as exc:
            msg = f"could not fetch {location}: {exc}"
            raise SourceUnavailableError(msg) from exc
    else:
        try:
            content = Path(location).read_bytes()
        except OSError as exc:
            msg = f"could not read {location}: {exc}"
            raise SourceUnavailableError(msg) from exc

    try:
        text = content.decode(encoding)
    except UnicodeDecodeError as exc:
        msg = f"{location} is not valid {encoding} text."
        raise SourceUnavailableError(msg) from exc

    logger.info("Loaded source %s (%d bytes)", location, len(content))
    return text


def iter_rows(text: str) -> Iterator[SourceRow]:
    """Yield data rows in source order.

    Header names are matched after stripping surrounding whitespace.

    Raises:
        SourceUnavailableError: If a required column is missing.
    """
    reader = csv.DictReader(io.StringIO(text, newline=""))
    header = [name.strip() for name in (reader.fieldnames or [])]
    missing = [col for col in REQUIRED_COLUMNS if col not in header]
    if missing:
        msg = f"source is missing required columns: {', '.join(missing)}."
        raise SourceUnavailableError(msg)
    reader.fieldnames = header

    for fields in reader:
        yield SourceRow(line_number=reader.line_num, fields=fields)
