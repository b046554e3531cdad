"""
Codegen client
==============

Purpose:
- Send optimized IR to the compilation service (`POST /compile-ir`)
- Normalize the returned assembly
- Map every failure onto CodegenDiagnostic or TransportFailure

One network call per invocation, plus at most one retry when the
transport itself fails. An HTTP 500 is an answer, not a transport
failure, and is never retried.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from irbridge.errors import CodegenDiagnostic, TransportFailure

logger = logging.getLogger(__name__)

COMPILE_PATH = "/compile-ir"
DEFAULT_TIMEOUT = 30.0
MAX_RETRIES = 1


def normalize_assembly(text: str) -> str:
    """
    Fold CRLF / CR line endings into LF.

    The JSON decode in `CodegenClient` is the one and only unescape of the
    wire text; this step never touches backslashes, so applying it twice
    is the same as applying it once.
    """

    return text.replace("\r\n", "\n").replace("\r", "\n")


class CodegenClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = MAX_RETRIES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def compile_ir(self, ir: str) -> str:
        """
        Return target assembly for `ir`.

        Raises:
            CodegenDiagnostic if the service's code generator rejected the IR.
            TransportFailure for anything else that is not a 200/asm answer.
        """

        response = await self._post(ir)
        return self._read(response)

    # -------------------------
    # Transport
    # -------------------------

    async def _post(self, ir: str) -> httpx.Response:
        last_error: Optional[Exception] = None

        for attempt in range(1, self._retries + 2):
            try:
                async with httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                ) as client:
                    return await client.post(COMPILE_PATH, json={"ir": ir})
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "codegen request failed (attempt %d/%d): %s",
                    attempt,
                    self._retries + 1,
                    e.__class__.__name__,
                )

        raise TransportFailure(f"{last_error.__class__.__name__}: {last_error}") from last_error

    # -------------------------
    # Response mapping
    # -------------------------

    def _read(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code == 200:
            if isinstance(body, dict) and isinstance(body.get("asm"), str):
                return normalize_assembly(body["asm"])
            raise TransportFailure("malformed response from compilation service", status_code=200)

        if response.status_code == 500 and isinstance(body, dict) and isinstance(body.get("error"), str):
            raise CodegenDiagnostic(body["error"])

        raise TransportFailure(f"HTTP error! Status: {response.status_code}", status_code=response.status_code)
