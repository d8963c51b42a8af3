"""Catalog service: CSAR uploads and TOSCA type descriptions."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, Any
from urllib.parse import urlencode

from loguru import logger

from .errors import CSARParsingError
from .models.catalog import CSAR, ComplexToscaTypeDescriptorRequest, CSARUploadResult
from .transport import REST_API_PREFIX, encode_multipart

if TYPE_CHECKING:
    from .client import A4CClient

CSAR_FILE_NAME = "types.zip"


class CatalogService:
    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def upload_csar(self, archive: bytes | IO[bytes], workspace: str = "") -> CSAR:
        """Upload a zipped CSAR holding a single TOSCA definition at its root.

        Raises :class:`CSARParsingError` when Alien4Cloud reports parsing
        errors; they may be warnings only, see ``has_critical_errors()``. The
        registered archive is available on the error as ``csar``.
        """
        path = f"{REST_API_PREFIX}/csars"
        if workspace:
            path = f"{path}?{urlencode({'workspace': workspace})}"
        try:
            body, content_type = encode_multipart("file", CSAR_FILE_NAME, archive)
        finally:
            if hasattr(archive, "close"):
                archive.close()

        result = await self._client.request_json(
            "POST", path, body, CSARUploadResult, headers={"Content-Type": content_type}
        )
        result = result or CSARUploadResult()
        csar = result.csar or CSAR()
        if result.errors:
            raise CSARParsingError(_format_parsing_errors(result), result.errors, csar=csar)
        logger.info(f"Uploaded CSAR {csar.name}:{csar.version}")
        return csar

    async def get_complex_tosca_type(
        self, request: ComplexToscaTypeDescriptorRequest
    ) -> dict[str, Any]:
        """Describe a complex TOSCA type; keys are the ``TYPE_DESCRIPTION_*`` constants."""
        description = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/formdescriptor/complex-tosca-type",
            request,
            dict[str, Any],
        )
        return description or {}


def _format_parsing_errors(result: CSARUploadResult) -> str:
    return "\n".join(
        f"{file_name}> {entry}"
        for file_name, entries in result.errors.items()
        for entry in entries
    )
