"""
Saving exported reports and downloading files to local disk.
"""

from pathlib import Path
from typing import Optional, Union

import httpx

from .config import settings
from .exceptions import ApiRequestError, RequestTimeoutException, ServiceUnavailableException
from .logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def save_bytes(data: bytes, filename: str, directory: Optional[PathLike] = None) -> Path:
    """
    Write report bytes (e.g. a PDF export) to ``directory / filename``.

    Args:
        data: File contents
        filename: Target file name
        directory: Target directory, created if missing (defaults to cwd)

    Returns:
        Path of the written file
    """
    target_dir = Path(directory) if directory is not None else Path.cwd()
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / Path(filename).name
    path.write_bytes(data)

    logger.info(
        "Saved file",
        extra={"extra_fields": {"path": str(path), "size_bytes": len(data)}},
    )
    return path


async def download_file(
    url: str,
    filename: str,
    directory: Optional[PathLike] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Path:
    """
    Download ``url`` and save it as ``filename``.

    Raises:
        ApiRequestError: Server answered with a non-2xx status
        RequestTimeoutException: Download timed out
        ServiceUnavailableException: Server could not be reached
    """
    try:
        async with httpx.AsyncClient(
            timeout=settings.REQUEST_TIMEOUT, follow_redirects=True, transport=transport
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException as error:
        logger.error(
            "Error downloading file",
            extra={"extra_fields": {"url": url, "error_type": "timeout"}},
        )
        raise RequestTimeoutException(url, settings.REQUEST_TIMEOUT) from error
    except httpx.RequestError as error:
        logger.error(
            "Error downloading file",
            extra={"extra_fields": {"url": url, "error_type": type(error).__name__}},
        )
        raise ServiceUnavailableException(
            "download", message=f"Cannot download {url}", details={"error": str(error)}
        ) from error

    if response.is_error:
        logger.error(
            "Error downloading file",
            extra={"extra_fields": {"url": url, "status_code": response.status_code}},
        )
        raise ApiRequestError("GET", url, response.status_code, response.text[:500])

    return save_bytes(response.content, filename, directory)
