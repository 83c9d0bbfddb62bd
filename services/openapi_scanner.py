"""
OpenAPI endpoint scanner.
Turns an OpenAPI document, read from a file or fetched over HTTP, into a flat
list of endpoint records. Every scan returns a complete new collection.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from catalog.models import EndpointRecord, EndpointSource, HttpMethod
from config.catalog_config import ScannerConfig
from utils.error_handler import ErrorCategory


DEFAULT_CLASS_NAME = "OpenAPI"


class ScanError(Exception):
    """Raised when an OpenAPI document cannot be read or parsed."""

    def __init__(self, message: str, source: Optional[str] = None,
                 category: ErrorCategory = ErrorCategory.SCAN):
        super().__init__(message)
        self.source = source
        self.category = category


@dataclass
class ScanResult:
    """Result of one scan."""
    source: str
    endpoints: List[EndpointRecord] = field(default_factory=list)
    duration_ms: float = 0.0
    skipped_operations: int = 0


def _derived_method_name(method: HttpMethod, path: str) -> str:
    return f"{method.value.lower()}_{path.replace('/', '_')}"


def parse_openapi_document(document: Dict[str, Any], source_file: Optional[str] = None) -> ScanResult:
    """
    Extract endpoint records from an OpenAPI document.

    The first tag names the declaring class ("OpenAPI" when untagged) and the
    operation id names the method; operations without one get a name derived
    from verb and path. Path-level keys that are not HTTP verbs, such as
    "parameters" or "trace", are skipped.

    Args:
        document: Parsed OpenAPI/Swagger JSON document
        source_file: File the document was read from, if any

    Returns:
        ScanResult with endpoints in document order

    Raises:
        ScanError: If the document has no usable "paths" object
    """
    if not isinstance(document, dict):
        raise ScanError("OpenAPI document must be a JSON object", source_file)

    paths = document.get('paths')
    if not isinstance(paths, dict):
        raise ScanError("OpenAPI document has no 'paths' object", source_file)

    result = ScanResult(source=source_file or "<document>")
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        for verb, operation in path_item.items():
            method = HttpMethod.from_string(verb)
            if method is None or not isinstance(operation, dict):
                result.skipped_operations += 1
                continue

            tags = [str(tag) for tag in operation.get('tags') or []]
            operation_id = operation.get('operationId')

            result.endpoints.append(EndpointRecord(
                path=path,
                method=method,
                class_name=tags[0] if tags else DEFAULT_CLASS_NAME,
                method_name=operation_id or _derived_method_name(method, path),
                summary=operation.get('summary'),
                tags=tuple(tags),
                operation_id=operation_id,
                source=EndpointSource.OPENAPI,
                source_file=source_file
            ))

    return result


class OpenApiScanner:
    """Discovers endpoints from an OpenAPI document."""

    def __init__(self, config: ScannerConfig):
        """
        Initialize the scanner.

        Args:
            config: Scanner configuration naming the document source
        """
        self.config = config
        self.logger = logging.getLogger("EndpointCatalog.Scanner")

    def load_file(self, file_path: str) -> ScanResult:
        """
        Scan an OpenAPI JSON file.

        Args:
            file_path: Path to the document

        Returns:
            ScanResult for the file

        Raises:
            ScanError: If the file is missing, unreadable or not valid UTF-8 JSON
        """
        start_time = time.time()
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError as e:
            raise ScanError(f"OpenAPI file not found: {file_path}", file_path,
                            ErrorCategory.CONFIGURATION) from e
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ScanError(f"Cannot read OpenAPI file {file_path}: {e}", file_path) from e

        result = parse_openapi_document(document, source_file=file_path)
        result.duration_ms = (time.time() - start_time) * 1000
        return result

    async def fetch(self, url: str, session: Optional[aiohttp.ClientSession] = None) -> ScanResult:
        """
        Fetch and scan an OpenAPI document over HTTP.

        Args:
            url: Document URL, e.g. http://localhost:8080/v3/api-docs
            session: Existing session to reuse, a temporary one is created otherwise

        Returns:
            ScanResult for the document

        Raises:
            ScanError: On HTTP errors, timeouts or invalid JSON
        """
        start_time = time.time()
        owns_session = session is None
        if owns_session:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout / 1000)
            session = aiohttp.ClientSession(timeout=timeout)

        try:
            async with session.get(url, headers={'Accept': 'application/json'}) as response:
                if response.status >= 400:
                    raise ScanError(f"HTTP {response.status} fetching {url}", url,
                                    ErrorCategory.NETWORK)
                document = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ScanError(f"Timed out fetching {url}", url, ErrorCategory.TIMEOUT) from e
        except aiohttp.ClientError as e:
            raise ScanError(f"Cannot fetch {url}: {e}", url, ErrorCategory.NETWORK) from e
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ScanError(f"Invalid JSON from {url}: {e}", url) from e
        finally:
            if owns_session:
                await session.close()

        result = parse_openapi_document(document)
        result.source = url
        result.duration_ms = (time.time() - start_time) * 1000
        return result

    async def scan(self) -> ScanResult:
        """
        Scan the configured source.

        Returns:
            ScanResult from the configured URL or file

        Raises:
            ScanError: If no source is configured or the scan fails
        """
        if self.config.openapi_url:
            result = await self.fetch(self.config.openapi_url)
        elif self.config.openapi_file:
            result = self.load_file(self.config.openapi_file)
        else:
            raise ScanError("No OpenAPI source configured", category=ErrorCategory.CONFIGURATION)

        self.logger.debug(
            f"Scanned {result.source}: {len(result.endpoints)} endpoints, "
            f"{result.skipped_operations} skipped"
        )
        return result
