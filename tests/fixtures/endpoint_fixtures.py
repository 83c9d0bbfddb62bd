"""
Endpoint fixtures for testing.
Provides endpoint collections and OpenAPI documents for the catalog tests.
"""
import json
import os
import tempfile
from typing import Any, Dict, List, Optional, Sequence

from catalog.models import EndpointRecord, EndpointSource, HttpMethod


class EndpointFixtures:
    """Endpoint fixtures for testing."""

    @staticmethod
    def endpoint(path: str,
                 method: HttpMethod = HttpMethod.GET,
                 class_name: str = "UserController",
                 method_name: Optional[str] = None,
                 summary: Optional[str] = None,
                 tags: Sequence[str] = (),
                 operation_id: Optional[str] = None) -> EndpointRecord:
        """Create an endpoint record with sensible defaults."""
        return EndpointRecord(
            path=path,
            method=method,
            class_name=class_name,
            method_name=method_name or f"{method.value.lower()}{path.replace('/', '_')}",
            summary=summary,
            tags=tuple(tags),
            operation_id=operation_id
        )

    @staticmethod
    def foo_scenario() -> List[EndpointRecord]:
        """Two endpoints of class Foo, only the second one tagged."""
        return [
            EndpointRecord(path="/a", method=HttpMethod.GET, class_name="Foo", method_name="list"),
            EndpointRecord(path="/b", method=HttpMethod.GET, class_name="Foo", method_name="get", tags=("x",)),
        ]

    @staticmethod
    def user_service() -> List[EndpointRecord]:
        """A small but realistic service with several controllers."""
        return [
            EndpointRecord(
                path="/api/users", method=HttpMethod.GET,
                class_name="UserController", method_name="listUsers",
                summary="List all users", tags=("users",), operation_id="listUsers"
            ),
            EndpointRecord(
                path="/api/users/{id}", method=HttpMethod.GET,
                class_name="UserController", method_name="getUser",
                summary="Get user by id", tags=("users",), operation_id="getUser"
            ),
            EndpointRecord(
                path="/api/users", method=HttpMethod.POST,
                class_name="UserController", method_name="createUser",
                summary="Create a user", tags=("users", "admin"), operation_id="createUser"
            ),
            EndpointRecord(
                path="/api/orders", method=HttpMethod.GET,
                class_name="OrderController", method_name="listOrders",
                summary="List orders", tags=("orders",), operation_id="listOrders"
            ),
            EndpointRecord(
                path="/api/orders/{id}", method=HttpMethod.DELETE,
                class_name="OrderController", method_name="deleteOrder",
                summary="Cancel an order", tags=("orders", "admin"), operation_id="deleteOrder"
            ),
            EndpointRecord(
                path="/health", method=HttpMethod.GET,
                class_name="HealthController", method_name="health"
            ),
        ]

    @staticmethod
    def openapi_document() -> Dict[str, Any]:
        """OpenAPI 3 document describing part of the user service."""
        return {
            "openapi": "3.0.1",
            "info": {"title": "User Service", "version": "1.0"},
            "paths": {
                "/api/users": {
                    "get": {
                        "tags": ["users"],
                        "summary": "List all users",
                        "operationId": "listUsers"
                    },
                    "post": {
                        "tags": ["users", "admin"],
                        "summary": "Create a user",
                        "operationId": "createUser"
                    },
                    "parameters": [{"name": "tenant", "in": "header"}]
                },
                "/api/users/{id}": {
                    "get": {
                        "tags": ["users"],
                        "summary": "Get user by id",
                        "operationId": "getUser"
                    },
                    "trace": {"summary": "Unsupported verb"}
                },
                "/health": {
                    "get": {"summary": "Health check"}
                }
            }
        }

    @staticmethod
    def create_temp_openapi_file(document: Optional[Dict[str, Any]] = None) -> str:
        """Write an OpenAPI document to a temporary JSON file."""
        temp_file = tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False, encoding='utf-8')
        json.dump(document if document is not None else EndpointFixtures.openapi_document(), temp_file)
        temp_file.close()
        return temp_file.name

    @staticmethod
    def create_temp_env_file(content: str) -> str:
        """Create a temporary .env file with given content."""
        temp_file = tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False)
        temp_file.write(content)
        temp_file.close()
        return temp_file.name

    @staticmethod
    def cleanup_temp_file(file_path: str):
        """Clean up temporary file."""
        try:
            os.unlink(file_path)
        except OSError:
            pass

    @staticmethod
    def valid_config() -> str:
        """Valid configuration using every supported key."""
        return """
# Endpoint Catalog Configuration
CATALOG_DEFAULT_VIEW_MODE=swagger
CATALOG_UNTAGGED_LABEL=Other
CATALOG_HIGHLIGHT_OPEN=[
CATALOG_HIGHLIGHT_CLOSE=]
CATALOG_FILTER_DEBOUNCE_MS=150
CATALOG_DEBUG=true

# Discovery
CATALOG_OPENAPI_URL=http://localhost:8080/v3/api-docs
CATALOG_SCAN_TIMEOUT=5000
CATALOG_RESCAN_INTERVAL=60000
"""

    @staticmethod
    def invalid_config() -> str:
        """Configuration where every value is wrong."""
        return """
CATALOG_DEFAULT_VIEW_MODE=flat
CATALOG_UNTAGGED_LABEL=
CATALOG_FILTER_DEBOUNCE_MS=soon
CATALOG_OPENAPI_URL=ftp//broken
CATALOG_SCAN_TIMEOUT=0
CATALOG_RESCAN_INTERVAL=-5
"""
