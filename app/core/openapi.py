"""OpenAPI metadata customization.

Adds tag descriptions and marks the admin operations as unauthenticated so
the generated docs do not suggest protection the service does not provide.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Waitlist",
        "description": "Public signup form endpoints.",
    },
    {
        "name": "Admin",
        "description": (
            "Data export and feature flags. No authentication is enforced by "
            "the service; restrict access at the proxy."
        ),
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and admin annotations."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if "/admin" not in path:
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = []
                    method_obj["x-unauthenticated"] = True

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
