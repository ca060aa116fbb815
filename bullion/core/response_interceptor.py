"""
Success Response Interceptor Middleware
Wraps every successful JSON response in a standard envelope with a success flag,
a count for lists and the pagination block for paginated payloads.
"""

from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware
import json


# Key for skipping the interceptor on specific routes
SKIP_INTERCEPTOR_KEY = "skip_interceptor"

PAGINATION_KEYS = ("total", "page", "page_size", "total_pages", "has_more")


def _wrap(original_data) -> dict:
    """
    {"success": true, "data": ...} plus:
    - "count" when data is a list
    - "pagination" when data is a build_paginated_response() payload
    """
    if isinstance(original_data, dict) and "items" in original_data and all(
        key in original_data for key in PAGINATION_KEYS
    ):
        return {
            "success": True,
            "data": original_data["items"],
            "count": len(original_data["items"]),
            "pagination": {key: original_data[key] for key in PAGINATION_KEYS},
        }

    wrapped_response = {"success": True, "data": original_data}
    if isinstance(original_data, list):
        wrapped_response["count"] = len(original_data)
    return wrapped_response


class SuccessResponseInterceptor(BaseHTTPMiddleware):
    """
    Middleware that wraps all successful responses in a standard format:
    {
        "success": true,
        "count": <length> (if data is a list),
        "pagination": {...} (if the route returned a paginated payload),
        "data": <original response>
    }

    Can be skipped on specific routes using the @skip_interceptor decorator.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Skip interceptor for FastAPI built-in documentation endpoints
        excluded_paths = ["/openapi.json", "/docs", "/redoc"]
        if request.url.path in excluded_paths:
            return response

        # Only intercept successful JSON responses (2xx status codes)
        if not (200 <= response.status_code < 300):
            return response

        if getattr(request.state, SKIP_INTERCEPTOR_KEY, False):
            return response

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        # Read the original response body
        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        try:
            original_data = json.loads(response_body.decode())
        except (json.JSONDecodeError, UnicodeDecodeError):
            # If we can't parse the response, return it as is
            return Response(
                content=response_body,
                status_code=response.status_code,
                headers=dict(response.headers),
            )

        # Content-Length is recalculated by JSONResponse
        headers = dict(response.headers)
        headers.pop("content-length", None)

        return JSONResponse(
            content=_wrap(original_data),
            status_code=response.status_code,
            headers=headers,
        )


def skip_interceptor(func: Callable) -> Callable:
    """
    Decorator to skip the success response interceptor on specific routes.

    Usage:
        @router.delete("/{draft_id}")
        @skip_interceptor
        async def delete_draft(...):
            return {"message": "..."}
    """
    setattr(func, SKIP_INTERCEPTOR_KEY, True)
    return func


class CustomAPIRoute(APIRoute):
    """
    Custom API Route that checks for the skip_interceptor decorator
    and sets it in the request state.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            if getattr(self.endpoint, SKIP_INTERCEPTOR_KEY, False):
                setattr(request.state, SKIP_INTERCEPTOR_KEY, True)

            return await original_route_handler(request)

        return custom_route_handler
