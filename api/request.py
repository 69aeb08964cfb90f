"""
api/request.py -- Adapts a Starlette/FastAPI Request to the gate's RequestDescriptor.

The gate only needs the full URI and the HTTP method. Starlette rebuilds
request.url from the *decoded* scope["path"], so a client-sent %3F or %23
would turn into a real "?" or "#" there and core/skip.py would extract a
shorter path than the one the router dispatches. The URI handed to the gate
therefore re-quotes the path and takes the query straight from the scope.
"""

from __future__ import annotations

from urllib.parse import quote

from starlette.requests import Request


class StarletteRequestDescriptor:
    def __init__(self, request: Request) -> None:
        self._request = request

    def get_uri(self) -> str:
        scope = self._request.scope
        url = self._request.url.replace(
            path=quote(scope["path"]),
            query=scope.get("query_string", b"").decode(),
            fragment="",
        )
        return str(url)

    def get_method(self) -> str:
        return self._request.method
