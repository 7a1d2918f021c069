"""
Static asset stage.

Serves files from the public asset root before route dispatch. Paths that do
not name a regular file under the root fall through to the router instead of
producing a 404.
"""

import stat

from starlette.concurrency import run_in_threadpool
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

_SERVED_METHODS = {"GET", "HEAD"}


class StaticAssetMiddleware:
    def __init__(self, app: ASGIApp, directory: str):
        self.app = app
        # check_dir=False: a missing public root just means nothing is served.
        self.files = StaticFiles(directory=directory, check_dir=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in _SERVED_METHODS:
            await self.app(scope, receive, send)
            return

        path = self.files.get_path(scope)
        try:
            full_path, stat_result = await run_in_threadpool(self.files.lookup_path, path)
        except (OSError, ValueError):
            # Over-long names (ENAMETOOLONG) and embedded NUL bytes are misses too.
            await self.app(scope, receive, send)
            return

        if stat_result is None or not stat.S_ISREG(stat_result.st_mode):
            await self.app(scope, receive, send)
            return

        response = self.files.file_response(full_path, stat_result, scope)
        await response(scope, receive, send)
