"""
Request body size limit.

Bodies with a Content-Length over the limit are refused up front. Bodies
without one (chunked) are read and counted before the app sees them, and
refused as soon as the running total passes the limit; accepted bodies are
replayed to the app unchanged.
"""
import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse

from . import core

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        limit = core.MAX_BODY_BYTES
        length = Headers(scope=scope).get('content-length')
        if length is not None:
            if length.isdigit() and int(length) > limit:
                await self._reject(scope, receive, send, int(length))
                return
            await self.app(scope, receive, send)
            return

        buffered = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message['type'] != 'http.request':
                break
            received += len(message.get('body', b''))
            if received > limit:
                await self._reject(scope, receive, send, received)
                return
            if not message.get('more_body', False):
                break

        async def replay():
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope, receive, send, size):
        logger.warning({'msg': 'request_too_large', 'path': scope.get('path'), 'length': size})
        response = JSONResponse({'success': False, 'message': 'Request entity too large'}, status_code=413)
        await response(scope, receive, send)
