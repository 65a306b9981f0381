# app/core/middleware.py

import json
import logging

import msgpack
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

MSGPACK_MEDIA_TYPE = "application/x-msgpack"


class MessagePackMiddleware:
    """
    If client requests Accept: application/x-msgpack,
    converts JSON responses to MessagePack.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {k: v for k, v in scope.get("headers", [])}
        accept = headers.get(b"accept", b"").decode("latin-1")
        if MSGPACK_MEDIA_TYPE not in accept:
            await self.app(scope, receive, send)
            return

        responder = _MsgpackResponder(self.app, scope, receive, send)
        await responder.run()


class _MsgpackResponder:
    """
    Buffers a JSON response and re-encodes it as MessagePack once complete.
    Non-JSON responses pass through untouched.
    """

    def __init__(self, app: ASGIApp, scope: Scope, receive: Receive, send: Send):
        self.app = app
        self.scope = scope
        self.receive = receive
        self.send = send
        self.start_message: Message | None = None
        self.body = b""
        self.passthrough = False

    async def run(self):
        await self.app(self.scope, self.receive, self.send_wrapper)

    async def send_wrapper(self, message: Message):
        if message["type"] == "http.response.start":
            content_type = MutableHeaders(raw=message["headers"]).get("content-type", "")
            if not content_type.startswith("application/json"):
                self.passthrough = True
                await self.send(message)
                return
            # hold back headers until the body is known
            self.start_message = message
            return

        if message["type"] != "http.response.body" or self.passthrough:
            await self.send(message)
            return

        self.body += message.get("body", b"")
        if message.get("more_body", False):
            return

        if not self.body:
            # e.g. 204 No Content
            await self.send(self.start_message)
            await self.send(message)
            return

        packed = msgpack.packb(json.loads(self.body), use_bin_type=True)
        headers = MutableHeaders(raw=self.start_message["headers"])
        headers["content-type"] = MSGPACK_MEDIA_TYPE
        headers["content-length"] = str(len(packed))
        await self.send(self.start_message)
        await self.send({"type": "http.response.body", "body": packed})

