"""Webhook listener delivering updates pushed by the Bot API."""

from __future__ import annotations

import asyncio
import contextlib
import grp
import hmac
import logging
import os
import pwd
import socket
from typing import Any, Awaitable, Callable, Iterator

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Request, Response

from spacybot.config import Settings
from spacybot.errors import StartupError

LOGGER = logging.getLogger(__name__)

SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"

UpdateHandler = Callable[[dict[str, Any]], Awaitable[None]]


def create_app(handler: UpdateHandler, secret_token: str = "") -> FastAPI:
    """Build the ASGI app that accepts updates on any path."""

    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    expected = secret_token.encode()

    @app.post("/{path:path}")
    async def receive_update(path: str, request: Request, background_tasks: BackgroundTasks) -> Response:
        if secret_token:
            supplied = request.headers.get(SECRET_TOKEN_HEADER, "").encode()
            if not hmac.compare_digest(supplied, expected):
                LOGGER.warning("Rejected webhook request with bad secret token on /%s", path)
                return Response(status_code=401)
        try:
            update = await request.json()
        except ValueError:
            return Response(status_code=400)
        if not isinstance(update, dict):
            return Response(status_code=400)
        background_tasks.add_task(handler, update)
        return Response(status_code=200)

    return app


def bind_listener(settings: Settings) -> socket.socket:
    """Create the listening socket described by the webhook listen settings."""

    network = settings.webhook_listen_network
    address = settings.webhook_listen_address
    try:
        if network == "unix":
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.bind(address)
                sock.listen()
            except OSError:
                sock.close()
                raise
        else:
            sock = _bind_tcp(network, address)
    except OSError as exc:
        raise StartupError(f"Failed to start webhook listener on {network} {address}: {exc}") from exc

    if network == "unix":
        try:
            _apply_socket_permissions(settings, address)
        except StartupError:
            sock.close()
            _remove_socket_file(address)
            raise
    return sock


def _bind_tcp(network: str, address: str) -> socket.socket:
    host, port = _split_host_port(address)
    if network == "tcp4" or (network == "tcp" and host and ":" not in host):
        return socket.create_server((host or "0.0.0.0", port), family=socket.AF_INET)
    if network == "tcp6" or host:
        return socket.create_server((host or "::", port), family=socket.AF_INET6)
    if socket.has_dualstack_ipv6():
        return socket.create_server(("::", port), family=socket.AF_INET6, dualstack_ipv6=True)
    return socket.create_server(("", port), family=socket.AF_INET)


def _split_host_port(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep:
        raise StartupError(f"Webhook listen address {address!r} is missing a port")
    try:
        return host.strip("[]"), int(port)
    except ValueError as exc:
        raise StartupError(f"Webhook listen address {address!r} has an invalid port") from exc


def _apply_socket_permissions(settings: Settings, path: str) -> None:
    owner = settings.webhook_listen_owner
    group = settings.webhook_listen_group
    if owner or group:
        uid = _lookup_id(owner, "owner", lambda name: pwd.getpwnam(name).pw_uid) if owner else -1
        gid = _lookup_id(group, "group", lambda name: grp.getgrnam(name).gr_gid) if group else -1
        try:
            os.chown(path, uid, gid)
        except OSError as exc:
            raise StartupError(
                f"Failed to set owner/group for webhook socket {path} (uid={uid}, gid={gid}): {exc}"
            ) from exc
        LOGGER.debug("Set owner/group for webhook socket %s uid=%s gid=%s", path, uid, gid)

    if settings.webhook_listen_mode:
        try:
            mode = int(settings.webhook_listen_mode, 8)
        except ValueError as exc:
            raise StartupError(
                f"Invalid file mode for webhook socket: {settings.webhook_listen_mode!r}"
            ) from exc
        try:
            os.chmod(path, mode)
        except OSError as exc:
            raise StartupError(f"Failed to set file mode for webhook socket {path}: {exc}") from exc
        LOGGER.debug("Set file mode for webhook socket %s mode=%o", path, mode)


def _lookup_id(name: str, kind: str, lookup: Callable[[str], int]) -> int:
    """Resolve a user or group name, accepting a numeric id for unknown names."""

    try:
        return lookup(name)
    except KeyError:
        pass
    try:
        return int(name)
    except ValueError as exc:
        raise StartupError(f"Invalid {kind} name or id for webhook socket: {name!r}") from exc


def _remove_socket_file(path: str) -> None:
    with contextlib.suppress(FileNotFoundError):
        os.unlink(path)


def _describe(sock: socket.socket) -> str:
    name = sock.getsockname()
    if isinstance(name, tuple):
        return f"{name[0]}:{name[1]}"
    return str(name)


class WebhookServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the bot process."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


async def serve_webhook(settings: Settings, handler: UpdateHandler, stop_event: asyncio.Event) -> None:
    """Serve webhook requests until stop_event is set."""

    sock = bind_listener(settings)
    listen_address = _describe(sock)
    config = uvicorn.Config(
        create_app(handler, settings.webhook_secret_token),
        log_config=None,
        access_log=False,
        lifespan="off",
    )
    server = WebhookServer(config)
    serve_task = asyncio.create_task(server.serve(sockets=[sock]), name="webhook-server")
    stop_task = asyncio.create_task(stop_event.wait(), name="webhook-stop")
    LOGGER.info("Started webhook server listenAddress=%s", listen_address)

    try:
        done, _ = await asyncio.wait({serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        if serve_task in done:
            serve_task.result()
            raise StartupError(f"Webhook server on {listen_address} stopped unexpectedly")
        server.should_exit = True
        await serve_task
    finally:
        server.should_exit = True
        stop_task.cancel()
        await asyncio.gather(stop_task, return_exceptions=True)
        sock.close()
        if settings.webhook_listen_network == "unix":
            _remove_socket_file(settings.webhook_listen_address)
