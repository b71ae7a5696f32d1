# Copyright (C) 2024 Josua Krause
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Provides the REST surface of the immutable storage service."""
import threading
import time
from collections.abc import Callable
from http.cookies import SimpleCookie
from typing import Any, NoReturn, TypeVar

from quick_server import create_server, PreventDefaultResponse, QuickServer
from quick_server import QuickServerRequestHandler as QSRH
from quick_server import ReqArgs

from immustore.api.api import (
    CONTROLLER_HEADER,
    GetResponseJSON,
    StoreResponse,
)
from immustore.app.handlers import handle_get, handle_remove, handle_store
from immustore.system.config.config import Config
from immustore.system.error import ImmutableStorageError


T = TypeVar('T')


BODY_METHODS = {"POST", "PUT", "DELETE"}
"""HTTP methods whose request body is read by the server."""


def report_error(exc: ImmutableStorageError) -> NoReturn:
    """
    Reports an error to the REST client. The error code is sent as reason
    phrase so the client can recreate the typed error.

    Args:
        exc (ImmutableStorageError): The error.

    Raises:
        PreventDefaultResponse: The response.
    """
    raise PreventDefaultResponse(exc.http_status(), exc.code) from exc


def guard(fun: Callable[[], T]) -> T:
    """
    Runs a request handler and converts immutable storage errors into
    REST responses.

    Args:
        fun (Callable[[], T]): The handler.

    Returns:
        T: The result of the handler.
    """
    try:
        return fun()
    except ImmutableStorageError as exc:
        report_error(exc)


def get_controller(req: QSRH) -> str:
    """
    Reads the identity of the caller.

    Args:
        req (QSRH): The request.

    Returns:
        str: The identity or an empty string if it is missing.
    """
    return f"{req.headers.get(CONTROLLER_HEADER, '')}".strip()


def init_server(
        config: Config,
        addr: str,
        port: int,
        prefix: str) -> QuickServer:
    """
    Initializes the REST server.

    Args:
        config (Config): The configuration.
        addr (str): The address to serve.
        port (int): The port to serve.
        prefix (str): The URL prefix.

    Returns:
        QuickServer: The server.
    """
    import immustore  # pylint: disable=import-outside-toplevel

    service = config.get_service()
    logger = config.get_logger()

    server: QuickServer = create_server(
        (addr, port),
        parallel=True,
        thread_factory=threading.Thread,
        token_handler=None,
        worker_constructor=None,
        soft_worker_death=True)

    server.suppress_noise = True

    def report_slow_requests(
            method_str: str, path: str, duration: float) -> None:
        logger.log_event(
            "server.slow",
            {
                "name": "server",
                "action": "slow",
                "address": f"{method_str} {path}",
                "duration": duration,
            })

    server.report_slow_requests = report_slow_requests

    server_timeout = 10 * 60
    server.timeout = server_timeout
    server.socket.settimeout(server_timeout)

    server.no_command_loop = True

    version = f"{immustore.__name__}/{immustore.__version__}"

    server.update_version_string(version)

    server.set_common_invalid_paths(["/", "//"])

    def fill_content_length(
            req: QSRH, _path: str, _cookie: SimpleCookie | None) -> None:
        # the body is read with exactly the announced length
        if (req.command in BODY_METHODS
                and req.headers.get("Content-Length") is None):
            req.headers["Content-Length"] = "0"

    server.add_pre_middleware(fill_content_length)

    @server.json_post(prefix)
    def _post_store(req: QSRH, rargs: ReqArgs) -> StoreResponse:
        return guard(lambda: handle_store(
            service, get_controller(req), rargs.get("post")))

    @server.json_get(prefix)
    def _get_item(_req: QSRH, rargs: ReqArgs) -> GetResponseJSON:
        return guard(lambda: handle_get(
            service, rargs["paths"], rargs.get("query", {})))

    @server.json_delete(prefix)
    def _delete_item(req: QSRH, rargs: ReqArgs) -> dict[str, Any]:
        return guard(lambda: handle_remove(
            service, get_controller(req), rargs["paths"]))

    return server


def serve(config: Config) -> None:
    """
    Runs the REST server until it is interrupted.

    Args:
        config (Config): The configuration.

    Raises:
        ValueError: If no server is configured.
    """
    server_def = config.get_server()
    if server_def is None:
        raise ValueError("no server configured")
    addr, port, prefix = server_def
    logger = config.get_logger()
    server = init_server(config, addr, port, prefix)
    url = f"http://{addr}:{port}{prefix}"
    start = time.monotonic()
    logger.log_event(
        "server.start",
        {
            "name": "server",
            "action": "start",
            "address": url,
        })
    try:
        server.serve_forever()
    finally:
        logger.log_event(
            "server.stop",
            {
                "name": "server",
                "action": "stop",
                "address": url,
                "duration": time.monotonic() - start,
            })
        server.server_close()
