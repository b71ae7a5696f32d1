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
"""Parses command line arguments of the immustore CLI."""
import argparse
import json
import sys
from collections.abc import Callable

from immustore.api.client import ImmutableStorageClient
from immustore.app.server import serve
from immustore.system.config.loader import load_config_file


def display_welcome(args: argparse.Namespace, command: str) -> None:
    """
    Prints the welcome message if `--no-welcome` is unset.

    Args:
        args (argparse.Namespace): The arguments.
        command (str): The name of the command.
    """
    if args.no_welcome:
        return
    import immustore  # pylint: disable=import-outside-toplevel

    print(
        f"Starting {immustore.__name__}({immustore.__version__}) "
        f"as {command}")
    print(f"python version: {sys.version}")


def parse_args_client(
        parser: argparse.ArgumentParser, *, controller: bool) -> None:
    """
    Parse command line arguments for REST client commands.

    Args:
        parser (argparse.ArgumentParser): The argument parser.
        controller (bool): Whether the command requires a controller.
    """
    parser.add_argument(
        "--url",
        type=str,
        default="http://localhost:8080",
        help="base url of the immutable storage server")
    parser.add_argument(
        "--prefix",
        type=str,
        default="/immutable",
        help="url prefix of the immutable storage endpoints")
    if controller:
        parser.add_argument(
            "--controller",
            type=str,
            required=True,
            help="identity of the caller")


def create_client(args: argparse.Namespace) -> ImmutableStorageClient:
    """
    Creates a REST client from the command line arguments.

    Args:
        args (argparse.Namespace): The arguments.

    Returns:
        ImmutableStorageClient: The client.
    """
    return ImmutableStorageClient(
        args.url,
        getattr(args, "controller", None),
        prefix=args.prefix)


def parse_args() -> tuple[
        argparse.Namespace,
        Callable[[argparse.Namespace], Callable[[], int | None]]]:
    """
    Parse command line arguments for the immustore CLI.

    Returns:
        tuple[
                argparse.Namespace,
                Callable[[argparse.Namespace], Callable[[], int | None]]]: A
            tuple of the parsed arguments and the execute function to run.
    """
    parser = argparse.ArgumentParser(
        description="Run an immutable storage command.")
    subparser = parser.add_subparsers(title="Commands")

    def run_serve(args: argparse.Namespace) -> Callable[[], int | None]:
        display_welcome(args, "server")
        config = load_config_file(args.config)

        def execute() -> int | None:
            serve(config)
            return None

        return execute

    subparser_serve = subparser.add_parser("serve")
    subparser_serve.set_defaults(func=run_serve)
    subparser_serve.add_argument(
        "--config",
        type=str,
        required=True,
        help="json config file")

    def run_store(args: argparse.Namespace) -> Callable[[], int | None]:
        client = create_client(args)

        def execute() -> int | None:
            if args.file == "-":
                data = sys.stdin.buffer.read()
            else:
                with open(args.file, "rb") as fin:
                    data = fin.read()
            res = client.store(data)
            print(json.dumps(res, indent=2, sort_keys=True))
            return None

        return execute

    subparser_store = subparser.add_parser("store")
    subparser_store.set_defaults(func=run_store)
    parse_args_client(subparser_store, controller=True)
    subparser_store.add_argument(
        "--file",
        type=str,
        default="-",
        help="file to store; '-' reads from stdin")

    def run_get(args: argparse.Namespace) -> Callable[[], int | None]:
        client = create_client(args)

        def execute() -> int | None:
            res = client.get(args.id, include_data=not args.no_data)
            data = res.get("data")
            if data is not None and args.out is not None:
                with open(args.out, "wb") as fout:
                    fout.write(data)
            elif data is not None:
                sys.stdout.buffer.write(data)
                sys.stdout.flush()
            else:
                print(json.dumps(res["receipt"], indent=2, sort_keys=True))
            return None

        return execute

    subparser_get = subparser.add_parser("get")
    subparser_get.set_defaults(func=run_get)
    parse_args_client(subparser_get, controller=False)
    subparser_get.add_argument(
        "--id",
        type=str,
        required=True,
        help="identifier of the record")
    subparser_get.add_argument(
        "--no-data",
        action="store_true",
        help="only retrieve the receipt")
    subparser_get.add_argument(
        "--out",
        type=str,
        default=None,
        help="file to write the payload to; defaults to stdout")

    def run_remove(args: argparse.Namespace) -> Callable[[], int | None]:
        client = create_client(args)

        def execute() -> int | None:
            client.remove(args.id)
            return None

        return execute

    subparser_remove = subparser.add_parser("remove")
    subparser_remove.set_defaults(func=run_remove)
    parse_args_client(subparser_remove, controller=True)
    subparser_remove.add_argument(
        "--id",
        type=str,
        required=True,
        help="identifier of the record")

    parser.add_argument(
        "--no-welcome",
        action="store_true",
        help="suppresses the welcome message")

    args = parser.parse_args()
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)
    return args, args.func
