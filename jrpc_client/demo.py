"""
jrpc-demo - JSON-RPC demo client

Connects to a JSON-RPC server, calls `sayHello` and `foo` and prints the replies.

Errors while connecting or calling `sayHello` are fatal (exit status 1).
An error from `foo` is printed and the run still completes.
"""
import argparse
import asyncio
import sys
from contextlib import AsyncExitStack
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from jrpc_client.client import ClientJsonRPC
from jrpc_client.config import (ADDRESS_ENV, DEBUG_ENV, ClientConfig,
                                configure_logging)
from jrpc_client.model import Args, Error, Reply, SubArgs
from jrpc_client.socket_base.socket_fabric import client_sr

FOO_ARGS = Args(A=3, B=10, S=SubArgs(A=1, B=2))


async def run(config: ClientConfig) -> int:
    """
        One demo run.
    :param config: client configuration
    :return exit status
    """
    async with AsyncExitStack() as stack:
        try:
            send, recv = await stack.enter_async_context(client_sr(config.address))
        except (OSError, ValueError) as e:
            logger.error(f"dialing: {e}")
            return 1
        client = ClientJsonRPC(send, recv, config.version)

        try:
            hello = await client.call("sayHello", None, str)
        except (Error, OSError) as e:
            logger.error(f"sayHello error: {e}")
            return 1
        print(f"reply: {hello}")

        reply = Reply()
        try:
            reply = await client.call("foo", FOO_ARGS, Reply)
        except (Error, OSError) as e:
            print(e)
        print(f"reply: {reply}")

    return 0


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jrpc-demo",
        description="JSON-RPC demo client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Environment:
  {ADDRESS_ENV}    default for --addr
  {DEBUG_ENV}   default debug level

Examples:
  jrpc-demo
  jrpc-demo --addr 10.0.0.2:1234
  jrpc-demo --addr unix:/tmp/test.sock -dd
""",
    )
    parser.add_argument(
        "-a", "--addr",
        help="server address, host:port or unix:/path",
    )
    parser.add_argument(
        "-d", "--debug",
        action="count",
        default=None,
        help="raise the debug level (repeatable)",
    )
    parser.add_argument(
        "--jsonrpc",
        metavar="VERSION",
        help="send a \"jsonrpc\" member with every request",
    )
    return parser


def get_config(argv: Optional[List[str]] = None) -> ClientConfig:
    args = get_parser().parse_args(argv)
    overrides = {}
    if args.addr is not None:
        overrides["address"] = args.addr
    if args.debug is not None:
        overrides["debug_level"] = args.debug
    if args.jsonrpc is not None:
        overrides["version"] = args.jsonrpc
    return ClientConfig.from_env(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        config = get_config(argv)
    except ValidationError as e:
        configure_logging()
        logger.error(f"invalid configuration: {e}")
        return 2
    configure_logging(config.debug_level)
    return asyncio.run(run(config))


if __name__ == "__main__":
    sys.exit(main())
