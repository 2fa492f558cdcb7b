"""
Configuration of the demo client.
"""
import os
import sys
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from jrpc_client.socket_base.socket_fabric import parse_address

DEFAULT_ADDRESS = "127.0.0.1:1234"

ADDRESS_ENV = "JRPC_ADDR"
DEBUG_ENV = "JRPC_DEBUG"

LOG_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"


class ClientConfig(BaseModel):
    """Connection settings of the demo client"""
    address: str = DEFAULT_ADDRESS
    debug_level: int = Field(0, ge=0)
    version: Optional[str] = None

    @field_validator("address")
    @classmethod
    def valid_address(cls, value: str) -> str:
        parse_address(value)
        return value

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """
        Create config from environment variables.

        Overrides replace the environment values before validation, so a
        bad variable does not matter once a flag replaces it. An empty
        JRPC_DEBUG reads as 0.
        """
        fields = {
            "address": os.getenv(ADDRESS_ENV) or DEFAULT_ADDRESS,
            "debug_level": os.getenv(DEBUG_ENV) or 0,
        }
        fields.update(overrides)
        return cls(**fields)


def get_log_level(debug_level: int) -> str:
    if debug_level >= 2:
        return "TRACE"
    if debug_level == 1:
        return "DEBUG"
    return "WARNING"


def configure_logging(debug_level: int = 0, sink=None) -> int:
    """
        Replaces loguru's default handler with a single sink.
        Level 1 shows connection events, level 2 and above every request and response.
    :param debug_level: debug level
    :param sink: defaults to sys.stderr
    :return handler id
    """
    logger.remove()
    return logger.add(
        sys.stderr if sink is None else sink,
        level=get_log_level(debug_level),
        format=LOG_FORMAT,
    )
