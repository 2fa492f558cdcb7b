import codecs
import json
from typing import Any, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, TypeAdapter, ValidationError

from jrpc_client.model import (ConnectionClosedError, Error, IdType,
                               InvalidResponseError, ParseError, ProcRequest,
                               Response)
from jrpc_client.socket_base.send_recv import ClientRecvType, ClientSendType
from jrpc_client.socket_base.socket_fabric import is_data_empty

MAX_MESSAGE_SIZE = 1 << 20

T = TypeVar("T")


def get_params(params: Any) -> list:
    """Wraps the single parameter value the way net/rpc does: `[value]`."""
    if isinstance(params, BaseModel):
        params = params.model_dump(mode="json", by_alias=True)
    return [params]


def same_id(response_id: IdType, request_id: int) -> bool:
    if isinstance(response_id, str):
        return response_id.isdigit() and int(response_id) == request_id
    return response_id == request_id


class ClientJsonRPC():
    """
        JSON RPC client over a byte stream.
        One call at a time: a request is written and the stream is read until a whole JSON value has arrived.
    """

    default_encoding = "UTF-8"

    def __init__(
        self,
        send: ClientSendType,
        recv: ClientRecvType,
        version: Optional[str] = None,
    ):
        """
        :param send: message sending function
        :param recv: data receiving function
        :param version: value of the `jsonrpc` member, omitted when None
        """
        self.__send = send
        self.__recv = recv
        self.__version = version
        self.__id = 0
        self.__buffer = ""
        self.__decoder = json.JSONDecoder()
        self.__text_decoder = codecs.getincrementaldecoder(self.default_encoding)()
        self.__reset_scan()

    async def send(self, message: str):
        b_message = message.encode(self.default_encoding)
        await self.__send(b_message)

    def __reset_scan(self):
        self.__scanned = 0
        self.__depth = 0
        self.__started = False
        self.__in_string = False
        self.__escape = False

    def __discard(self):
        self.__buffer = ""
        self.__text_decoder.reset()
        self.__reset_scan()

    def __scan(self) -> bool:
        """
            Walks the text received since the last scan, tracking brackets and strings.
            True once a top-level value may be complete: its closing bracket arrived,
            or a line ended after a value started outside any object or array,
            or a line ended inside a string.
        """
        ready = False
        for char in self.__buffer[self.__scanned:]:
            if not char.isspace():
                self.__started = True
            if self.__in_string:
                if self.__escape:
                    self.__escape = False
                elif char == "\\":
                    self.__escape = True
                elif char == '"':
                    self.__in_string = False
                elif char == "\n":
                    ready = True
            elif char == '"':
                self.__in_string = True
            elif char in "{[":
                self.__depth += 1
            elif char in "}]":
                self.__depth -= 1
                if self.__depth <= 0:
                    ready = True
            elif char == "\n" and self.__depth <= 0 and self.__started:
                ready = True
        self.__scanned = len(self.__buffer)
        return ready

    def __decode(self) -> Any:
        """
            Takes one JSON value off the head of the buffer.
            Only called when the scan says a value may be complete, so a decode error is final.
        """
        text = self.__buffer.lstrip()
        try:
            value, end = self.__decoder.raw_decode(text)
        except json.JSONDecodeError as e:
            logger.debug(f"INVALID JSON Received: {text!r}")
            self.__discard()
            raise ParseError(data=e.msg) from e
        self.__buffer = text[end:]
        self.__reset_scan()
        return value

    async def recv(self) -> Any:
        """
            Receiving one complete JSON value.
            Bytes that follow the value stay buffered for the next call.
        :return decoded value
        """
        while True:
            if self.__scan():
                value = self.__decode()
                logger.trace(f"Response: {json.dumps(value)}")
                return value
            elif len(self.__buffer) > MAX_MESSAGE_SIZE:
                self.__discard()
                raise ParseError(data=f"message exceeds {MAX_MESSAGE_SIZE} characters")
            data = await self.__recv()
            if is_data_empty(data):
                raise ConnectionClosedError(data=self.__buffer or None)
            try:
                self.__buffer += self.__text_decoder.decode(data)
            except UnicodeDecodeError as e:
                logger.debug(f"INVALID UTF-8 Received: {data!r}")
                self.__discard()
                raise ParseError(data=str(e)) from e

    def __get_request(self, func_name: str, params: Any) -> ProcRequest:
        request_id = self.__id
        self.__id += 1
        fields = dict(method=func_name, params=get_params(params), id=request_id)
        if self.__version is not None:
            fields["jsonrpc"] = self.__version
        return ProcRequest(**fields)

    @staticmethod
    def __get_result(response_data: Any, request: ProcRequest, result_type: Any) -> Any:
        try:
            response = Response.model_validate(response_data)
        except ValidationError as e:
            raise InvalidResponseError(data=e.errors(include_url=False)) from e
        if not same_id(response.id, request.id):
            raise InvalidResponseError(
                data=f"response id {response.id!r} does not match request id {request.id}")
        if response.error is not None:
            raise Error.from_error(response.error)
        if "result" not in response.model_fields_set:
            raise InvalidResponseError(data="response has neither result nor error")
        try:
            return TypeAdapter(result_type).validate_python(response.result)
        except ValidationError as e:
            raise InvalidResponseError(data=e.errors(include_url=False)) from e

    async def call(self, func_name: str, params: Any = None, result_type: Type[T] = Any) -> T:
        """
            Remote procedure call.
        :param func_name: name of the remote procedure
        :param params: single parameter value, sent as `[params]`
        :param result_type: type the result is validated against
        :return validated result
        """
        request = self.__get_request(func_name, params)
        json_request = request.model_dump_json(by_alias=True, exclude_unset=True)
        logger.trace(f"Send request: {json_request}")
        await self.send(json_request)
        response_data = await self.recv()
        return self.__get_result(response_data, request, result_type)
