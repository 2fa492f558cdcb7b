import json
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import NotRequired, TypedDict

ParamType = List[Any]

IdType = Union[int, str, None]


class SubArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    A: int = 0
    B: int = 0

    def __str__(self):
        return f"{{{self.A} {self.B}}}"


class Args(BaseModel):
    """Parameter payload of the `foo` procedure."""

    model_config = ConfigDict(frozen=True)

    A: int = 0
    B: int = 0
    S: SubArgs = SubArgs()

    def __str__(self):
        return f"{{{self.A} {self.B} {self.S}}}"


class Reply(BaseModel):
    """Result of the `foo` procedure.

    A Go server encodes an empty slice as `null`, so `Args: null` is read
    as an empty list.
    """

    model_config = ConfigDict(populate_by_name=True)

    args: List[Args] = Field(default_factory=list, alias="Args")
    string: str = Field("", alias="Str")

    @field_validator("args", mode="before")
    @classmethod
    def null_args(cls, value):
        return [] if value is None else value

    def __str__(self):
        args = " ".join(str(arg) for arg in self.args)
        return f"{{[{args}] {self.string}}}"


class ProcRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_rpc: Optional[str] = Field(None, alias="jsonrpc")
    method: str
    params: ParamType
    id: int


ErrorDataType = Any


class JsonRpcError(TypedDict):
    code: int
    message: str
    data: NotRequired[ErrorDataType]


class Response(BaseModel):
    id: IdType = None
    result: Any = None
    error: Union[JsonRpcError, str, None] = None


def _all_subclasses(cls):
    return set(cls.__subclasses__()).union(
        [s for c in cls.__subclasses__() for s in _all_subclasses(c)]
    )


SERVER_ERROR_CODE = -32000
SERVER_ERROR_MESSAGE = "Server error"
UNSPECIFIED_ERROR_MESSAGE = "unspecified error"
INVALID_REQUEST_ERROR_CODE = -32600
INVALID_REQUEST_ERROR_MESSAGE = "Invalid request"
METHOD_NOT_FOUND_ERROR_CODE = -32601
METHOD_NOT_FOUND_ERROR_MESSAGE = "Method not found"
INVALID_PARAMS_ERROR_CODE = -32602
INVALID_PARAMS_ERROR_MESSAGE = "Invalid params"
INTERNAL_ERROR_CODE = -32603
INTERNAL_ERROR_MESSAGE = "Internal error"
PARSE_ERROR_CODE = -32700
PARSE_ERROR_MESSAGE = "Parse error"

# client side, taken from the implementation-defined range
INVALID_RESPONSE_ERROR_CODE = -32001
INVALID_RESPONSE_ERROR_MESSAGE = "Invalid response"
CONNECTION_CLOSED_ERROR_CODE = -32002
CONNECTION_CLOSED_ERROR_MESSAGE = "Connection closed"


class Error(Exception):
    code: int = SERVER_ERROR_CODE
    message: str = SERVER_ERROR_MESSAGE
    data: ErrorDataType

    def __init__(self, code: Optional[int] = None, message: Optional[str] = None, data: ErrorDataType = None) -> None:
        self.code = code or self.__class__.code
        self.message = message or self.__class__.message
        self.data = data
        super().__init__(self.message)

    def __str__(self):
        if self.data is None:
            return f"{self.message}"
        else:
            return f"{self.message}\n{json.dumps(self.data, default=str)}"

    @classmethod
    def from_error(cls, error: Union[JsonRpcError, str]):
        """
            Builds an exception from the `error` member of a response.
            A bare string (Go net/rpc servers) keeps the generic server code,
            an empty one reads as "unspecified error" like net/rpc reports it.
            An error object is matched by code against the known subclasses.
        :param error: error member of the response
        :return Error
        """
        if isinstance(error, str):
            return cls(message=error or UNSPECIFIED_ERROR_MESSAGE)
        for error_class in _all_subclasses(cls):
            if error_class.code == error["code"]:
                return error_class(error["code"], error["message"], error.get("data"))
        return cls(error["code"], error["message"], error.get("data"))


class InvalidRequestError(Error):
    code: int = INVALID_REQUEST_ERROR_CODE
    message: str = INVALID_REQUEST_ERROR_MESSAGE


class MethodNotFoundError(Error):
    code: int = METHOD_NOT_FOUND_ERROR_CODE
    message: str = METHOD_NOT_FOUND_ERROR_MESSAGE


class InvalidParamsError(Error):
    code: int = INVALID_PARAMS_ERROR_CODE
    message: str = INVALID_PARAMS_ERROR_MESSAGE


class InternalError(Error):
    code: int = INTERNAL_ERROR_CODE
    message: str = INTERNAL_ERROR_MESSAGE


class ParseError(Error):
    code: int = PARSE_ERROR_CODE
    message: str = PARSE_ERROR_MESSAGE


class InvalidResponseError(Error):
    code: int = INVALID_RESPONSE_ERROR_CODE
    message: str = INVALID_RESPONSE_ERROR_MESSAGE


class ConnectionClosedError(Error):
    code: int = CONNECTION_CLOSED_ERROR_CODE
    message: str = CONNECTION_CLOSED_ERROR_MESSAGE
