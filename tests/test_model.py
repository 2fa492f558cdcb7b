import json

import pytest
from pydantic import ValidationError

from jrpc_client.model import (Args, Error, InternalError, InvalidParamsError,
                               MethodNotFoundError, ParseError, ProcRequest,
                               Reply, Response, SubArgs)


def test_args_json_shape():
    args = Args(A=3, B=10, S=SubArgs(A=1, B=2))
    assert json.loads(args.model_dump_json()) == {"A": 3, "B": 10, "S": {"A": 1, "B": 2}}


def test_args_is_frozen():
    args = Args(A=3, B=10)
    with pytest.raises(ValidationError):
        args.A = 4


def test_args_render_like_go():
    assert str(Args(A=3, B=10, S=SubArgs(A=1, B=2))) == "{3 10 {1 2}}"


def test_zero_reply_render():
    assert str(Reply()) == "{[] }"


def test_reply_from_wire():
    reply = Reply.model_validate({"Args": [], "Str": "ok"})
    assert str(reply) == "{[] ok}"


def test_reply_null_args():
    reply = Reply.model_validate({"Args": None, "Str": "ok"})
    assert reply.args == []


def test_reply_with_args_render():
    reply = Reply.model_validate({
        "Args": [{"A": 3, "B": 10, "S": {"A": 1, "B": 2}}, {"A": 0, "B": 0, "S": {"A": 0, "B": 0}}],
        "Str": "two",
    })
    assert str(reply) == "{[{3 10 {1 2}} {0 0 {0 0}}] two}"


def test_request_omits_unset_version():
    request = ProcRequest(method="sayHello", params=[None], id=0)
    assert json.loads(request.model_dump_json(by_alias=True, exclude_unset=True)) == {
        "method": "sayHello", "params": [None], "id": 0,
    }


def test_response_error_forms():
    assert Response.model_validate({"id": 1, "error": "boom"}).error == "boom"
    error = Response.model_validate({"id": 1, "error": {"code": -32601, "message": "nope"}}).error
    assert error["code"] == -32601


def test_error_from_string():
    error = Error.from_error("foo failed")
    assert type(error) is Error
    assert error.code == -32000
    assert str(error) == "foo failed"


@pytest.mark.parametrize("code, error_class", [
    (-32700, ParseError),
    (-32601, MethodNotFoundError),
    (-32602, InvalidParamsError),
    (-32603, InternalError),
])
def test_error_from_object(code, error_class):
    error = Error.from_error({"code": code, "message": "m"})
    assert isinstance(error, error_class)
    assert error.message == "m"


def test_error_unknown_code_keeps_code():
    error = Error.from_error({"code": -1, "message": "custom", "data": {"k": 1}})
    assert type(error) is Error
    assert error.code == -1
    assert str(error) == 'custom\n{"k": 1}'


def test_error_from_empty_string():
    error = Error.from_error("")
    assert error.code == -32000
    assert str(error) == "unspecified error"
