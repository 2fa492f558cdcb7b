from typing import Awaitable, Callable, Tuple, Union

ClientSendType = Callable[[bytes], Awaitable[None]]
ClientRecvType = Callable[[], Awaitable[bytes]]
Peername = Tuple[str, int]
Address = Union[Peername, str]
