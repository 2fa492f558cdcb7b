from jrpc_client.client import ClientJsonRPC
from jrpc_client.model import Args, Error, Reply, SubArgs
from jrpc_client.socket_base.socket_fabric import client_sr

__version__ = "0.1.0"
