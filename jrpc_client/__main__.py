import sys

from jrpc_client.demo import main

sys.exit(main())
