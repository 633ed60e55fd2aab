import logging
import socket

import uvicorn

from cafeteria.api.api_run import app
from cafeteria.utilities.config import APP_HOST, APP_PORT, DEBUG


def lan_address() -> str:
    """Best-effort LAN address of this machine, '127.0.0.1' when there is none."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # UDP connect sends nothing; it only selects the outbound interface
        probe.connect(("10.255.255.255", 1))
        return str(probe.getsockname()[0])
    except OSError:
        return "127.0.0.1"
    finally:
        probe.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    address = lan_address()
    print(f"Cafeteria inventory running on http://localhost:{APP_PORT} (Press CTRL+C to quit)")
    if address != "127.0.0.1":
        print(f"Kitchen tablets on the same network can use http://{address}:{APP_PORT}")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
