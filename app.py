import logging
import os
import socket

from gg_notes.logging_config import configure_logging
from gg_notes.ui.dash_app import create_dash_app

configure_logging()
logger = logging.getLogger("gg_notes.app")

CONFIG_ROOT = os.getenv("GG_NOTES_CONFIG", "config")

app = create_dash_app(CONFIG_ROOT)
server = app.server


def port_is_free(port: int, host: str = "localhost") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex((host, port)) != 0


def pick_port(preferred: int, attempts: int = 100) -> int:
    """First free port at or above preferred; preferred itself if none are free."""
    for port in range(preferred, preferred + attempts):
        if port_is_free(port):
            return port
    return preferred


def main() -> None:
    preferred = int(os.getenv("PORT", "8051"))
    port = pick_port(preferred)
    debug = os.getenv("DEBUG", "0") == "1"

    if port != preferred:
        logger.warning("Preferred port taken", extra={"preferred_port": preferred, "port": port})
    logger.info("Starting notes browser", extra={"config_root": CONFIG_ROOT, "port": port, "debug": debug})

    app.run(host="0.0.0.0", port=port, debug=debug)


if __name__ == "__main__":
    main()
