"""Run the HomeVoice server: ``python -m homevoice``."""

import uvicorn

from homevoice.adapters.web.server import build_app
from homevoice.config import AppConfig


def main():
    config = AppConfig.from_env()
    uvicorn.run(build_app(config), host="0.0.0.0", port=config.port, log_level="info")


if __name__ == "__main__":
    main()
