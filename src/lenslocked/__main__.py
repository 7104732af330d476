"""lenslocked entrypoint.

Run with:
  python -m lenslocked
"""

import os

import uvicorn

from lenslocked.config import configure_logging, load_config, prod_requested


def main() -> None:
    config = load_config(required=prod_requested())
    configure_logging(config)
    reload = os.getenv("LENSLOCKED_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("lenslocked.app:create_app", factory=True, host=config.host, port=config.port, reload=reload)


if __name__ == "__main__":
    main()
