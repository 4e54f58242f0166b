"""MediaShelf Main Application."""

import sys

import uvicorn
from pydantic import ValidationError

from mediashelf import __version__
from mediashelf.config.database import get_db
from mediashelf.config.settings import get_config
from mediashelf.exceptions import MediaShelfError
from mediashelf.utils.logging import get_logger
from mediashelf.web.app import create_app

log = get_logger()


def run() -> int:
    """Prepare the database and serve the web API until interrupted.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        config = get_config()
        log.info(f"MediaShelf: Starting v{__version__}")
        log.info(f"MediaShelf: {config}")

        get_db()

        if not config.web.enabled:
            log.warning("MediaShelf: Web server disabled, nothing to serve")
            return 0

        uv_config = uvicorn.Config(
            create_app(),
            host=config.web.host,
            port=config.web.port,
            log_config=None,
            proxy_headers=True,
            forwarded_allow_ips="*",
        )
        log.success(
            "MediaShelf: API started at "
            f"\033[92mhttp://{config.web.host}:{config.web.port} "
            "(ctrl+c to stop)\033[0m"
        )
        uvicorn.Server(uv_config).run()
    except ValidationError as e:
        log.error(f"MediaShelf: Configuration validation error: {e}")
        return 1
    except MediaShelfError as e:
        log.error(f"MediaShelf: {e}")
        return 1
    except OSError as e:
        log.error(f"MediaShelf: File system error: {e}")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv (list[str] | None): Command-line arguments (unused).

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        return run()
    except KeyboardInterrupt:
        log.info("MediaShelf: Application interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
