import os

import uvicorn

from smart_categorizer.core import settings
from smart_categorizer.logger import get_logging_config


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = settings.get_env_int("PORT", settings.DEFAULT_PORT, min_value=1)
    uvicorn.run(
        "smart_categorizer.app:app",
        host=host,
        port=port,
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    main()
