"""streamboard server entry point"""

import uvicorn

from streamboard.app import create_app
from streamboard.core.config import get_settings

app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
