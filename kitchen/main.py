import logging

import uvicorn
from kitchen.api.api_run import app
from kitchen.utilities.config import APP_HOST, APP_PORT, DEBUG


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    local_url = f"http://localhost:{APP_PORT}"
    logging.getLogger(__name__).info("Uvicorn running on %s (Press CTRL+C to quit)", local_url)
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
