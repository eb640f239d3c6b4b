import logging

import uvicorn

from meshy_relay.api import create_app
from meshy_relay.config import get_settings

settings = get_settings()

# Configure basic logging
logging.basicConfig(level=settings.log_level.upper(), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = create_app(settings)

def run() -> None:
    logger.info(f"Server running on http://localhost:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)

if __name__ == "__main__":
    run()
