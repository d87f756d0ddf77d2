"""Entry: start the API server."""
import logging
import uvicorn

from relistify.config import API_HOST, API_PORT, LOG_LEVEL

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s: %(name)s: %(message)s")
    uvicorn.run(
        "relistify.api.app:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
