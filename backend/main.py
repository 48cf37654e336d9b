"""
IP Weather Backend — FastAPI
Modular entry point. All logic is split across:
  config.py, errors.py, ip_utils.py, cache.py, models.py, data_fetchers.py, routes.py
"""

import logging

from config import HOST, PORT, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)

# Import the FastAPI app from routes
from routes import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn
    logging.getLogger("ipweather").info(f"Server running at port: {PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
