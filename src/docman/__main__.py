"""docman entrypoint.

Run with:
  python -m docman
"""

import logging
import os
import uvicorn

def main() -> None:
    host = os.getenv("DOCMAN_HOST", "0.0.0.0")
    port = int(os.getenv("DOCMAN_PORT", "10000"))
    reload = os.getenv("DOCMAN_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    logging.basicConfig(
        level=os.getenv("DOCMAN_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    )
    uvicorn.run("docman.app:app", host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
