"""Entry-point script – simply delegates to Uvicorn with the FastAPI app that
lives in the ``sqlshift`` package."""

import uvicorn

from sqlshift import config


if __name__ == "__main__":
    # For development, the uvicorn command can be used directly:
    # uvicorn sqlshift:app --reload --port 5001
    uvicorn.run(
        "sqlshift:app",
        host=config.get('api', {}).get('host', "127.0.0.1"),
        port=int(config.get('api', {}).get('port', 5001)),
        reload=bool(config.get('api', {}).get('debug', False)),
    )
