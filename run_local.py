#!/usr/bin/env python3
"""
Local development runner.

Serves the API with auto-reload on port 4000, where the frontend expects it.
"""

import uvicorn


def main():
    """Run the application locally"""
    print("Starting StreamFlow API")
    print("API docs (DEBUG=true) at: http://localhost:4000/docs")
    print("-" * 50)

    uvicorn.run(
        "streamflow.main:app",
        host="0.0.0.0",
        port=4000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
