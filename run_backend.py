#!/usr/bin/env python
"""Run the API under uvicorn with auto-reload."""
import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "todo_api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
