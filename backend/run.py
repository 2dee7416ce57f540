#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Uses the SQLite database from ``DATABASE_URL`` (default ``./mentorship.db``);
tables are created on startup.
"""
from pathlib import Path
import os

import uvicorn

if __name__ == "__main__":
    os.chdir(Path(__file__).parent)
    port = int(os.getenv("PORT", "8000"))

    print(f"Starting mentorship scheduling API on http://localhost:{port}")
    print(f"API Docs: http://localhost:{port}/docs")

    uvicorn.run("mentorship.main:app", host="0.0.0.0", port=port, reload=True, log_level="info")
