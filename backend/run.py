#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Uses a local SQLite database unless DATABASE_URL is set.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("DATABASE_URL", "sqlite:///./marketplace.db")

import uvicorn

if __name__ == "__main__":
    print("Starting marketplace API at http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run(
        "marketplace.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info",
    )
