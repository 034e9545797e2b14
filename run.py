#!/usr/bin/env python3
"""Run script for Quiet Hours."""

import logging

import uvicorn

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    uvicorn.run(
        "quiethours.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
