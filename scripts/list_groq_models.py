#!/usr/bin/env python3
"""
list_groq_models.py — Print the models available to the configured Groq key.

Useful when picking a value for GROQ_MODEL.

Usage:
    python scripts/list_groq_models.py
"""

import asyncio
import json
import os

from dotenv import load_dotenv
from groq import AsyncGroq

load_dotenv()


async def main() -> None:
    client = AsyncGroq(api_key=os.getenv("GROQ_API_KEY"))

    try:
        models = await client.models.list()
    except Exception as exc:
        print(f"Error listing models: {exc}")
        raise SystemExit(1)

    print("Available Groq models:")
    print(json.dumps(models.model_dump(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
