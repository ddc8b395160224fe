#!/usr/bin/env python3
"""
Run script for the sales call relay.

Usage:
    python run_relay.py

Make sure to:
1. Copy .env.example to .env and fill in your Twilio and OpenAI credentials
2. Expose the server publicly (e.g. ngrok http 3001)
3. Point your TwiML App's Voice URL to POST {PUBLIC_URL}/voice
"""

import logging
import os
import sys

# Configure logging VERY early, before any other imports that might use it
# This suppresses noisy debug output from third-party libraries
logging.getLogger("websockets").setLevel(logging.WARNING)
logging.getLogger("websockets.server").setLevel(logging.WARNING)
logging.getLogger("python_multipart").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("twilio").setLevel(logging.WARNING)

# Add src to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def main():
    """Run the relay server."""
    import uvicorn
    from src.server.app import configure_logging
    from src.utils.config import load_settings

    configure_logging()
    settings = load_settings()  # exits with status 1 on missing credentials

    print("=" * 60)
    print("Sales Call Relay")
    print("=" * 60)
    print(f"Server: http://{settings.host}:{settings.port}")
    print(f"Frontend origin: {settings.frontend_url}")
    print(f"Caller ID: {settings.twilio_phone_number}")
    print(f"OpenAI Model: {settings.openai_model}")
    print(f"Database: {settings.database_path}")
    print("=" * 60)
    print()
    print("Endpoints:")
    print(f"  - Health: http://{settings.host}:{settings.port}/health")
    print(f"  - Token: GET http://{settings.host}:{settings.port}/token")
    print(f"  - Twilio Voice: POST http://{settings.host}:{settings.port}/voice")
    print(f"  - Objections: WS ws://{settings.host}:{settings.port}/objections")
    print()

    # Use "info" log level for uvicorn to avoid verbose websocket frame logging
    uvicorn.run(
        "src.server.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
