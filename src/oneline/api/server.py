"""
ASGI Entry Point for the OneLine API.

Loads `.env` before the application factory runs so that settings read
from the environment are complete.

Usage
-----
    $ python -m oneline.api.server
    $ uvicorn oneline.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from oneline.api.app import create_app
from oneline.core.config import env_api_config
from oneline.core.settings import load_settings

load_dotenv(dotenv_path=Path(".env"))

app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    settings = load_settings()
    masked = env_api_config(settings).masked()

    print(f"{'[ API Config ]':=^60}")
    print(f"{'ONELINE_API_ENDPOINT':<24} : {masked['endpoint'] or '❌ Missing'}")
    print(f"{'ONELINE_API_MODEL':<24} : {masked['model']}")
    key_state = f"✅ Loaded ({masked['api_key']})" if masked["api_key"] else "❌ Missing"
    print(f"{'ONELINE_API_KEY':<24} : {key_state}")
    print(f"{'=' * 60}\n")

    uvicorn.run(
        "oneline.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_dev,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
