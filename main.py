"""
Run with:   python main.py
Or `uvicorn main:app --port 8000` if you prefer the CLI.
"""

from chatrelay.chat_server import create_chat_app
from chatrelay.infrastructure import RelayConfig, setup_logging
import dotenv
import uvicorn

# Load environment variables from .env file and override existing ones
dotenv.load_dotenv(override=True)

config = RelayConfig.from_env()
setup_logging()

app = create_chat_app(config)

if __name__ == "__main__":

    # For reload to work, we need to use an import string instead of the app object
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=True,     # set True for auto-reload in dev
        log_level="info",
    )
