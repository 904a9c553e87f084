"""Main application entry point.

Serves the chat API and the NiceGUI chat page, either from one process
(default) or as two processes. Environment variables are loaded from .env.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

HOST = os.getenv("HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", "8000"))
UI_PORT = int(os.getenv("UI_PORT", "8080"))


def run_integrated() -> None:
    """Serve the API and the chat page from one uvicorn server on API_PORT."""
    import uvicorn
    from nicegui import ui

    # The page posts back to this same server
    os.environ.setdefault("API_BASE_URL", f"http://localhost:{API_PORT}")

    from assistant_chat.api.app import create_app
    from assistant_chat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()

    ui.run_with(
        app,
        title="Dex Chat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "assistant-chat-secret"),
    )

    logger.info(f"Chat UI and API on http://localhost:{API_PORT}/ (docs at /docs)")

    uvicorn.run(
        app,
        host=HOST,
        port=API_PORT,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the API (API_PORT) and the chat page (UI_PORT) as child processes.

    The page talks to the API through API_BASE_URL, which defaults to the
    local API process.
    """
    import subprocess
    import time

    env = dict(os.environ)
    env.setdefault("API_BASE_URL", f"http://localhost:{API_PORT}")

    logger.info(f"Starting API on http://localhost:{API_PORT}")
    logger.info(f"Starting chat UI on http://localhost:{UI_PORT}")

    api_proc = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "assistant_chat.api.app:app",
            "--host",
            HOST,
            "--port",
            str(API_PORT),
        ],
        env=env,
    )
    ui_proc = subprocess.Popen(
        [sys.executable, "-m", "assistant_chat.ui.chat_page"],
        env=env,
    )

    try:
        while api_proc.poll() is None and ui_proc.poll() is None:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for proc in (api_proc, ui_proc):
            proc.terminate()
            proc.wait()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run the API and the chat page on different ports.
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting Assistant Chat in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
