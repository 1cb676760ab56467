"""
VAANI Start - Main Entry Point

Wires together:
- Settings from the environment (.env supported)
- Reminder store (reminders.json)
- Brain (Groq when GROQ_API_KEY is set, local heuristic fallback otherwise)
- Due-reminder scanner (every minute, owned by the app lifespan)
- FastAPI app served by uvicorn
"""

import logging
import sys

import uvicorn

from vaani.config import Settings
from vaani.server import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main() -> int:
    settings = Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    print("\n" + "=" * 70)
    print("VAANI - Hindi-first voice assistant")
    print("=" * 70)
    print(f"  Reminders file : {settings.reminders_file}")
    print(f"  Delivery log   : {settings.delivered_log}")
    print(f"  Remote brain   : {'enabled (' + settings.groq_model + ')' if settings.has_brain_credential else 'disabled (local fallback)'}")
    print("=" * 70 + "\n")

    app = create_app(settings)

    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    except Exception as e:
        logger.error(f"Server failed: {e}", exc_info=True)
        return 1

    logger.info(f"Server on port {settings.port} stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
