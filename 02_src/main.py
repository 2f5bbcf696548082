"""Main entry point for the fitness coach bot."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    # Imported after .env is loaded so settings see it
    from coachbot.api import create_fastapi_app
    from coachbot.api.routes import control
    from coachbot.config import load_settings
    from coachbot.logging_config import setup_logging
    from sim import Sim

    settings = load_settings()
    setup_logging(settings.log_level)

    api_url = f"http://{settings.api_host}:{settings.api_port}"

    # Set SIM instance for control router
    control.set_sim_instance(Sim(api_url=api_url))

    app = create_fastapi_app()

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
