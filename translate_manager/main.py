import uvicorn

from translate_manager.core.app import create_app
from translate_manager.core.config import get_settings


def run() -> None:
    """Entrypoint for `translate-manager-api` script."""
    settings = get_settings()
    uvicorn.run(
        "translate_manager.main:create_app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        factory=True,
    )


if __name__ == "__main__":
    run()
