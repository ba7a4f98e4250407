"""Entrypoint: run the SKU Match Engine server."""

import uvicorn

from sku_match.api.app import create_app
from sku_match.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
