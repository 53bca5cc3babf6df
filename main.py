import logging

from finance_dashboard.app import App
from finance_dashboard.config import settings
from nicegui import ui

def main():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # Initialize the app (builds the UI)
    App()

    # Run NiceGUI
    ui.run(
        title=settings.app_title,
        native=settings.native,
        port=settings.port,
        window_size=(settings.window_width, settings.window_height) if settings.native else None,
        reload=False,
    )

if __name__ in {"__main__", "__mp_main__"}:
    main()
