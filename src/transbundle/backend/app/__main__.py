"""Run the development server with ``python -m transbundle.backend.app``."""

import os

from . import create_app

DEFAULT_PORT = 5888

if __name__ == "__main__":
    port = int(os.getenv("TRANSBUNDLE_PORT", DEFAULT_PORT))
    create_app().run(host="0.0.0.0", port=port)
