"""WSGI entrypoint for deploying the transbundle proxy behind Passenger."""

from transbundle.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
