"""Run the API: python -m app."""

from app.server import main

main()
