"""
Vercel Serverless Entry Point

Vercel's Python runtime imports this module and serves the exported
'app' for requests routed to the backend (/api/* and /auth/*).
"""

from app import create_app

app = create_app()
