"""Helpers shared by the route modules."""
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def wants_json(request: Request) -> bool:
    """Check if the client prefers JSON response (AJAX request)."""
    accept = request.headers.get("accept", "")
    return "application/json" in accept
