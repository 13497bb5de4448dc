"""Public interface for the IGDB adapter."""

from __future__ import annotations

from .client import IgdbProvider, game_query
from .schema import IgdbGame
from .translator import image_url, translate_game

__all__ = ["IgdbGame", "IgdbProvider", "game_query", "image_url", "translate_game"]
