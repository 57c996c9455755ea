# trello.py
from __future__ import annotations

import urllib.parse
from typing import List, Optional

from pydantic import BaseModel

from .github import request_json


TRELLO_API = "https://api.trello.com/1"


class Card(BaseModel):
    id: str
    name: str
    url: str = ""


class TrelloClient:
    """Just enough of the Trello API to comment on a plugin's release card."""

    def __init__(self, key: str, token: str, base_url: str = TRELLO_API):
        self.key = key
        self.token = token
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str, **params: str) -> str:
        query = {"key": self.key, "token": self.token, **params}
        return f"{self.base_url}/{path.lstrip('/')}?{urllib.parse.urlencode(query)}"

    def board_cards(self, board: str) -> List[Card]:
        data = request_json("GET", self._url(f"boards/{board}/cards", fields="name,url"))
        return [Card.model_validate(c) for c in data]

    def find_card(self, board: str, text: str) -> Optional[Card]:
        """First card on the board whose name contains `text` (case-insensitive)."""
        needle = text.lower()
        for card in self.board_cards(board):
            if needle in card.name.lower():
                return card
        return None

    def comment_card(self, card_id: str, text: str) -> None:
        request_json("POST", self._url(f"cards/{card_id}/actions/comments", text=text))
