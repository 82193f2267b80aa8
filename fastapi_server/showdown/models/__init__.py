"""
SQLModel models for the CP showdown tournament.
"""
from showdown.models.season import Season
from showdown.models.entrant import Entrant
from showdown.models.match import Match
from showdown.models.vote import Vote
from showdown.models.admin_event import AdminEvent

__all__ = [
    "Season",
    "Entrant",
    "Match",
    "Vote",
    "AdminEvent",
]
