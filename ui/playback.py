"""Single-active-video coordination.

Several video players can be on screen at once (challenge cards, feed
posts) but only one should be audible. A `PlaybackCoordinator` is created
per page/session and passed to whatever owns the players; there is no
module-level instance.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Playable(Protocol):
    muted: bool
    in_picture_in_picture: bool


class PlaybackCoordinator:
    """Tracks the one active video and mutes the previous one on switch.

    A video in picture-in-picture keeps its sound when another takes over.
    """

    def __init__(self) -> None:
        self._active: Optional[Playable] = None

    @property
    def active(self) -> Optional[Playable]:
        return self._active

    def set_active_video(self, video: Playable) -> None:
        previous = self._active
        if previous is not None and previous is not video and not previous.in_picture_in_picture:
            previous.muted = True
            logger.debug("Muted previous video %r", previous)
        self._active = video

    def clear_active_video(self, video: Playable) -> None:
        # Only the active video can clear itself
        if self._active is video:
            self._active = None
