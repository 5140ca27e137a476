"""Typed user preference payloads (likes and playlists).

Hey future me - these used to travel as untyped JSON blobs. Now raw client input is
parsed HERE, at the store boundary, so the DB only ever holds well-formed lists:
- likes: ordered list of track references (strings)
- playlists: ordered list of {"name": str, "tracks": [str, ...]}
Numbers are accepted as track references (the web UI sends numeric track ids) and
stored as strings. Anything else raises ValidationError.
"""

from dataclasses import dataclass, field
from typing import Any

from tunecrate.domain.exceptions import ValidationError


def _parse_track_ref(value: Any, where: str) -> str:
    # bool is an int subclass - reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValidationError(f"{where} must contain track references (strings)")
    ref = str(value).strip()
    if not ref:
        raise ValidationError(f"{where} must not contain empty track references")
    return ref


@dataclass(frozen=True)
class Playlist:
    """A named, ordered grouping of track references."""

    name: str
    tracks: tuple[str, ...] = ()

    @classmethod
    def from_raw(cls, raw: Any) -> "Playlist":
        if not isinstance(raw, dict):
            raise ValidationError("each playlist must be an object")
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("each playlist must have a non-empty name")
        tracks = raw.get("tracks", [])
        if not isinstance(tracks, list):
            raise ValidationError("playlist tracks must be an array")
        return cls(
            name=name.strip(),
            tracks=tuple(_parse_track_ref(t, "playlist tracks") for t in tracks),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "tracks": list(self.tracks)}


@dataclass(frozen=True)
class Preferences:
    """Likes and playlists of one account. Each collection is replaced as a whole."""

    likes: tuple[str, ...] = ()
    playlists: tuple[Playlist, ...] = field(default_factory=tuple)

    @staticmethod
    def parse_likes(raw: Any) -> tuple[str, ...]:
        """Validate raw likes input. An empty list is valid and clears the field."""
        if not isinstance(raw, list):
            raise ValidationError("likes must be an array")
        return tuple(_parse_track_ref(item, "likes") for item in raw)

    @staticmethod
    def parse_playlists(raw: Any) -> tuple[Playlist, ...]:
        """Validate raw playlists input. An empty list is valid and clears the field."""
        if not isinstance(raw, list):
            raise ValidationError("playlists must be an array")
        return tuple(Playlist.from_raw(item) for item in raw)

    # Stored rows can predate the typed format (NULL columns, legacy shapes written by
    # older clients). Reading must never fail, so malformed stored data degrades to empty.
    @classmethod
    def from_storage(cls, likes: Any, playlists: Any) -> "Preferences":
        try:
            parsed_likes = cls.parse_likes(likes if likes is not None else [])
        except ValidationError:
            parsed_likes = ()
        try:
            parsed_playlists = cls.parse_playlists(
                playlists if playlists is not None else []
            )
        except ValidationError:
            parsed_playlists = ()
        return cls(likes=parsed_likes, playlists=parsed_playlists)

    def likes_as_json(self) -> list[str]:
        return list(self.likes)

    def playlists_as_json(self) -> list[dict[str, Any]]:
        return [playlist.to_dict() for playlist in self.playlists]
