"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from datetime import datetime

from tunecrate.domain.entities import PendingUpload, PendingUploadStatus, Track, User
from tunecrate.domain.exceptions import AuthorizationError
from tunecrate.domain.value_objects import Playlist


# Hey future me, these are PORTS (Hexagonal Architecture)! Services depend on these ABCs,
# the SQLAlchemy implementations live in infrastructure/persistence/repositories.py. Tests
# can swap in fakes. If you change an interface, ALL implementations must change too!
class IAccountRepository(ABC):
    """Repository interface for User entities."""

    @abstractmethod
    async def add(self, email: str, password_hash: str) -> User:
        """Insert a new account with empty preferences. Email must be normalized."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None:
        """Get an account by ID."""

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Get an account by normalized email."""

    @abstractmethod
    async def set_likes(self, user_id: int, likes: tuple[str, ...]) -> bool:
        """Replace likes. Returns False when no row matched."""

    @abstractmethod
    async def set_playlists(
        self, user_id: int, playlists: tuple[Playlist, ...]
    ) -> bool:
        """Replace playlists. Returns False when no row matched."""


class ITrackRepository(ABC):
    """Repository interface for Track entities."""

    @abstractmethod
    async def add(
        self,
        title: str,
        url: str,
        artist: str | None = None,
        owner_email: str | None = None,
    ) -> Track:
        """Insert a track and return it with its assigned id."""

    @abstractmethod
    async def get_by_id(self, track_id: int) -> Track | None:
        """Get a track by ID."""

    @abstractmethod
    async def get_by_url(self, url: str) -> Track | None:
        """Get the newest track pointing at url."""

    @abstractmethod
    async def list_all(self) -> list[Track]:
        """All tracks, newest (highest id) first."""

    @abstractmethod
    async def update_metadata(
        self, track_id: int, title: str, artist: str | None
    ) -> bool:
        """Update title/artist. Returns False when no row matched."""

    @abstractmethod
    async def delete(self, track_id: int) -> bool:
        """Delete a track row. Returns False when no row matched."""


class IPendingUploadRepository(ABC):
    """Repository interface for the upload ledger."""

    @abstractmethod
    async def add(
        self,
        file_name: str,
        public_url: str,
        local_path: str | None,
        storage_key: str | None,
    ) -> PendingUpload:
        """Open a ledger entry in pending state."""

    @abstractmethod
    async def mark(
        self,
        entry_id: int,
        status: PendingUploadStatus,
        track_id: int | None = None,
        error: str | None = None,
    ) -> None:
        """Move an entry to a new status."""

    @abstractmethod
    async def list_open(self, older_than: datetime) -> list[PendingUpload]:
        """Pending or failed entries created before the cutoff."""


class IPasswordHasher(ABC):
    """Password hashing collaborator."""

    @abstractmethod
    async def hash(self, raw_password: str) -> str:
        """Hash a raw password."""

    @abstractmethod
    async def verify(self, raw_password: str, password_hash: str) -> bool:
        """Constant-time comparison of raw password against a stored hash."""

    async def verify_dummy(self, raw_password: str) -> None:
        """Spend comparable time for an unknown account. Default: nothing."""
        return None


class IAccessGuard(ABC):
    """Authorization collaborator gating every mutating operation."""

    @abstractmethod
    def authorize(self, token: str | None) -> bool:
        """Return True when token grants mutation rights. Must be side-effect free."""

    def require(self, token: str | None) -> None:
        """Raise AuthorizationError unless authorize(token) is True."""
        if not self.authorize(token):
            raise AuthorizationError()


class IObjectStorage(ABC):
    """Remote object storage (Supabase Storage protocol)."""

    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Upsert bytes under key and return the public URL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete the object stored under key."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Public URL for key."""


__all__ = [
    "IAccessGuard",
    "IAccountRepository",
    "IObjectStorage",
    "IPasswordHasher",
    "IPendingUploadRepository",
    "ITrackRepository",
]
