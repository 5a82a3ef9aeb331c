"""
Profile Cache - local record of registered profiles and the active profile.

This cache is a convenience for role lookup and report attribution. It is
NOT the security boundary; credentials are checked by the authentication
provider first.
"""

from typing import List, Optional
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError

from civicflow.core.errors import DuplicateEmailError, PersistenceError
from civicflow.models.user import Profile, UserRole
from civicflow.services.blob_store import (
    BlobStore,
    CURRENT_PROFILE_KEY,
    HAS_SEEN_WELCOME_FLAG,
    PROFILES_KEY,
)
from civicflow.utils.blob_codec import CorruptBlob, decode_item, decode_items, encode_item, encode_items
from civicflow.utils.security import hash_password, normalize_email, verify_password

logger = logging.getLogger(__name__)

# (email, password, name, role) seeded on first run, one per role
EXAMPLE_PROFILES = [
    ("municipality@city.example", "municipality123", "City Hall", UserRole.MUNICIPALITY),
    ("hospital@city.example", "hospital123", "City Hospital", UserRole.HOSPITAL),
    ("citizen@example.com", "citizen123", "Example Citizen", UserRole.CITIZEN),
]


class ProfileCache:
    """
    Owns the local profile collection and the active-profile pointer.

    Both are persisted independently so the active profile survives restarts.
    """

    def __init__(self, blob_store: BlobStore, seed_examples: bool = True):
        self.blob_store = blob_store
        self.seed_examples = seed_examples
        self._profiles: List[Profile] = []
        self._current: Optional[Profile] = None

    def load(self) -> None:
        """Load profiles and the active profile, seeding examples into an empty cache."""
        self._profiles = self._load_profiles()
        self._current = self._load_current()

        if not self._profiles and self.seed_examples:
            self._seed()

    def _load_profiles(self) -> List[Profile]:
        try:
            raw = self.blob_store.get(PROFILES_KEY)
        except PersistenceError as e:
            logger.error(f"Profile blob could not be read, starting with no profiles: {e}")
            return []
        if raw is None:
            return []
        try:
            return [Profile.model_validate(item) for item in decode_items(raw)]
        except (CorruptBlob, PydanticValidationError) as e:
            logger.warning(f"Profile blob is corrupt, starting with no profiles: {e}")
            return []

    def _load_current(self) -> Optional[Profile]:
        try:
            raw = self.blob_store.get(CURRENT_PROFILE_KEY)
        except PersistenceError as e:
            logger.error(f"Active profile could not be read, nobody is signed in: {e}")
            return None
        if raw is None:
            return None
        try:
            item = decode_item(raw)
            return Profile.model_validate(item) if item else None
        except (CorruptBlob, PydanticValidationError) as e:
            logger.warning(f"Active profile blob is corrupt, nobody is signed in: {e}")
            return None

    def _seed(self) -> None:
        self._profiles = [
            Profile(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=hash_password(password),
                name=name,
                role=role,
            )
            for email, password, name, role in EXAMPLE_PROFILES
        ]
        self._save_profiles()
        logger.info(f"Seeded {len(self._profiles)} example profile(s)")

    def _save_profiles(self) -> None:
        items = [profile.model_dump(mode="json") for profile in self._profiles]
        self.blob_store.put(PROFILES_KEY, encode_items(items))

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def all(self) -> List[Profile]:
        return list(self._profiles)

    def find_by_email(self, email: str) -> Optional[Profile]:
        key = normalize_email(email)
        for profile in self._profiles:
            if normalize_email(profile.email) == key:
                return profile
        return None

    def register(self, email: str, password: str, name: str, role: UserRole) -> Profile:
        """
        Add a profile to the cache.

        Raises:
            DuplicateEmailError: a profile already uses this email (any case)
            PersistenceError: the profile collection could not be saved
        """
        if self.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        profile = Profile(
            id=str(uuid.uuid4()),
            email=email.strip(),
            password_hash=hash_password(password),
            name=name.strip(),
            role=UserRole(role),
        )
        self._profiles.append(profile)
        try:
            self._save_profiles()
        except PersistenceError:
            self._profiles.pop()
            raise

        logger.info(f"Profile registered: {profile.id} ({profile.role.value})")
        return profile

    def find_by_credentials(self, email: str, password: str) -> Optional[Profile]:
        """Case-insensitive email, exact password."""
        profile = self.find_by_email(email)
        if profile is None or not verify_password(password, profile.password_hash):
            return None
        return profile

    # ------------------------------------------------------------------
    # Active profile
    # ------------------------------------------------------------------

    def current(self) -> Optional[Profile]:
        return self._current

    def set_current(self, profile: Profile) -> None:
        self.blob_store.put(CURRENT_PROFILE_KEY, encode_item(profile.model_dump(mode="json")))
        self._current = profile
        logger.info(f"Active profile set: {profile.id}")

    def clear(self) -> None:
        self.blob_store.delete(CURRENT_PROFILE_KEY)
        self._current = None
        logger.info("Active profile cleared")

    # ------------------------------------------------------------------
    # Onboarding flag
    # ------------------------------------------------------------------

    def has_seen_welcome(self) -> bool:
        try:
            return self.blob_store.get_flag(HAS_SEEN_WELCOME_FLAG)
        except PersistenceError as e:
            logger.warning(f"Onboarding flag unreadable, assuming not seen: {e}")
            return False

    def complete_welcome(self) -> None:
        self.blob_store.set_flag(HAS_SEEN_WELCOME_FLAG, True)
