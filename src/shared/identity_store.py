import os
from typing import Optional, Protocol

from src.shared.settings import CosmosSettings
from src.specs.common.errors import ConfigurationError
from src.specs.models.post import IdentityLink

IDENTITY_STORE_BACKENDS = ("cosmos", "file", "auto")


class IdentityLinkStore(Protocol):
    async def get(self, local_user_id: str) -> Optional[IdentityLink]: ...

    async def set(self, link: IdentityLink, merge: bool = True) -> None: ...


def select_identity_store() -> IdentityLinkStore:
    """Pick the identity link backend from IDENTITY_STORE_BACKEND (cosmos, file or auto)."""
    backend = (os.getenv("IDENTITY_STORE_BACKEND") or "auto").strip().lower()
    if backend not in IDENTITY_STORE_BACKENDS:
        raise ConfigurationError(
            f"Unknown IDENTITY_STORE_BACKEND '{backend}'",
            details={"allowed": list(IDENTITY_STORE_BACKENDS)},
        )
    if backend == "cosmos" or (backend == "auto" and CosmosSettings.is_configured()):
        from src.shared.identity_store_cosmos import CosmosIdentityLinkStore

        return CosmosIdentityLinkStore()
    from src.shared.identity_store_file import FileIdentityLinkStore

    return FileIdentityLinkStore()
