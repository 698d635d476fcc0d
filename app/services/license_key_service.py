import secrets

from app.models.license import (
    LICENSE_KEY_ALPHABET,
    LICENSE_KEY_GROUPS,
    LICENSE_KEY_GROUP_SIZE,
    LICENSE_KEY_PATTERN,
    LICENSE_KEY_PREFIX,
)


def _group(size: int = LICENSE_KEY_GROUP_SIZE) -> str:
    return "".join(secrets.choice(LICENSE_KEY_ALPHABET) for _ in range(size))


def generate_license_key() -> str:
    """
    Mint a new license key, e.g. CTP-7KQF-M2XA-9PRD.
    Nothing here checks the key against already issued ones, the unique constraint on
    licenses.key is what catches a collision.
    """
    return "-".join([LICENSE_KEY_PREFIX, *(_group() for _ in range(LICENSE_KEY_GROUPS))])


def is_well_formed_license_key(key: str) -> bool:
    return bool(LICENSE_KEY_PATTERN.match(key))
