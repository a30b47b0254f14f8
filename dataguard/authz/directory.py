"""
Role directory: read-only lookup of users -> roles -> grants.

A ``RoleDirectory`` is an immutable snapshot. Reloading produces a new
snapshot; evaluations holding the old one are unaffected.
"""

from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union
import logging

from ..types.errors import DirectoryError, UnknownUserError, ValidationError
from ..util.config import load_config_file
from .types import Grant, Role, User, nonempty


logger = logging.getLogger(__name__)


def _index(kind: str, entries: Iterable[Union[User, Role]], source: Optional[str]) -> Dict[str, Any]:
    index: Dict[str, Any] = {}
    for entry in entries:
        key = entry.id.lower()
        if key in index:
            raise DirectoryError(
                f"Directory defines {kind} {entry.id} more than once (case-insensitive)",
                source=source,
                details={'kind': kind, 'ids': [index[key].id, entry.id]}
            )
        index[key] = entry
    return index


class RoleDirectory:
    """
    Immutable snapshot of users and roles, keyed by lowercased identifier.

    Example:
        directory = RoleDirectory.from_dict({
            "users": {"alice": {"roles": ["reader"]}},
            "roles": {"reader": {"grants": [{"actions": ["SELECT"], "resources": {}}]}},
        })
        directory.grants_for("ALICE")
    """

    def __init__(self, users: Iterable[User] = (), roles: Iterable[Role] = (),
                 source: Optional[str] = None):
        """
        Raises:
            DirectoryError: If two users or two roles share an id case-insensitively
        """
        self._users: Mapping[str, User] = MappingProxyType(_index('user', users, source))
        self._roles: Mapping[str, Role] = MappingProxyType(_index('role', roles, source))

    @property
    def users(self) -> Mapping[str, User]:
        return self._users

    @property
    def roles(self) -> Mapping[str, Role]:
        return self._roles

    def get_user(self, user_id: Optional[str]) -> Optional[User]:
        """Look up a user case-insensitively."""
        if not nonempty(user_id):
            return None
        return self._users.get(user_id.lower())

    def has_user(self, user_id: Optional[str]) -> bool:
        return self.get_user(user_id) is not None

    def get_role(self, role_id: str) -> Optional[Role]:
        return self._roles.get(role_id.lower())

    def grants_for(self, user_id: str) -> FrozenSet[Grant]:
        """
        Return the union of grants across every role attached to a user.

        Raises:
            UnknownUserError: If the user is not in the directory
        """
        user = self.get_user(user_id)
        if user is None:
            raise UnknownUserError(user_id)

        grants = set()
        for role_id in user.roles:
            role = self.get_role(role_id)
            if role is not None:
                grants.update(role.grants)
        return frozenset(grants)

    def dangling_roles(self) -> Dict[str, FrozenSet[str]]:
        """Map each user to the role ids it references that the directory lacks."""
        result = {}
        for key, user in self._users.items():
            missing = frozenset(role_id for role_id in user.roles if self.get_role(role_id) is None)
            if missing:
                result[key] = missing
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the directory data representation."""
        return {
            'users': {key: user.to_dict() for key, user in self._users.items()},
            'roles': {key: role.to_dict() for key, role in self._roles.items()}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None,
                  strict: bool = False) -> 'RoleDirectory':
        """
        Build a snapshot from ``{"users": {...}, "roles": {...}}``.

        A user may reference a role the directory does not define; that role
        contributes no grants. With ``strict`` such references are corrupt data.

        Raises:
            DirectoryError: If the data is structurally corrupt
        """
        if not isinstance(data, dict):
            raise DirectoryError("Directory data must be a mapping", source=source)

        raw_users = data.get('users') or {}
        raw_roles = data.get('roles') or {}
        if not isinstance(raw_users, dict):
            raise DirectoryError("Directory 'users' must be a mapping", source=source)
        if not isinstance(raw_roles, dict):
            raise DirectoryError("Directory 'roles' must be a mapping", source=source)

        try:
            users = [User.from_dict(str(user_id), value) for user_id, value in raw_users.items()]
            roles = [Role.from_dict(str(role_id), value) for role_id, value in raw_roles.items()]
        except ValidationError as e:
            raise DirectoryError(
                f"Corrupt directory data: {e.message}",
                source=source,
                details=dict(e.details),
                cause=e
            )

        directory = cls(users=users, roles=roles, source=source)
        dangling = directory.dangling_roles()
        if dangling and strict:
            raise DirectoryError(
                "Directory references undefined roles",
                source=source,
                details={user_id: sorted(missing) for user_id, missing in dangling.items()}
            )
        for user_id, missing in dangling.items():
            logger.warning(f"User {user_id} references unknown roles: {', '.join(sorted(missing))}")
        logger.info(f"Loaded directory with {len(directory.users)} users and {len(directory.roles)} roles")
        return directory

    @classmethod
    def from_file(cls, file_path: str, strict: bool = False) -> 'RoleDirectory':
        """
        Load a snapshot from a JSON or YAML file.

        Raises:
            DirectoryError: If the file is missing, unreadable or corrupt
        """
        try:
            data = load_config_file(file_path)
        except (OSError, ValueError) as e:
            raise DirectoryError(f"Cannot read directory file: {e}", path=file_path, cause=e)
        return cls.from_dict(data, source=file_path, strict=strict)

    def __len__(self) -> int:
        return len(self._users)

    def __repr__(self) -> str:
        return f"RoleDirectory(users={len(self._users)}, roles={len(self._roles)})"
