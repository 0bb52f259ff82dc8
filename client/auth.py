import json
import logging

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class AuthStore:
    """Holds the bearer token and signed-in user for a client shell."""

    def __init__(self, storage):
        self.storage = storage
        self.token = storage.get_item(TOKEN_KEY)
        self.user = None

        raw_user = storage.get_item(USER_KEY)
        if self.token and raw_user:
            try:
                self.user = json.loads(raw_user)
            except ValueError as exc:
                logger.error("Error loading user from storage: %s", exc)
                self.logout()
        elif self.token or raw_user:
            # half a session is no session
            self.logout()

    def login_success(self, token: str, user: dict):
        self.token = token
        self.user = user
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(user))

    def update_user(self, user: dict):
        self.user = user
        self.storage.set_item(USER_KEY, json.dumps(user))

    def logout(self):
        self.token = None
        self.user = None
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.user.get("role") == "admin"

    def auth_header(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
