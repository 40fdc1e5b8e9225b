"""Navigation collaborator for the admin views."""

from typing import Optional

HOME_PATH = "/"
ADMIN_PATH = "/admin"


def edit_path(post_id: str) -> str:
    return f"/edit-post/{post_id}"


class Navigator:
    """Records where a view asked to go; the HTTP layer turns it into a redirect."""

    def __init__(self):
        self.location: Optional[str] = None

    def go_to(self, path: str) -> None:
        self.location = path
