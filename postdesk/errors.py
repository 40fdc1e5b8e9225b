"""
Error taxonomy for Postdesk.
"""


class PostdeskError(Exception):
    """Base class for all Postdesk errors."""


class ValidationError(PostdeskError):
    """A required field is empty or the store rejected a constraint."""


class StoreError(PostdeskError):
    """The post store failed (transport, auth or query failure)."""


class NotFound(StoreError):
    """The requested post id does not resolve to a stored post."""

    def __init__(self, post_id: str):
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id
