"""Post service — the author-only owned resource.

Learn: Posts are not organization-scoped. Visibility comes entirely from
the ownership policy: non-admins list their own posts plus published
public ones, and only the author or an admin may edit or delete —
holding posts:update / posts:delete is not enough on someone else's post.
"""

from bizdesk.auth.ownership import POSTS
from bizdesk.db.models import Post
from bizdesk.services.scoped import ScopedResourceService


class PostService(ScopedResourceService[Post]):
    model = Post
    policy = POSTS
    order_by = (Post.created_at.desc(),)
    label = "post"

    def _prepare(self, fields):
        # Authorship is never client-controlled.
        fields.pop("author_id", None)
        return fields
