"""HR meeting service."""

from bizdesk.auth.ownership import MEETINGS
from bizdesk.db.models import Meeting
from bizdesk.services.project_service import ProjectService
from bizdesk.services.scoped import ScopedResourceService


class ProjectNotFound(LookupError):
    """The referenced project does not exist in the actor's scope."""


class MeetingService(ScopedResourceService[Meeting]):
    model = Meeting
    policy = MEETINGS
    order_by = (Meeting.meeting_date.asc(), Meeting.meeting_time.asc())
    label = "meeting"

    async def create(self, data):
        # The project must be visible to the actor, not merely exist.
        project = await ProjectService(self.db, self.actor).find(data["project_id"])
        if project is None:
            raise ProjectNotFound(str(data["project_id"]))
        return await super().create(data)
