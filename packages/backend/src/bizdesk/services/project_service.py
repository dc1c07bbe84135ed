"""Project service — projects and their status updates."""

import uuid
from typing import Optional

from sqlalchemy import delete, select

from bizdesk.auth.ownership import PROJECT_UPDATES, PROJECTS, ensure_can
from bizdesk.db.models import Project, ProjectUpdate
from bizdesk.services.scoped import ScopedResourceService


class ProjectService(ScopedResourceService[Project]):
    model = Project
    policy = PROJECTS
    order_by = (Project.created_at.desc(),)
    label = "project"
    member_fields = ("manager_id", "team")

    def _prepare(self, fields):
        if fields.get("team") is not None:
            fields["team"] = [str(member) for member in fields["team"]]
        return fields

    async def _before_delete(self, resource: Project) -> None:
        await self.db.execute(
            delete(ProjectUpdate).where(ProjectUpdate.project_id == resource.id)
        )

    # ─── Project updates ────────────────────────────────

    async def list_updates(self, project_id: uuid.UUID) -> Optional[list[ProjectUpdate]]:
        """Updates for a project, newest first. None if the project is out of scope."""
        project = await self.get(project_id)
        if project is None:
            return None
        result = await self.db.execute(
            select(ProjectUpdate)
            .where(ProjectUpdate.project_id == project.id)
            .order_by(ProjectUpdate.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_update(
        self, project_id: uuid.UUID, title: str, content: str
    ) -> Optional[ProjectUpdate]:
        project = await self.get(project_id)
        if project is None:
            return None
        update = ProjectUpdate(
            project_id=project.id,
            organization_id=self.actor.organization_id,
            title=title,
            content=content,
            created_by=self.actor.user_id,
        )
        self.db.add(update)
        await self.db.commit()
        await self.db.refresh(update)
        return update

    async def delete_update(self, project_id: uuid.UUID, update_id: uuid.UUID) -> bool:
        project = await self.get(project_id)
        if project is None:
            return False
        result = await self.db.execute(
            select(ProjectUpdate).where(
                ProjectUpdate.id == update_id,
                ProjectUpdate.project_id == project.id,
            )
        )
        update = result.scalars().first()
        if update is None:
            return False
        ensure_can("delete", self.actor, update, PROJECT_UPDATES)
        await self.db.delete(update)
        await self.db.commit()
        return True
