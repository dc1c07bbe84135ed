"""CRM lead service.

Learn: Leads belong to the actor's organization. An actor without an
organization only ever sees leads assigned to them.
"""

from bizdesk.auth.ownership import LEADS
from bizdesk.db.models import Lead
from bizdesk.services.scoped import ScopedResourceService


class LeadService(ScopedResourceService[Lead]):
    model = Lead
    policy = LEADS
    order_by = (Lead.created_at.desc(),)
    label = "lead"
    member_fields = ("assigned_to",)
