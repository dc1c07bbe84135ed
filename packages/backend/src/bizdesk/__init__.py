"""BizDesk — business management platform API.

CRM, projects, HR and finance modules behind a single REST API, with
role/permission-based access control and owner-scoped resources.
"""

__version__ = "0.1.0"
