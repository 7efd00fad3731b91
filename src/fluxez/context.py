"""Tenant Context

Organization / project / app identifiers attached to every request to scope it
to a tenant on the backend.
"""

from dataclasses import dataclass, replace

from .constants import HeaderName


@dataclass
class TenantContext:
    """Mutable tenant identifiers owned by a single client instance.

    Ids are opaque strings; no format validation is applied.
    """

    organization_id: str | None = None
    project_id: str | None = None
    app_id: str | None = None

    def clear(self) -> None:
        self.organization_id = None
        self.project_id = None
        self.app_id = None

    def copy(self) -> "TenantContext":
        return replace(self)

    @property
    def is_empty(self) -> bool:
        return not (self.organization_id or self.project_id or self.app_id)

    def to_headers(self) -> dict[str, str]:
        """Context headers for the fields that are currently set."""
        headers = {}
        if self.organization_id:
            headers[HeaderName.ORGANIZATION_ID] = self.organization_id
        if self.project_id:
            headers[HeaderName.PROJECT_ID] = self.project_id
        if self.app_id:
            headers[HeaderName.APP_ID] = self.app_id
        return headers
