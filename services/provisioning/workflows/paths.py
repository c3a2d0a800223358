"""Host filesystem layout for tenant accounts and Apache vhosts."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from services.provisioning.workflows.config import WorkflowSettings


@dataclass(frozen=True)
class HostPathLayout:
    """Resolve per-user and per-domain paths on the managed host."""

    home_root: str
    sites_available: str
    sites_enabled: str
    apache_service: str

    @classmethod
    def from_settings(cls, settings: WorkflowSettings) -> "HostPathLayout":
        return cls(
            home_root=settings.home_root,
            sites_available=settings.apache_sites_available,
            sites_enabled=settings.apache_sites_enabled,
            apache_service=settings.apache_service,
        )

    def user_home(self, username: str) -> str:
        return posixpath.join(self.home_root, username)

    def public_html(self, username: str) -> str:
        return posixpath.join(self.user_home(username), "public_html")

    def log_dir(self, username: str) -> str:
        return posixpath.join(self.user_home(username), "logs")

    def tmp_dir(self, username: str) -> str:
        return posixpath.join(self.user_home(username), "tmp")

    def ssl_dir(self, username: str) -> str:
        return posixpath.join(self.user_home(username), "ssl")

    def ssh_dir(self, username: str) -> str:
        return posixpath.join(self.user_home(username), ".ssh")

    def vhost_path(self, domain: str) -> str:
        """Return the sites-available config file for ``domain``."""
        return posixpath.join(self.sites_available, f"{domain}.conf")

    def vhost_enabled_path(self, domain: str) -> str:
        """Return the sites-enabled link for ``domain``."""
        return posixpath.join(self.sites_enabled, f"{domain}.conf")
