"""Apache virtual host rendering."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from services.provisioning.workflows.domain import RuntimeType
from services.provisioning.workflows.paths import HostPathLayout


@dataclass(frozen=True)
class VhostSpec:
    """Inputs for one port-80 virtual host."""

    domain: str
    document_root: str
    username: str
    runtime: RuntimeType
    php_version: str = "8.2"
    node_port: int = 3000
    www_redirect: bool = True
    custom_error_pages: Mapping[str, str] | None = None


def php_fpm_socket_path(username: str, php_version: str) -> str:
    return f"/run/php/php{php_version}-fpm-{username}.sock"


def render_vhost(spec: VhostSpec, layout: HostPathLayout) -> str:
    """Render the Apache config file body for ``spec``."""
    log_dir = layout.log_dir(spec.username)
    parts = [
        "<VirtualHost *:80>\n"
        f"    ServerName {spec.domain}\n"
        f"    ServerAlias www.{spec.domain}\n"
        f"    DocumentRoot {spec.document_root}\n"
        "\n"
        "    # Logging\n"
        f"    ErrorLog {log_dir}/{spec.domain}-error.log\n"
        f"    CustomLog {log_dir}/{spec.domain}-access.log combined\n",
        _directory_block(spec.document_root),
        _runtime_block(spec),
    ]
    if spec.www_redirect:
        parts.append(
            "\n"
            "    # Redirect www to non-www\n"
            "    RewriteEngine On\n"
            "    RewriteCond %{HTTP_HOST} ^www\\.(.+)$ [NC]\n"
            "    RewriteRule ^(.*)$ http://%1$1 [L,R=301]\n"
        )
    if spec.custom_error_pages:
        parts.append(_error_pages_block(spec.custom_error_pages))
    parts.append("</VirtualHost>")
    return "".join(parts)


def _directory_block(document_root: str) -> str:
    return (
        "\n"
        f"    <Directory {document_root}>\n"
        "        Options -Indexes +FollowSymLinks\n"
        "        AllowOverride All\n"
        "        Require all granted\n"
        "    </Directory>\n"
    )


def _runtime_block(spec: VhostSpec) -> str:
    if spec.runtime is RuntimeType.PHP:
        socket = php_fpm_socket_path(spec.username, spec.php_version)
        return (
            "\n"
            "    # PHP-FPM\n"
            "    <FilesMatch \\.php$>\n"
            f'        SetHandler "proxy:unix:{socket}|fcgi://localhost"\n'
            "    </FilesMatch>\n"
            "\n"
            "    <IfModule mod_headers.c>\n"
            '        Header set X-Content-Type-Options "nosniff"\n'
            '        Header set X-Frame-Options "SAMEORIGIN"\n'
            "    </IfModule>\n"
        )
    if spec.runtime is RuntimeType.NODEJS:
        port = spec.node_port
        return (
            "\n"
            "    # Node.js reverse proxy\n"
            "    ProxyPreserveHost On\n"
            f"    ProxyPass / http://127.0.0.1:{port}/\n"
            f"    ProxyPassReverse / http://127.0.0.1:{port}/\n"
            "\n"
            "    RewriteEngine On\n"
            "    RewriteCond %{HTTP:Upgrade} websocket [NC]\n"
            "    RewriteCond %{HTTP:Connection} upgrade [NC]\n"
            f'    RewriteRule ^/?(.*) "ws://127.0.0.1:{port}/$1" [P,L]\n'
        )
    return ""


def _error_pages_block(pages: Mapping[str, str]) -> str:
    lines = ["\n    # Custom error pages\n"]
    lines.extend(f"    ErrorDocument {code} {page}\n" for code, page in pages.items())
    return "".join(lines)
