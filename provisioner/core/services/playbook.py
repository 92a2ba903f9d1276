"""
Playbook document — the single local play Ansible runs on the host,
and the YAML serializer for it.
"""

from __future__ import annotations

from typing import Any

import yaml

from provisioner.core.models.sensitive import Sensitive, is_sensitive, reveal


def make_playbook_output(
    roles: list[Any] | Sensitive | None = None,
    pre_tasks: list[Any] | Sensitive | None = None,
    post_tasks: list[Any] | Sensitive | None = None,
    tasks: list[Any] | Sensitive | None = None,
    vars: dict[str, Any] | Sensitive | None = None,
) -> list[dict[str, Any]]:
    """Build the list-of-one-play document.

    Field order is fixed. ``roles`` defaults to an empty list; the other
    sections are left out entirely when not supplied.
    """
    play: dict[str, Any] = {
        "hosts": "localhost",
        "connection": "local",
        "become": True,
        "roles": roles if roles is not None else [],
    }
    for key, value in (
        ("pre_tasks", pre_tasks),
        ("post_tasks", post_tasks),
        ("tasks", tasks),
        ("vars", vars),
    ):
        if value is not None:
            play[key] = value
    return [play]


def to_yaml(data: Any) -> str | Sensitive:
    """Serialize ``data`` to YAML, keeping it secret if any part of it is.

    Explicit ``None`` values are kept (``ping:`` with no arguments is a
    valid task); absent play sections are never added in the first place.
    """
    text = yaml.safe_dump(
        reveal(data),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return Sensitive(text) if is_sensitive(data) else text
