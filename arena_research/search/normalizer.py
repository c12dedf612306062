"""Legacy search record normalization.

The legacy (v2) search backend returns flat records with different field
names from the canonical (v3) shape: ``class`` instead of ``type``, a
``length`` scalar instead of a counts object, ``status`` instead of
``visibility``, an embedded ``user`` instead of ``owner``, and so on.
``normalize_legacy_record`` fills in the canonical fields so that nothing
past the search layer ever sees the legacy shape.

Every rule only fires when the canonical field is absent and the legacy
field is present, which makes the function idempotent.  Item payloads are
not touched beyond the discriminator rename.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping


def _owner_stub(user: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": user.get("id"),
        "type": "User",
        "name": user.get("full_name") or user.get("username"),
        "slug": user.get("slug"),
        "avatar": user.get("avatar"),
        "initials": "",
    }


def normalize_legacy_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a canonical copy of one legacy search record."""
    out: Dict[str, Any] = dict(record)
    legacy_class = out.get("class")

    if not out.get("type") and legacy_class:
        out["type"] = legacy_class
    if not out.get("base_type"):
        if legacy_class == "Channel":
            out["base_type"] = "Channel"
        elif legacy_class and legacy_class != "User":
            out["base_type"] = "Block"

    if legacy_class == "Channel":
        if not out.get("counts") and isinstance(out.get("length"), int):
            out["counts"] = {
                "blocks": 0,
                "channels": 0,
                "contents": out["length"],
                "collaborators": out.get("collaborator_count") or 0,
            }
        if not out.get("visibility") and out.get("status"):
            out["visibility"] = out["status"]
        if not out.get("owner") and isinstance(out.get("user"), Mapping):
            out["owner"] = _owner_stub(out["user"])

    elif legacy_class == "User":
        if not out.get("name") and out.get("full_name"):
            out["name"] = out["full_name"]
        if not out.get("name") and out.get("username"):
            out["name"] = out["username"]
        if not out.get("slug") and out.get("username"):
            out["slug"] = out["username"]
        if not out.get("counts"):
            out["counts"] = {
                "channels": out.get("channel_count") or 0,
                "followers": out.get("follower_count") or 0,
                "following": out.get("following_count") or 0,
            }

    return out
