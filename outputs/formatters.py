"""
RTA Poller — Output Formatters
Best-effort field extraction from unstable beta transcript payloads,
plus plain-text rendering for the console.
"""
import json
from collections.abc import Mapping, Sequence


class _Missing:
    """Marker for a field no candidate key resolved. Falsy, distinct from None."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


# ============================================================
# Fallback chains
# ============================================================

# Each candidate is a path of dict keys / list indexes, tried in order.
ID_PATHS = (("id",), ("transcriptId",), ("metadata", "id"))
CREATED_PATHS = (
    ("createdDateTime",),
    ("startDateTime",),
    ("timestamp",),
    ("metadata", "createdDateTime"),
)
LANGUAGE_PATHS = (("language",), ("locale",), ("metadata", "language"))
SPEAKER_PATHS = (("speakerId",), ("speaker", "id"), ("participantId",))
TEXT_PATHS = (("text",), ("content",), ("combinedText",), ("alternatives", 0, "text"))


def _lookup(obj, path):
    node = obj
    for step in path:
        if isinstance(step, int):
            if isinstance(node, Sequence) and not isinstance(node, (str, bytes)) and len(node) > step:
                node = node[step]
            else:
                return MISSING
        elif isinstance(node, Mapping) and step in node:
            node = node[step]
        else:
            return MISSING
    # JSON null counts as absent
    return MISSING if node is None else node


def first_present(obj, paths):
    """Value at the first path that resolves, else MISSING."""
    for path in paths:
        value = _lookup(obj, path)
        if value is not MISSING:
            return value
    return MISSING


def resolve_id(obj):
    return first_present(obj, ID_PATHS)


def resolve_created(obj):
    return first_present(obj, CREATED_PATHS)


def resolve_language(obj):
    return first_present(obj, LANGUAGE_PATHS)


def resolve_speaker(obj):
    return first_present(obj, SPEAKER_PATHS)


def resolve_text(obj):
    return first_present(obj, TEXT_PATHS)


# ============================================================
# Console rendering
# ============================================================

def format_fragment_summary(obj) -> list:
    """
    Render a list item or detail payload as console lines:
      • id: <id> | created: ... | lang: ... | speaker: ...
        <text>
    Optional parts are shown only when present and non-empty.
    """
    fragment_id = resolve_id(obj)
    created = resolve_created(obj)
    lang = resolve_language(obj)
    speaker = resolve_speaker(obj)
    text = resolve_text(obj)

    parts = [f"• id: {fragment_id if fragment_id is not MISSING else 'unknown'}"]
    if created:
        parts.append(f"created: {created}")
    if lang:
        parts.append(f"lang: {lang}")
    if speaker:
        parts.append(f"speaker: {speaker}")

    lines = [" | ".join(parts)]
    if text:
        lines.append(f"  {text}")
    return lines


def format_payload(payload) -> str:
    """Pretty-print a raw payload for verbose dumps."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
