# tests/core/traceability/test_manifest_event_log.py
"""
Testes do Event Log do Manifest.

A ordem do Event Log reflete a ordem real das chamadas; timestamps naive
são tratados como UTC.
"""

from datetime import datetime, timezone

from stratus_blueprints.core.traceability.manifest import add_event, create_manifest


def _manifest():
    return create_manifest(
        build_id="b-1",
        started_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        version="0.1.0",
        config_hash="c" * 64,
    )


def test_event_log_appends_ordered_events():
    m = _manifest()
    add_event(m, event_type="log", ts=datetime(2026, 1, 1, 0, 0, 1), resource="vpc", payload={"state": "resolving"})
    add_event(m, event_type="log", ts=datetime(2026, 1, 1, 0, 0, 2), resource="vpc", payload={"state": "ready"})
    add_event(m, event_type="build_finished", ts=datetime(2026, 1, 1, 0, 0, 3, tzinfo=timezone.utc))

    assert [e["event_type"] for e in m.events] == ["log", "log", "build_finished"]
    assert m.events[0]["timestamp"] == "2026-01-01T00:00:01+00:00"
    assert m.events[1]["payload"] == {"state": "ready"}
    assert "resource" not in m.events[2]
    assert "payload" not in m.events[2]
