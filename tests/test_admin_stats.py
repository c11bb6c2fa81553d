from __future__ import annotations

from views.admin_stats import records_frame


def test_records_frame(registry, clock):
    registry.log_visit("0123456789abcdef")
    clock.advance(700)
    registry.log_visit("B")
    clock.advance(5)

    df = records_frame(registry, registry.records())
    assert list(df["Sesión"]) == ["B", "01234567…"]
    assert list(df["Inactiva (s)"]) == [5, 705]
    assert list(df["En línea"]) == [True, False]


def test_records_frame_empty(registry):
    df = records_frame(registry, [])
    assert df.empty
    assert "En línea" in df.columns
