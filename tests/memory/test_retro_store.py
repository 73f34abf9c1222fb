import json

import pytest
from memory import retro_store
from schema.retro_models import RetroRecord


@pytest.mark.asyncio
async def test_save_and_get_retro(temp_retro_json, monkeypatch):
    monkeypatch.setattr(retro_store, "JSON_PATH", temp_retro_json)
    record = RetroRecord(
        record_id="week-12",
        period="week",
        period_number=12,
        good_text="===== ROCKS =====\nShip onboarding flow",
        bad_text="===== ROCKS =====\nMeal prep didn't go so well",
        metadata={"source": "weekly"},
    )
    await retro_store.save_retro(record)
    loaded = await retro_store.get_retro("week-12")
    assert loaded is not None
    assert loaded.period == "week"
    assert loaded.good_text.endswith("Ship onboarding flow")
    assert loaded.metadata == {"source": "weekly"}


@pytest.mark.asyncio
async def test_get_missing_retro(temp_retro_json, monkeypatch):
    monkeypatch.setattr(retro_store, "JSON_PATH", temp_retro_json)
    assert await retro_store.get_retro("nope") is None


@pytest.mark.asyncio
async def test_save_truncates_long_text(temp_retro_json, monkeypatch):
    monkeypatch.setattr(retro_store, "JSON_PATH", temp_retro_json)
    record = RetroRecord(record_id="month-3", period="month", period_number=3, good_text="x" * 50)
    stored = await retro_store.save_retro(record, max_length=10)
    assert stored.good_text == "x" * 10
    # The caller's record is left alone
    assert len(record.good_text) == 50

    with open(temp_retro_json, encoding="utf-8") as f:
        data = json.load(f)
    assert data["month-3"]["good_text"] == "x" * 10


@pytest.mark.asyncio
async def test_list_and_delete_retros(temp_retro_json, monkeypatch):
    monkeypatch.setattr(retro_store, "JSON_PATH", temp_retro_json)
    for number in (14, 12, 13):
        await retro_store.save_retro(
            RetroRecord(record_id=f"week-{number}", period="week", period_number=number)
        )
    await retro_store.save_retro(RetroRecord(record_id="month-3", period="month", period_number=3))

    weeks = await retro_store.list_retros("week")
    assert [r.period_number for r in weeks] == [12, 13, 14]
    assert len(await retro_store.list_retros()) == 4

    await retro_store.delete_retro("week-12")
    weeks = await retro_store.list_retros("week")
    assert [r.record_id for r in weeks] == ["week-13", "week-14"]


@pytest.mark.asyncio
async def test_unreadable_store_raises(temp_retro_json, monkeypatch):
    monkeypatch.setattr(retro_store, "JSON_PATH", temp_retro_json)
    with open(temp_retro_json, "w", encoding="utf-8") as f:
        f.write("{not json")
    with pytest.raises(OSError):
        await retro_store.list_retros()


@pytest.mark.parametrize(
    "text,max_length,expected",
    [
        ("short", 10, "short"),
        ("exactly10!", 10, "exactly10!"),
        ("much longer text", 4, "much"),
        ("unlimited", 0, "unlimited"),
    ],
)
def test_truncate_field(text, max_length, expected):
    assert retro_store.truncate_field(text, max_length) == expected
