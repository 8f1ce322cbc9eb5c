"""Funko Storage - filesystem layout, lenient listing and failure reporting.

Tests cover:
    - ensure_user_directory is idempotent and creates nested roots
    - save then load_all round-trips a record; files are pretty-printed JSON
    - save overwrites in place
    - load_all skips corrupt files and ignores non-.json entries
    - Empty collection lists as [], not a failure
    - delete reports False for missing files
    - Invalid user names (traversal, NUL byte) and unusable directories raise
      StorageUnavailableError
"""

import json

import pytest

from funko_store.core.errors import StorageUnavailableError


@pytest.mark.asyncio
async def test_ensure_user_directory_creates_and_returns_path(storage, storage_root):
    path = await storage.ensure_user_directory("ana")
    assert path == (storage_root / "ana").resolve()
    assert path.is_dir()


@pytest.mark.asyncio
async def test_ensure_user_directory_is_idempotent(storage):
    first = await storage.ensure_user_directory("ana")
    second = await storage.ensure_user_directory("ana")
    assert first == second


@pytest.mark.asyncio
async def test_save_then_load_all_round_trips(storage, make_funko):
    funko = make_funko(1)
    assert await storage.save("ana", funko) is True
    assert await storage.load_all("ana") == [funko]


@pytest.mark.asyncio
async def test_save_writes_pretty_printed_file_named_after_id(storage, make_funko):
    await storage.save("ana", make_funko(42, genre="Ánime"))
    path = storage.record_path("ana", 42)
    assert path.name == "42.json"
    text = path.read_text(encoding="utf-8")
    assert "\n  " in text
    assert "Ánime" in text
    assert json.loads(text)["id"] == 42


@pytest.mark.asyncio
async def test_save_overwrites_existing_record(storage, make_funko):
    await storage.save("ana", make_funko(1, name="Old"))
    await storage.save("ana", make_funko(1, name="New"))
    funkos = await storage.load_all("ana")
    assert [f.name for f in funkos] == ["New"]


@pytest.mark.asyncio
async def test_load_all_on_fresh_user_is_empty(storage):
    assert await storage.load_all("nobody") == []


@pytest.mark.asyncio
async def test_load_all_returns_every_record(storage, make_funko):
    for i in range(1, 6):
        await storage.save("ana", make_funko(i))
    funkos = await storage.load_all("ana")
    assert sorted(f.id for f in funkos) == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_corrupt_file_does_not_block_valid_records(storage, make_funko):
    await storage.save("ana", make_funko(1))
    user_dir = await storage.ensure_user_directory("ana")
    (user_dir / "2.json").write_text("{ this is not json", encoding="utf-8")
    funkos = await storage.load_all("ana")
    assert [f.id for f in funkos] == [1]


@pytest.mark.asyncio
async def test_record_failing_validation_is_skipped(storage, make_funko):
    await storage.save("ana", make_funko(1))
    user_dir = await storage.ensure_user_directory("ana")
    bad = make_funko(2).to_wire()
    bad["valorMercado"] = -5
    (user_dir / "2.json").write_text(json.dumps(bad), encoding="utf-8")
    assert [f.id for f in await storage.load_all("ana")] == [1]


@pytest.mark.asyncio
async def test_non_record_entries_are_ignored(storage, make_funko):
    await storage.save("ana", make_funko(1))
    user_dir = await storage.ensure_user_directory("ana")
    (user_dir / "notes.txt").write_text("hello", encoding="utf-8")
    (user_dir / "subdir").mkdir()
    assert [f.id for f in await storage.load_all("ana")] == [1]


@pytest.mark.asyncio
async def test_directory_named_like_record_is_skipped(storage, make_funko):
    await storage.save("ana", make_funko(1))
    user_dir = await storage.ensure_user_directory("ana")
    (user_dir / "9.json").mkdir()
    assert [f.id for f in await storage.load_all("ana")] == [1]


@pytest.mark.asyncio
async def test_users_are_isolated(storage, make_funko):
    await storage.save("ana", make_funko(1))
    await storage.save("luis", make_funko(2))
    assert [f.id for f in await storage.load_all("ana")] == [1]
    assert [f.id for f in await storage.load_all("luis")] == [2]


@pytest.mark.asyncio
async def test_delete_removes_record(storage, make_funko):
    await storage.save("ana", make_funko(1))
    assert await storage.delete("ana", 1) is True
    assert not storage.record_path("ana", 1).exists()
    assert await storage.load_all("ana") == []


@pytest.mark.asyncio
async def test_delete_missing_record_returns_false(storage):
    assert await storage.delete("ana", 99) is False


@pytest.mark.parametrize("user", ["", ".", "..", "../escape", "a/b", "a\x00b"])
@pytest.mark.asyncio
async def test_invalid_user_names_are_unavailable(storage, user):
    with pytest.raises(StorageUnavailableError):
        await storage.ensure_user_directory(user)


@pytest.mark.asyncio
async def test_invalid_user_name_fails_save_and_delete(storage, make_funko):
    assert await storage.save("../escape", make_funko(1)) is False
    assert await storage.delete("../escape", 1) is False


@pytest.mark.asyncio
async def test_user_path_occupied_by_file_is_unavailable(storage, storage_root):
    storage_root.mkdir(parents=True)
    (storage_root / "ana").write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageUnavailableError) as exc_info:
        await storage.load_all("ana")
    assert exc_info.value.operation == "mkdir"


@pytest.mark.asyncio
async def test_save_fails_when_user_path_is_a_file(storage, storage_root, make_funko):
    storage_root.mkdir(parents=True)
    (storage_root / "ana").write_text("not a directory", encoding="utf-8")
    assert await storage.save("ana", make_funko(1)) is False


@pytest.mark.asyncio
async def test_user_name_with_nul_byte_fails_every_operation(storage, make_funko):
    assert await storage.save("a\x00b", make_funko(1)) is False
    assert await storage.delete("a\x00b", 1) is False
    with pytest.raises(StorageUnavailableError) as exc_info:
        await storage.load_all("a\x00b")
    assert exc_info.value.operation == "resolve"
