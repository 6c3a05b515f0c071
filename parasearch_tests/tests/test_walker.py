import logging
import os
from collections import Counter
from contextlib import asynccontextmanager

import pytest

import search.classifier as classifier_mod
import search.walker as walker_mod
from core.errors import GovernorError
from core.governor import ConcurrencyGovernor
from core.models import Match, SearchRequest
from search.walker import list_children, run_search, search


def _errors(caplog):
    return [r for r in caplog.records if r.levelno >= logging.ERROR]


@pytest.mark.asyncio
async def test_search_text_and_binary_scenario(tmp_path, governor, caplog):
    root = tmp_path / "r"
    root.mkdir()
    (root / "a.txt").write_bytes(b"hello\nworld hello")
    (root / "b.bin").write_bytes(b"\xff" * 64)

    with caplog.at_level(logging.ERROR):
        out = await search(root, "hello", governor=governor)

    assert sorted(out, key=lambda m: m.line_number) == [
        Match(file_path=root / "a.txt", line_number=0, line="hello"),
        Match(file_path=root / "a.txt", line_number=1, line="world hello"),
    ]
    assert _errors(caplog) == []


@pytest.mark.asyncio
async def test_binary_files_never_match(tmp_path, governor):
    (tmp_path / "blob.dat").write_bytes(b"needle\x00needle\nneedle\n")
    (tmp_path / "doc.pdf").write_bytes(b"%PDF-1.4 needle\n")

    assert await search(tmp_path, "needle", governor=governor) == []


@pytest.mark.asyncio
async def test_search_empty_directory(tmp_path, governor, caplog):
    with caplog.at_level(logging.ERROR):
        out = await search(tmp_path, "anything", governor=governor)

    assert out == []
    assert _errors(caplog) == []


@pytest.mark.asyncio
async def test_search_single_file(tmp_path, governor):
    p = tmp_path / "one.txt"
    p.write_text("a\nneedle\n", encoding="utf-8")

    assert await search(p, "needle", governor=governor) == [
        Match(file_path=p, line_number=1, line="needle"),
    ]


@pytest.mark.asyncio
async def test_search_recurses_into_nested_directories(tmp_path, governor):
    deep = tmp_path / "a" / "b" / "c"
    deep.mkdir(parents=True)
    (deep / "deep.txt").write_text("x\ny needle\n", encoding="utf-8")
    (tmp_path / "a" / "mid.txt").write_text("needle\n", encoding="utf-8")
    (tmp_path / "top.txt").write_text("no match\n", encoding="utf-8")

    out = await search(tmp_path, "needle", governor=governor)

    assert Counter((m.file_path, m.line_number) for m in out) == Counter(
        {(deep / "deep.txt", 1): 1, (tmp_path / "a" / "mid.txt", 0): 1}
    )


@pytest.mark.asyncio
async def test_search_reports_every_match_in_a_file(tmp_path, governor):
    p = tmp_path / "rep.txt"
    p.write_text("dup\ndup\nother\ndup\n", encoding="utf-8")

    out = await search(tmp_path, "dup", governor=governor)

    assert [m.line_number for m in out] == [0, 1, 3]


@pytest.mark.asyncio
async def test_search_is_idempotent(tmp_path, governor):
    for i in range(5):
        d = tmp_path / f"d{i}"
        d.mkdir()
        for j in range(4):
            (d / f"f{j}.txt").write_text(f"line\nhit {i}{j}\nhit again\n", encoding="utf-8")

    first = await search(tmp_path, "hit", governor=governor)
    second = await search(tmp_path, "hit", governor=governor)

    assert len(first) == 40
    assert Counter(first) == Counter(second)


@pytest.mark.asyncio
async def test_search_never_exceeds_permit_capacity(tmp_path):
    for i in range(30):
        (tmp_path / f"f{i}.txt").write_text("needle\n" * 3, encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    for i in range(10):
        (sub / f"g{i}.txt").write_text("needle\n", encoding="utf-8")

    g = ConcurrencyGovernor(capacity=3)
    out = await search(tmp_path, "needle", governor=g)

    assert len(out) == 100
    assert 1 <= g.peak <= 3
    assert g.outstanding == 0


@pytest.mark.asyncio
async def test_unreadable_file_logs_once_and_siblings_still_match(tmp_path, governor, monkeypatch, caplog):
    locked = tmp_path / "locked.txt"
    locked.write_text("needle\n", encoding="utf-8")
    (tmp_path / "open.txt").write_text("needle\n", encoding="utf-8")

    real_open = open

    def fake_open(path, mode="r", *args, **kwargs):
        if os.fspath(path) == os.fspath(locked):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(classifier_mod, "open", fake_open, raising=False)

    with caplog.at_level(logging.ERROR):
        out = await search(tmp_path, "needle", governor=governor)

    assert out == [Match(file_path=tmp_path / "open.txt", line_number=0, line="needle")]
    errors = _errors(caplog)
    assert len(errors) == 1
    assert "locked.txt" in errors[0].getMessage()
    assert governor.outstanding == 0


@pytest.mark.asyncio
@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores file permissions")
async def test_permission_denied_file_on_disk(tmp_path, governor, caplog):
    locked = tmp_path / "locked.txt"
    locked.write_text("needle\n", encoding="utf-8")
    (tmp_path / "open.txt").write_text("needle\n", encoding="utf-8")
    locked.chmod(0)

    try:
        with caplog.at_level(logging.ERROR):
            out = await search(tmp_path, "needle", governor=governor)
    finally:
        locked.chmod(0o644)

    assert [m.file_path.name for m in out] == ["open.txt"]
    assert len(_errors(caplog)) == 1


@pytest.mark.asyncio
async def test_unlistable_directory_logs_and_yields_nothing(tmp_path, governor, monkeypatch, caplog):
    def boom(path):
        raise PermissionError(13, "Permission denied", os.fspath(path))

    monkeypatch.setattr(walker_mod, "list_children", boom)

    with caplog.at_level(logging.ERROR):
        out = await search(tmp_path, "x", governor=governor)

    assert out == []
    assert len(_errors(caplog)) == 1


@pytest.mark.asyncio
async def test_failed_child_task_is_logged_and_siblings_survive(tmp_path, governor, monkeypatch, caplog):
    (tmp_path / "good.txt").write_text("needle\n", encoding="utf-8")
    (tmp_path / "bad.txt").write_text("needle\n", encoding="utf-8")

    real_search_file = walker_mod.search_file

    async def flaky_search_file(path, pattern, *, governor):
        if path.name == "bad.txt":
            raise RuntimeError("worker died")
        return await real_search_file(path, pattern, governor=governor)

    monkeypatch.setattr(walker_mod, "search_file", flaky_search_file)

    with caplog.at_level(logging.ERROR):
        out = await search(tmp_path, "needle", governor=governor)

    assert [m.file_path.name for m in out] == ["good.txt"]
    errors = _errors(caplog)
    assert len(errors) == 1
    assert "Error getting results" in errors[0].getMessage()


class BrokenGovernor:
    async def acquire(self):
        raise GovernorError("error acquiring permit: broken")

    def release(self, permit):
        pass

    @asynccontextmanager
    async def permit(self):
        yield await self.acquire()


@pytest.mark.asyncio
async def test_governor_failure_is_fatal(tmp_path):
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "a.txt").write_text("needle\n", encoding="utf-8")

    with pytest.raises(GovernorError):
        await search(tmp_path, "needle", governor=BrokenGovernor())


@pytest.mark.asyncio
async def test_missing_root_logs_and_returns_nothing(tmp_path, governor, caplog):
    with caplog.at_level(logging.ERROR):
        out = await search(tmp_path / "nope", "x", governor=governor)

    assert out == []
    assert len(_errors(caplog)) == 1


@pytest.mark.asyncio
async def test_run_search_uses_request(tmp_path, governor):
    (tmp_path / "a.txt").write_text("needle\n", encoding="utf-8")

    out = await run_search(SearchRequest(pattern="needle", root=tmp_path), governor=governor)

    assert [m.file_path.name for m in out] == ["a.txt"]


def test_list_children(tmp_path):
    (tmp_path / "a.txt").write_text("x", encoding="utf-8")
    (tmp_path / "sub").mkdir()

    assert sorted(p.name for p in list_children(tmp_path)) == ["a.txt", "sub"]
