import asyncio
from pathlib import Path

from filesense.deck import ResultTable, ScanDeck, ScanStats


def test_stats_record(magika, tmp_path: Path) -> None:
    stats = ScanStats()
    stats.record(magika.identify_path(tmp_path), 0)
    stats.record(magika.identify_bytes(b"x" * 100), 100)

    assert stats.files_processed == 2
    assert stats.fast_path == 1
    assert stats.model_predictions == 1
    assert stats.total_bytes == 100
    assert stats.groups == {"inode": 1, "text": 1}


def test_stats_copy_is_independent() -> None:
    stats = ScanStats()
    stats.groups["code"] += 1
    snapshot = stats.copy()
    stats.groups["code"] += 1
    assert snapshot.groups["code"] == 1


def test_scan_fills_result_table(magika, tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("Hello")
    (tmp_path / "b.txt").write_text("hello world " * 50)

    async def scan() -> int:
        app = ScanDeck(directory=str(tmp_path), magika=magika)
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            return app.query_one("#results", ResultTable).row_count

    assert asyncio.run(scan()) == 2
