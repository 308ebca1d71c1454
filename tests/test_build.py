"""End-to-end build with stubbed feeds and summarizers."""

import json
from datetime import datetime, timezone

import pytest

from policy_pulse import __main__ as cli
from policy_pulse.archive import ArchiveStore
from policy_pulse.build import run_build
from policy_pulse.config import Settings
from policy_pulse.core import NewsFetcher
from policy_pulse.exceptions import ArchiveError
from policy_pulse.summarizers import NullSummarizer

from tests.helpers import make_item


NOW = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)


class StubFetcher(NewsFetcher):
    def __init__(self, data):
        super().__init__()
        self.data = data

    def fetch_all(self, source_keys=("peopleDaily", "xinhua")):
        return {key: list(self.data.get(key, [])) for key in source_keys}


class FailingSummarizer:
    def summarize_daily(self, source, items):
        return None

    def summarize_weekly(self, window):
        return None


class RaisingSummarizer:
    def summarize_daily(self, source, items):
        raise RuntimeError("daily down")

    def summarize_weekly(self, window):
        raise RuntimeError("weekly down")


class RecordingSummarizer:
    def __init__(self):
        self.daily = []
        self.weekly = []

    def summarize_daily(self, source, items):
        self.daily.append((source, len(items)))
        return f"# {source}"

    def summarize_weekly(self, window):
        self.weekly.append(window)
        return "## 本周核心政策动向"


@pytest.fixture
def settings(tmp_path):
    return Settings(archive_dir=tmp_path / "archive", output_dir=tmp_path / "docs", provider="none")


@pytest.fixture
def sources():
    return {
        "peopleDaily": [make_item(f"p{i}", source="人民日报") for i in range(30)],
        "xinhua": [make_item(f"x{i}", source="新华社") for i in range(30)],
    }


class TestRunBuild:

    def test_failing_summarizer_still_completes(self, settings, sources):
        result = run_build(settings, fetcher=StubFetcher(sources), summarizer=FailingSummarizer(), now=NOW)

        assert result.date == "2024-01-10"
        assert result.data["briefings"] == {}
        assert "weeklyTrend" not in result.data
        assert (settings.output_dir / "2024-01-10.html").exists()
        assert (settings.output_dir / "index.html").exists()

    def test_raising_summarizer_still_completes(self, settings, sources, caplog):
        store = ArchiveStore(settings.archive_dir)
        for d in (7, 8, 9):
            store.archive(f"2024-01-0{d}", [make_item(f"old{d}")])

        result = run_build(settings, fetcher=StubFetcher(sources), summarizer=RaisingSummarizer(), now=NOW)

        assert result.data["briefings"] == {}
        assert "weeklyTrend" not in result.data
        assert "weekly down" in caplog.text
        assert (settings.output_dir / "2024-01-10.html").exists()

    def test_archive_holds_first_50_in_source_order(self, settings, sources):
        run_build(settings, fetcher=StubFetcher(sources), summarizer=NullSummarizer(), now=NOW)
        [record] = ArchiveStore(settings.archive_dir).load_recent_window()
        assert record.titles() == [f"p{i}" for i in range(30)] + [f"x{i}" for i in range(20)]

    def test_trend_skipped_below_three_days(self, settings, sources):
        ArchiveStore(settings.archive_dir).archive("2024-01-09", [make_item()])
        summarizer = RecordingSummarizer()
        result = run_build(settings, fetcher=StubFetcher(sources), summarizer=summarizer, now=NOW)
        assert summarizer.weekly == []
        assert "weeklyTrend" not in result.data
        assert result.data["briefings"] == {"peopleDaily": "# 人民日报", "xinhua": "# 新华社"}
        assert summarizer.daily == [("人民日报", 15), ("新华社", 15)]

    def test_trend_over_capped_window(self, settings, sources):
        store = ArchiveStore(settings.archive_dir)
        for d in range(1, 10):
            store.archive(f"2024-01-{d:02d}", [make_item(f"old{d}-{i}") for i in range(9)])
        summarizer = RecordingSummarizer()

        result = run_build(settings, fetcher=StubFetcher(sources), summarizer=summarizer, now=NOW)

        [window] = summarizer.weekly
        assert [r.date for r in window] == [f"2024-01-{d:02d}" for d in range(4, 11)]
        assert all(len(r.items) == 5 for r in window)
        assert result.data["weeklyTrend"] == "## 本周核心政策动向"

    def test_history_includes_today_newest_first(self, settings, sources):
        settings.output_dir.mkdir(parents=True)
        for name in ("2024-01-08.html", "2024-01-09.html", "notes.html"):
            (settings.output_dir / name).write_text("", encoding="utf-8")

        result = run_build(settings, fetcher=StubFetcher(sources), summarizer=NullSummarizer(), now=NOW)

        expected = ["2024-01-10.html", "2024-01-09.html", "2024-01-08.html"]
        assert result.history == expected
        assert json.loads((settings.output_dir / "history.json").read_text(encoding="utf-8")) == expected

    def test_report_escapes_and_lists_items(self, settings):
        data = {"peopleDaily": [make_item("<script>alert(1)</script>")], "xinhua": []}
        run_build(settings, fetcher=StubFetcher(data), summarizer=NullSummarizer(), now=NOW)
        page = (settings.output_dir / "2024-01-10.html").read_text(encoding="utf-8")
        assert "&lt;script&gt;" in page
        assert "<script>" not in page

    def test_corrupt_archive_is_fatal(self, settings, sources):
        settings.archive_dir.mkdir(parents=True)
        (settings.archive_dir / "2024-01-09.json").write_text("{", encoding="utf-8")
        with pytest.raises(ArchiveError):
            run_build(settings, fetcher=StubFetcher(sources), summarizer=NullSummarizer(), now=NOW)


class TestSettings:

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "k")
        monkeypatch.setenv("POLICY_PULSE_ARCHIVE_DIR", str(tmp_path / "a"))
        monkeypatch.setenv("POLICY_PULSE_PROVIDER", "Gemini")
        s = Settings.from_env(dotenv=False, output_dir=tmp_path / "o", provider=None)
        assert s.api_key == "k"
        assert s.archive_dir == tmp_path / "a"
        assert s.output_dir == tmp_path / "o"
        assert s.provider == "gemini"
        assert s.source_keys == ("peopleDaily", "xinhua")


class TestCli:

    def test_exit_status_on_failure(self, monkeypatch, tmp_path):
        def boom(settings):
            raise OSError("read-only file system")

        monkeypatch.setattr(cli, "run_build", boom)
        assert cli.main(["--archive-dir", str(tmp_path / "a"), "--output-dir", str(tmp_path / "o")]) == 1

    def test_success(self, monkeypatch, tmp_path):
        seen = {}

        def fake_build(settings):
            seen["settings"] = settings
            return run_build(settings, fetcher=StubFetcher({}), summarizer=NullSummarizer(), now=NOW)

        monkeypatch.setattr(cli, "run_build", fake_build)
        code = cli.main([
            "--archive-dir", str(tmp_path / "a"),
            "--output-dir", str(tmp_path / "o"),
            "--source", "xinhua",
            "--provider", "none",
        ])
        assert code == 0
        assert seen["settings"].source_keys == ("xinhua",)
        assert (tmp_path / "o" / "history.json").exists()
