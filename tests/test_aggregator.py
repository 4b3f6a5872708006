# File: tests/test_aggregator.py
import dataclasses
import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from threepwood.aggregator import BUCKETS, FLAGS, ReportSnapshot, ScanReport


def test_duplicate_finding_is_stored_once(report):
    assert report.record_finding("other_links", "https://a.example/x.css") is True
    assert report.record_finding("other_links", "https://a.example/x.css") is False
    report.record_finding("other_links", "https://b.example/y.css")
    report.record_finding("other_links", "https://a.example/x.css")
    assert report.snapshot().other_links == ("https://a.example/x.css", "https://b.example/y.css")


def test_flags_are_monotonic(report):
    report.set_flag("dns_prefetch")
    report.set_flag("dns_prefetch")
    snap = report.snapshot()
    assert snap.dns_prefetch is True
    assert snap.google_fonts_link is False


def test_unknown_names_raise(report):
    with pytest.raises(KeyError):
        report.set_flag("nope")
    with pytest.raises(KeyError):
        report.record_finding("nope", "x")


def test_visits_counter(report):
    assert [report.record_visit() for _ in range(3)] == [1, 2, 3]
    assert report.snapshot().visits == 3


def test_concurrent_updates():
    report = ScanReport()
    values = [f"https://cdn{i % 10}.example/lib.js" for i in range(2000)]

    def work(chunk):
        for value in chunk:
            report.record_visit()
            report.record_finding("other_scripts", value)
            report.set_flag("google_fonts_link")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, [values[i::8] for i in range(8)]))

    snap = report.snapshot()
    assert snap.visits == 2000
    assert len(snap.other_scripts) == 10
    assert len(set(snap.other_scripts)) == 10
    assert snap.google_fonts_link


def test_snapshot_is_immutable(report):
    snap = report.snapshot()
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.visits = 5  # type: ignore[misc]
    report.record_visit()
    assert snap.visits == 0


def test_snapshot_serialisation(report):
    report.record_finding("google_fonts_css", "https://fonts.googleapis.com/css?family=Lato")
    report.set_flag("google_analytics_iframe")
    snap = report.snapshot()
    data = json.loads(snap.json(pretty=True))
    assert set(data) == {"visits", *FLAGS, *BUCKETS}
    assert data["google_fonts_css"] == ["https://fonts.googleapis.com/css?family=Lato"]
    assert data["google_analytics_iframe"] is True
    assert snap.has_findings
    assert not ReportSnapshot().has_findings


def test_skipped_references_are_not_findings():
    snap = ReportSnapshot(malformed_references=("http://[::1/x",))
    assert not snap.has_findings
    assert ReportSnapshot(other_css=("https://cdn.example.net/a.css",)).has_findings
