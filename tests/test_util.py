from datetime import date

from trending.util import build_search_query, cutoff_date


def test_cutoff_date_counts_calendar_days():
    assert cutoff_date(7, today=date(2024, 3, 3)) == "2024-02-25"


def test_cutoff_date_defaults_to_today():
    assert len(cutoff_date(7)) == len("2024-01-01")


def test_build_search_query():
    assert (
        build_search_query("2024-02-25", 20, 10)
        == "stars:>20 size:>10 created:>2024-02-25"
    )
