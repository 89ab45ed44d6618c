from datetime import date, datetime, timedelta, timezone


def cutoff_date(days: int, today: date | None = None) -> str:
    """
    ISO date `days` calendar days before today.
    Always computed in UTC so consecutive pages of one walk agree on the window.
    """
    if today is None:
        today = datetime.now(timezone.utc).date()
    return (today - timedelta(days=days)).isoformat()


def build_search_query(cutoff: str, min_stars: int, min_size: int) -> str:
    return f"stars:>{min_stars} size:>{min_size} created:>{cutoff}"
