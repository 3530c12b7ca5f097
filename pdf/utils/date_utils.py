from datetime import date, datetime

DATE_PLACEHOLDER = "DD Mon YYYY"


def format_date(raw_date, placeholder=DATE_PLACEHOLDER):
    """Format a date as DD Mon YYYY (05 Jan 2026). Missing or bad input gives the placeholder."""
    if not raw_date:
        return placeholder

    if isinstance(raw_date, (date, datetime)):
        return raw_date.strftime("%d %b %Y")

    try:
        return datetime.fromisoformat(str(raw_date)).strftime("%d %b %Y")
    except ValueError:
        return placeholder
