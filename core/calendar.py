"""
Academic calendar arithmetic.

Pure functions over date ranges. ``sessions`` and ``terms`` are anything with
``pk``, ``name``, ``start_date`` and ``end_date`` (AcademicYear and Term rows
in practice). ``today`` is always passed in so results are reproducible.
"""
import math
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

STATUS_UPCOMING = 'upcoming'
STATUS_CURRENT = 'current'
STATUS_COMPLETED = 'completed'

BREAK_INTER_TERM = 'inter-term'

UPCOMING_EVENTS_LIMIT = 10


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def weeks(start, end):
    """Whole weeks spanned by a date range, partial weeks rounded up."""
    days = abs((_as_date(end) - _as_date(start)).days)
    return math.ceil(days / 7)


def completed_weeks(start, end, today):
    """Weeks elapsed from ``start`` up to ``today``, capped at ``end``."""
    start, end, today = _as_date(start), _as_date(end), _as_date(today)
    if today < start:
        return 0
    return weeks(start, min(today, end))


def progress_percentage(completed, total):
    """Completed share of ``total`` as a whole percentage; 0 for an empty range."""
    if not total:
        return 0
    value = Decimal(completed) * 100 / Decimal(total)
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def term_status(start, end, today):
    today = _as_date(today)
    if today < _as_date(start):
        return STATUS_UPCOMING
    if today > _as_date(end):
        return STATUS_COMPLETED
    return STATUS_CURRENT


def break_windows(terms):
    """
    Gaps between consecutive terms, ordered by start date.

    A break runs from the day after one term ends to the day before the next
    starts and is only reported when that window is longer than a day.
    """
    ordered = sorted(terms, key=lambda t: _as_date(t.start_date))
    breaks = []
    for current, following in zip(ordered, ordered[1:]):
        break_start = _as_date(current.end_date) + timedelta(days=1)
        break_end = _as_date(following.start_date) - timedelta(days=1)
        if break_start < break_end:
            breaks.append({
                'name': f"Break between {current.name} and {following.name}",
                'start_date': break_start,
                'end_date': break_end,
                'weeks': weeks(break_start, break_end),
                'type': BREAK_INTER_TERM,
            })
    return breaks


def academic_weeks(total_weeks, breaks):
    """Teaching weeks in a session; never negative even if breaks are misconfigured."""
    return max(0, total_weeks - sum(b['weeks'] for b in breaks))


def term_summary(term, today):
    total = weeks(term.start_date, term.end_date)
    done = completed_weeks(term.start_date, term.end_date, today)
    return {
        'id': term.pk,
        'name': term.name,
        'start_date': term.start_date,
        'end_date': term.end_date,
        'is_current': getattr(term, 'is_current', False),
        'weeks': total,
        'completed_weeks': done,
        'progress_percentage': progress_percentage(done, total),
        'status': term_status(term.start_date, term.end_date, today),
    }


def session_summary(session, terms, today):
    """Week counts, progress, per-term summaries and breaks for one session."""
    total = weeks(session.start_date, session.end_date)
    done = completed_weeks(session.start_date, session.end_date, today)
    breaks = break_windows(terms)
    total_break_weeks = sum(b['weeks'] for b in breaks)
    return {
        'id': session.pk,
        'name': session.name,
        'start_date': session.start_date,
        'end_date': session.end_date,
        'is_current': getattr(session, 'is_current', False),
        'total_weeks': total,
        'completed_weeks': done,
        'progress_percentage': progress_percentage(done, total),
        'terms': [term_summary(t, today) for t in sorted(terms, key=lambda t: _as_date(t.start_date))],
        'breaks': breaks,
        'total_break_weeks': total_break_weeks,
        'academic_weeks': academic_weeks(total, breaks),
    }


def upcoming_events(sessions_with_terms, today, limit=UPCOMING_EVENTS_LIMIT):
    """
    Session and term start/end dates that fall after ``today``.

    ``sessions_with_terms`` is a list of (session, terms) pairs. Events are
    sorted by date and cut to ``limit``.
    """
    today = _as_date(today)
    events = []
    for session, terms in sessions_with_terms:
        if _as_date(session.start_date) > today:
            events.append({
                'id': f"session-start-{session.pk}",
                'title': f"{session.name} Begins",
                'date': _as_date(session.start_date),
                'type': 'session-start',
                'description': f"Academic session {session.name} starts",
            })
        if _as_date(session.end_date) > today:
            events.append({
                'id': f"session-end-{session.pk}",
                'title': f"{session.name} Ends",
                'date': _as_date(session.end_date),
                'type': 'session-end',
                'description': f"Academic session {session.name} concludes",
            })
        for term in terms:
            if _as_date(term.start_date) > today:
                events.append({
                    'id': f"term-start-{term.pk}",
                    'title': f"{term.name} Begins",
                    'date': _as_date(term.start_date),
                    'type': 'term-start',
                    'description': f"{term.name} of {session.name} starts",
                })
            if _as_date(term.end_date) > today:
                events.append({
                    'id': f"term-end-{term.pk}",
                    'title': f"{term.name} Ends",
                    'date': _as_date(term.end_date),
                    'type': 'term-end',
                    'description': f"{term.name} of {session.name} concludes",
                })
    events.sort(key=lambda e: e['date'])
    return events[:limit]
