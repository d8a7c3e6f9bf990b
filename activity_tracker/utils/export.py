"""Plain-text export of completed activities"""
from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional, Sequence

from activity_tracker.models.activity import Activity
from activity_tracker.models.catalog import Project, Tag
from activity_tracker.services.timers.errors import InvalidInput
from activity_tracker.utils.duration import format_duration

SEPARATOR = "=" * 50


def total_duration(activities: Iterable[Activity]) -> int:
    """Sum of durations in milliseconds"""
    return sum(activity.duration for activity in activities)


def export_filename(day: date) -> str:
    return f"activities-export-{day:%Y-%m-%d}.txt"


def render_export(
    activities: Sequence[Activity],
    projects: Iterable[Project],
    tags: Iterable[Tag],
    generated_at: datetime,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Render the activity export report.

    Args:
        activities: Activities in display order (newest first in the app)
        projects: Projects used to resolve project names
        tags: Tags used to resolve tag names; unknown ids are skipped
        generated_at: Timestamp printed in the header
        tz: Zone for printed times; datetimes are printed as stored when omitted

    Raises:
        InvalidInput: If there is nothing to export
    """
    if not activities:
        raise InvalidInput("No activities to export")

    def local(dt: datetime) -> datetime:
        return dt.astimezone(tz) if tz is not None else dt

    project_names = {project.id: project.name for project in projects}
    tag_names = {tag.id: tag.name for tag in tags}

    lines: List[str] = [
        "WORK ACTIVITY TRACKER - EXPORT",
        SEPARATOR,
        "",
        f"Generated: {local(generated_at):%Y-%m-%d %H:%M}",
        f"Total Activities: {len(activities)}",
        f"Total Time Tracked: {format_duration(total_duration(activities))}",
        "",
        SEPARATOR,
        "",
    ]

    for index, activity in enumerate(activities, start=1):
        lines.append(f"{index}. {activity.description}")
        lines.append(f"   Duration: {format_duration(activity.duration)}")
        lines.append(f"   Time: {local(activity.date):%Y-%m-%d %H:%M} - {local(activity.end_time):%H:%M}")

        if activity.project_id and activity.project_id in project_names:
            lines.append(f"   Project: {project_names[activity.project_id]}")

        names = [tag_names[tag_id] for tag_id in activity.tag_ids if tag_id in tag_names]
        if names:
            lines.append(f"   Tags: {', '.join(names)}")

        lines.append("")

    return "\n".join(lines) + "\n"
