from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from activity_tracker.auth import get_current_user_id
from activity_tracker.infra.supabase.client import get_supabase_client
from activity_tracker.infra.supabase.repositories import RepositoryFactory
from activity_tracker.services.timers import InvalidInput
from activity_tracker.utils.export import export_filename, render_export

router = APIRouter(prefix="/api/activities", tags=["activities"])


def get_repositories() -> RepositoryFactory:
    return RepositoryFactory(get_supabase_client())


@router.get("/export", response_class=PlainTextResponse)
async def export_activities(
    user_id: str = Depends(get_current_user_id),
    repositories: RepositoryFactory = Depends(get_repositories),
):
    """Download the user's completed activities as a text report"""
    activities = await repositories.activities.find_by_user(user_id)
    projects = await repositories.projects.find_by_user(user_id)
    tags = await repositories.tags.find_by_user(user_id)

    now = datetime.now(timezone.utc)
    try:
        text = render_export(activities, projects, tags, generated_at=now)
    except InvalidInput as e:
        raise HTTPException(status_code=404, detail=str(e))

    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="{export_filename(now.date())}"'},
    )
