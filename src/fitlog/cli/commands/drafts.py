"""Draft commands: migrate-draft, clear-draft."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.drafts import has_logged_data
from ...core.metrics import session_progress
from ...io.draft_store import DraftStore, get_default_draft_dir
from ...io.serializers import exercise_draft_to_dict
from .. import views
from ..app import JsonOption, app, get_settings

RoutineArgument = Annotated[str, typer.Argument(help="Routine ID")]
DraftDirOption = Annotated[
    Optional[Path],
    typer.Option("--draft-dir", help="Folder with workout_backup_<routine>.json files"),
]


def _get_draft_store(draft_dir: Path | None) -> DraftStore:
    return DraftStore(draft_dir if draft_dir is not None else get_default_draft_dir())


@app.command("migrate-draft")
def migrate_draft(
    ctx: typer.Context,
    routine_id: RoutineArgument,
    exercise_ids: Annotated[
        Optional[list[str]],
        typer.Option("--exercise", "-e", help="Exercise in the routine (repeatable)"),
    ] = None,
    draft_dir: DraftDirOption = None,
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Rewrite the file in the current format"),
    ] = False,
    now_ms: Annotated[
        Optional[int],
        typer.Option("--now-ms", help="Reference time in epoch ms (default now)"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Read a routine's cached workout draft, upgrading old formats.

    Unreadable or expired drafts come back empty rather than failing.
    """
    settings = get_settings(ctx)
    store = _get_draft_store(draft_dir)
    ids = exercise_ids or []
    drafts = store.load(routine_id, ids, now=now_ms, max_age_ms=settings.draft_max_age_ms)
    progress = session_progress(drafts, len(ids) if ids else None)

    if write:
        path = store.save(routine_id, drafts)
        if not json_out:
            views.print_success(f"Wrote {path}")

    if json_out:
        print(json.dumps({
            "routine_id": routine_id,
            "drafts": {k: exercise_draft_to_dict(d) for k, d in drafts.items()},
            "progress": progress,
            "has_logged_data": has_logged_data(drafts),
        }, indent=2))
        return

    if not drafts:
        views.print_info(f"No draft for routine {routine_id}.")
        return
    views.console.print(views.format_drafts_table(drafts, routine_id))
    views.console.print(f"Progress: [bold]{progress}%[/bold]")


@app.command("clear-draft")
def clear_draft(
    routine_id: RoutineArgument,
    draft_dir: DraftDirOption = None,
) -> None:
    """
    Delete a routine's cached draft (after the workout is submitted).
    """
    store = _get_draft_store(draft_dir)
    store.clear(routine_id)
    views.print_success(f"Cleared draft for routine {routine_id}")
