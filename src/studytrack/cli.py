"""
Command Line Interface for studytrack.
"""

import json
from datetime import date
from pathlib import Path

import click

from .version import VERSION
from .data.io import atomic_write, DATA_JSON, DATA_YAML
from .data.validate import generate_schema
from .models import ALL_SUBJECTS, Priority, StatusFilter, Task
from .query import is_overdue, subtask_progress
from .recovery import StudyTrackError
from .tracker import StudyTracker

PRIORITY_CHOICES = [p.value for p in Priority]
STATUS_CHOICES = [s.value for s in StatusFilter]
PRIORITY_MARKS = {Priority.LOW: "·", Priority.MEDIUM: "!", Priority.HIGH: "‼"}


def _tracker(ctx: click.Context) -> StudyTracker:
    if "tracker" not in ctx.obj:
        try:
            ctx.obj["tracker"] = StudyTracker.open(ctx.obj.get("data_dir"))
        except StudyTrackError as e:
            _fail(e)
    return ctx.obj["tracker"]


def _fail(error: Exception):
    click.echo(f"❌ {error}", err=True)
    raise SystemExit(1)


def _print_tasks(tasks: list, today: date) -> None:
    if not tasks:
        click.echo("📭 No tasks found")
        return
    for t in tasks:
        box = "✅" if t.completed else "⬜"
        done, total = subtask_progress(t)
        progress = f" [{done}/{total}]" if total else ""
        overdue = " ⚠️  overdue" if is_overdue(t, today) else ""
        click.echo(
            f"{box} {PRIORITY_MARKS[t.priority]} {t.id}  {t.due_date.isoformat()}  "
            f"{t.subject}: {t.title}{progress}{overdue}"
        )


def _print_task(task: Task) -> None:
    click.echo(f"📝 {task.title}  ({task.id})")
    click.echo(f"   📚 Subject: {task.subject}")
    click.echo(f"   🏷️  Priority: {task.priority.value}")
    click.echo(f"   📅 Due: {task.due_date.isoformat()}")
    click.echo(f"   {'✅ Completed' if task.completed else '⏳ Pending'}")
    if task.description:
        click.echo(f"   {task.description}")
    for st in task.sub_tasks:
        click.echo(f"   {'☑' if st.completed else '☐'} {st.title}  ({st.id})")


@click.group()
@click.version_option(version=VERSION, prog_name="studytrack")
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), envvar='STUDYTRACK_DATA_DIR',
              help='Directory holding the task, streak and goal files')
@click.pass_context
def main(ctx, data_dir):
    """
    studytrack - a personal academic task tracker.

    Track assignments per subject, tick off subtasks, and keep an eye on your
    completion streak and monthly goal.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir


@main.command()
@click.argument('title')
@click.option('-s', '--subject', default="", help='Subject or course')
@click.option('--due', default="", help='Due date (YYYY-MM-DD)')
@click.option('-p', '--priority', type=click.Choice(PRIORITY_CHOICES), default=Priority.MEDIUM.value)
@click.option('-d', '--description', default="", help='Longer description')
@click.option('--subtask', 'subtasks', multiple=True, help='Subtask title (repeatable)')
@click.pass_context
def add(ctx, title, subject, due, priority, description, subtasks):
    """Add a new task."""
    try:
        task = _tracker(ctx).create_task({
            "title": title,
            "subject": subject,
            "dueDate": due,
            "priority": priority,
            "description": description,
            "subTasks": [{"title": s} for s in subtasks],
        })
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"✅ Added task {task.id}: {task.title}")


@main.command(name="list")
@click.option('--status', type=click.Choice(STATUS_CHOICES), default=StatusFilter.ALL.value)
@click.option('--subject', default=ALL_SUBJECTS, help='Only tasks of this subject')
@click.pass_context
def list_tasks(ctx, status, subject):
    """List tasks, most recent first."""
    tracker = _tracker(ctx)
    _print_tasks(tracker.filtered(status, subject), tracker.clock().date())


@main.command()
@click.argument('task_id')
@click.pass_context
def show(ctx, task_id):
    """Show one task with its subtasks."""
    task = _tracker(ctx).get_task(task_id)
    if task is None:
        _fail(f"Task not found: {task_id}")
    _print_task(task)


@main.command()
@click.argument('task_id')
@click.pass_context
def toggle(ctx, task_id):
    """Mark a task complete, or back to pending."""
    tracker = _tracker(ctx)
    try:
        task = tracker.toggle_task(task_id)
    except StudyTrackError as e:
        _fail(e)
    if task.completed:
        click.echo(f"🎉 Completed {task.title}! Streak: {tracker.state.streak()}")
    else:
        click.echo(f"⏳ {task.title} is pending again")


@main.command()
@click.argument('task_id')
@click.option('--title')
@click.option('-s', '--subject')
@click.option('--due', help='Due date (YYYY-MM-DD)')
@click.option('-p', '--priority', type=click.Choice(PRIORITY_CHOICES))
@click.option('-d', '--description')
@click.pass_context
def edit(ctx, task_id, title, subject, due, priority, description):
    """Edit fields of a task."""
    patch = {
        key: value for key, value in (
            ("title", title), ("subject", subject), ("dueDate", due),
            ("priority", priority), ("description", description),
        ) if value is not None
    }
    try:
        task = _tracker(ctx).update_task(task_id, patch)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"✅ Updated task {task.id}")


@main.command()
@click.argument('task_id')
@click.confirmation_option(prompt='Are you sure you want to delete this task?')
@click.pass_context
def delete(ctx, task_id):
    """Delete a task."""
    try:
        _tracker(ctx).delete_task(task_id)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"🗑️  Deleted task {task_id}")


@main.command()
@click.pass_context
def subjects(ctx):
    """List the subjects in use."""
    names = sorted(_tracker(ctx).subjects())
    if not names:
        click.echo("📭 No subjects yet")
    for name in names:
        click.echo(f"📚 {name}")


@main.command()
@click.pass_context
def stats(ctx):
    """Show totals, streak and monthly goal progress."""
    try:
        s = _tracker(ctx).stats()
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"📋 Total: {s.total_tasks}")
    click.echo(f"⏳ Pending: {s.pending_tasks}")
    click.echo(f"✅ Completed: {s.completed_tasks}")
    click.echo(f"🔥 Streak: {s.current_streak}")
    click.echo(f"🎯 This month: {s.this_month_completed}/{s.monthly_goal} ({s.goal_progress}%)")


@main.command()
@click.argument('target', type=int)
@click.pass_context
def goal(ctx, target):
    """Set the monthly completion goal."""
    try:
        _tracker(ctx).set_monthly_goal(target)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"🎯 Monthly goal set to {target}")


@main.group()
def subtask():
    """Manage subtasks."""
    pass


@subtask.command(name="add")
@click.argument('task_id')
@click.argument('title')
@click.pass_context
def subtask_add(ctx, task_id, title):
    """Append a subtask to a task."""
    try:
        st = _tracker(ctx).add_subtask(task_id, title)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"✅ Added subtask {st.id}: {st.title}")


@subtask.command(name="toggle")
@click.argument('task_id')
@click.argument('subtask_id')
@click.pass_context
def subtask_toggle(ctx, task_id, subtask_id):
    """Tick or untick a subtask."""
    try:
        _tracker(ctx).toggle_subtask(task_id, subtask_id)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"☑ Toggled subtask {subtask_id}")


@subtask.command(name="delete")
@click.argument('task_id')
@click.argument('subtask_id')
@click.pass_context
def subtask_delete(ctx, task_id, subtask_id):
    """Remove a subtask."""
    try:
        _tracker(ctx).delete_subtask(task_id, subtask_id)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"🗑️  Deleted subtask {subtask_id}")


@main.command()
@click.option('--out', required=True, type=click.Path(dir_okay=False, path_type=Path), help='Output file path')
@click.option('--format', 'fmt', type=click.Choice(['json', 'yaml']), default='json')
@click.pass_context
def export(ctx, out, fmt):
    """Export all tasks to a JSON or YAML file."""
    data = [t.to_dict() for t in _tracker(ctx).tasks]
    try:
        atomic_write(DATA_YAML if fmt == 'yaml' else DATA_JSON, out, data)
    except StudyTrackError as e:
        _fail(e)
    click.echo(f"📦 Exported {len(data)} task(s) to {out}")


@main.command()
def schema():
    """Print the JSON schema of the stored task collection."""
    click.echo(json.dumps(generate_schema(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
