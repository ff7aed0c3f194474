"""Rendering of timeline snapshots for the terminal.

Hides how messages and activity states are turned into Rich renderables.
"""

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from ..timeline import ActivityState, Message, Stage

# Style per activity stage
STAGE_STYLES = {
    Stage.SEARCHING: "yellow",
    Stage.READING: "cyan",
    Stage.WRITING: "green",
    Stage.ERROR: "bold red",
}

MAX_URLS_SHOWN = 5


def format_activity(activity: ActivityState) -> Text:
    """Summarize an activity state on a few lines."""
    text = Text()
    for i, stage in enumerate(activity.stages):
        if i:
            text.append(" -> ", style="dim")
        text.append(stage.value, style=STAGE_STYLES.get(stage, ""))
    if activity.query:
        text.append(f"\nquery: {activity.query}", style="dim")
    for url in activity.results[:MAX_URLS_SHOWN]:
        text.append(f"\n  {url}", style="blue underline")
    hidden = len(activity.results) - MAX_URLS_SHOWN
    if hidden > 0:
        text.append(f"\n  ... and {hidden} more", style="dim")
    if activity.error:
        text.append(f"\nerror: {activity.error}", style="red")
    return text


def format_message(message: Message) -> Panel:
    """Render one message as a panel."""
    parts: list[RenderableType] = []
    if message.activity is not None and message.activity.stages:
        parts.append(format_activity(message.activity))
    if message.loading and not message.content:
        parts.append(Text("...", style="dim italic"))
    else:
        parts.append(Text(message.content))

    if message.is_user:
        return Panel(Group(*parts), title="You", title_align="right", border_style="magenta")
    return Panel(Group(*parts), title="Assistant", title_align="left", border_style="cyan")


def format_timeline(messages: tuple[Message, ...]) -> Group:
    """Render a whole snapshot."""
    return Group(*(format_message(msg) for msg in messages))
