from __future__ import annotations

from ota.output.console import ConsoleProtocol, Style
from ota.services.update.model import PublishSummary

_PLATFORM_LABELS = {"android": "Android", "ios": "iOS"}


def update_group_url(*, website_url: str, summary: PublishSummary, group: str) -> str:
    app = summary.app
    return f"{website_url}/accounts/{app.owner_name}/projects/{app.slug}/updates/{group}"


def print_publish_summary(
    *, summary: PublishSummary, console: ConsoleProtocol, website_url: str
) -> None:
    if summary.branch.created_branch:
        console.print(f"created branch {summary.branch.branch_name}", Style.DIM)

    for group in summary.groups:
        updates = [u for u in summary.updates if u.group == group]
        console.header("Published update group")
        console.kv("Branch", summary.branch.branch_name)
        console.kv("Runtime version", updates[0].runtime_version)
        console.kv("Platform", ", ".join(u.platform for u in updates))
        console.kv("Update group ID", group)
        for update in updates:
            label = _PLATFORM_LABELS.get(update.platform, update.platform)
            console.kv(f"{label} update ID", update.id)
        console.kv("Message", summary.message)
        if summary.git_commit_hash:
            console.kv("Commit", summary.git_commit_hash)
        url = update_group_url(website_url=website_url, summary=summary, group=group)
        console.kv("Website link", url)


def summary_json(summary: PublishSummary) -> list[dict[str, object]]:
    return [u.as_json() for u in summary.updates]
