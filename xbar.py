"""
Rendering pull requests in the xbar plugin format.

xbar reads a plugin's stdout: everything before the first `---` line is shown
in the menu bar, everything after it is the dropdown. Lines starting with `--`
are submenu items, and ` | ` separates an item's text from its parameters.
"""

from typing import Iterable, Union

from pydantic import BaseModel

from model import PullRequest, Status, StatusKind

SEPARATOR = "---"
SUBMENU = "--"
COPY_PARAMS = "bash=/bin/bash param1=-c param2=pbcopy<<<$0 param3={value} terminal=false"


class Emoji(BaseModel):
    """The glyph shown for each kind of status."""

    success_and_approved: str = "✅"
    success_awaiting_approval: str = "👀"
    draft: str = "📝"
    success: str = "🟢"
    pending: str = "🟡"
    failure: str = "🔴"
    unknown: str = "❔"
    needs_attention: str = "⚠️"
    error: str = "❌"
    queued: str = "🚂"

    def for_status(self, status: Union[Status, StatusKind]) -> str:
        kind = status.kind if isinstance(status, Status) else status
        return getattr(self, kind.value)


def escape(text: str) -> str:
    """
    Escape the field delimiter so a title can't be read as parameters.

    Line breaks become spaces, since every menu item is exactly one line.
    """
    text = text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    return text.replace("\\", "\\\\").replace("|", "\\|")


def unescape(text: str) -> str:
    out = []
    chars = iter(text)
    for char in chars:
        if char == "\\":
            out.append(next(chars, "\\"))
        else:
            out.append(char)
    return "".join(out)


def _split_unescaped(line: str) -> tuple[str, str]:
    """Split a line at its first unescaped `|`."""
    idx = 0
    while idx < len(line):
        if line[idx] == "\\":
            idx += 2
            continue
        if line[idx] == "|":
            return line[:idx], line[idx + 1:]
        idx += 1
    return line, ""


def _copy_line(label: str, value: str) -> str:
    return f"{SUBMENU}{label} ({escape(value)}) | {COPY_PARAMS.format(value=value)}"


def render_pull_request(pr: PullRequest, emoji: Emoji) -> str:
    """
    Render one pull request as a menu item with a submenu.

    Lines, in order:
    - header: glyph, title and a link to the pull request
    - actions copying the URL, number and branch name to the clipboard
    - who the pull request is waiting on, if anyone
    - one line per check, in the order they were loaded
    """
    lines = [
        f"{emoji.for_status(pr.status())} {escape(pr.title)} | href={pr.url}",
        _copy_line("Copy URL", pr.url),
        _copy_line("Copy Number", f"#{pr.number}"),
        _copy_line("Copy Branch", pr.head_ref),
    ]

    if pr.reviewer is not None:
        lines.append(f"{SUBMENU}Awaiting review from {pr.reviewer}")

    if pr.checks:
        lines.append(f"{SUBMENU}{SEPARATOR}")
        for check in pr.checks:
            glyph = emoji.for_status(StatusKind.for_check_status(check.status))
            lines.append(f"{SUBMENU}{glyph} {escape(check.name)} | href={check.url}")

    return "\n".join(lines)


def parse_header(line: str) -> tuple[str, str, str]:
    """
    Read a header line written by render_pull_request() back apart.

    Returns:
        (glyph, title, url)

    Raises:
        ValueError: if the line isn't a rendered header
    """
    text, params = _split_unescaped(line)
    if text.endswith(" "):
        text = text[:-1]
    glyph, _, title = text.partition(" ")
    params = params.strip()
    if not glyph or not params.startswith("href="):
        raise ValueError(f"{line!r} is not a pull request header")

    return glyph, unescape(title), params[len("href="):]


def render_menu(prs: Iterable[PullRequest], emoji: Emoji) -> str:
    """
    Render the full plugin output.

    The menu bar line is every pull request's glyph side by side, then the
    dropdown lists each pull request in the order given.
    """
    prs = list(prs)
    top_line = "".join(emoji.for_status(pr.status()) for pr in prs)
    menu_lines = [render_pull_request(pr, emoji) for pr in prs]

    return f"{top_line}\n{SEPARATOR}\n" + "\n".join(menu_lines) + "\n"
