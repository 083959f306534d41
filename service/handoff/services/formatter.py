"""
Render a stored inquiry as a Telegram MarkdownV2 notification.

Every submitter-supplied value is escaped, so text like "*bold*" or
"[x](http://evil)" shows up literally instead of as markup.
"""

from telegram.helpers import escape_markdown

from handoff.schemas import InquiryPayload

TITLE = "*New inquiry*"


def esc(value: str) -> str:
    return escape_markdown(value or "", version=2)


def format_inquiry(payload: InquiryPayload) -> str:
    program = payload.program

    program_line = ""
    if program.title or program.id:
        parts = [esc(program.title)] if program.title else []
        if program.id:
            parts.append(f"\\({esc(program.id)}\\)")
        program_line = "*Program:* " + " ".join(parts)

    lines = [
        TITLE,
        program_line,
        f"*Page:* {esc(program.url)}" if program.url else "",
        f"*Name:* {esc(payload.name)}",
        f"*Contact:* {esc(payload.contact)}",
        f"*Date:* {esc(payload.date)}",
        f"*Guests:* {esc(payload.guests)}",
        f"*Message:* {esc(payload.message)}" if payload.message else "",
    ]
    return "\n".join(line for line in lines if line)
