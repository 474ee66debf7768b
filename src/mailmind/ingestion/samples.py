"""Demo emails imported when an upload carries no file."""

from .base import ParsedEmail

SAMPLE_FILENAME = "sample_demo_data"


def generate_sample_emails() -> list[ParsedEmail]:
    """Eight demo emails covering tasks, meetings, approvals and notices."""
    return [
        ParsedEmail(
            subject="Project status report",
            sender="Chris Kim <kim@example.com>",
            date="2025-01-05 09:30:00",
            body=(
                "Hello, here is the current project status. The first development phase is "
                "complete and we plan to start phase two next Monday. The test schedule is "
                "still being coordinated, please keep it in mind."
            ),
        ),
        ParsedEmail(
            subject="Meeting schedule",
            sender="Young Park <park@example.com>",
            date="2025-01-06 14:00:00",
            body=(
                "The regular meeting is scheduled for next Tuesday at 2 PM in meeting room A. "
                "The main agenda is the quarterly results review and planning for the next "
                "quarter. Please reply to confirm your attendance."
            ),
        ),
        ParsedEmail(
            subject="Request for quotation",
            sender="Min Lee <lee@example.com>",
            date="2025-01-04 11:15:00",
            body=(
                "Hello, we would like a detailed quotation for the system build costs mentioned "
                "in the proposal. Please reply as soon as possible for our budget review and "
                "include an itemized breakdown."
            ),
        ),
        ParsedEmail(
            subject="Server maintenance notice",
            sender="System Administrator <admin@example.com>",
            date="2025-01-07 08:00:00",
            body=(
                "Scheduled server maintenance runs from 10 PM tonight until 6 AM tomorrow. "
                "The system will be unavailable during this window. Please finish any "
                "important work before maintenance starts."
            ),
        ),
        ParsedEmail(
            subject="Training attendance",
            sender="HR Team <hr@example.com>",
            date="2025-01-03 16:45:00",
            body=(
                "Training on the new system takes place next Wednesday for the designated "
                "contact in each department, from 10 AM to 12 PM. The session is held in the "
                "main conference room on the third floor of the main building."
            ),
        ),
        ParsedEmail(
            subject="Contract review request",
            sender="Legal Team <legal@example.com>",
            date="2025-01-02 10:30:00",
            body=(
                "Please review the attached draft contract. Send any changes or comments by "
                "this Friday. The signing schedule is tight, so a prompt review is "
                "appreciated."
            ),
        ),
        ParsedEmail(
            subject="Monthly report submission",
            sender="Management Support <support@example.com>",
            date="2025-01-01 09:00:00",
            body=(
                "The deadline for the January monthly report is January 10. Include each "
                "department's results and upcoming plans. The report template can be "
                "downloaded from the shared folder."
            ),
        ),
        ParsedEmail(
            subject="Travel expense settlement",
            sender="Finance Team <finance@example.com>",
            date="2025-01-06 13:20:00",
            body=(
                "Please submit original receipts and the settlement form for last month's "
                "business trip. The deadline is this Friday; late submissions roll over to "
                "next month. Contact the finance team with any questions."
            ),
        ),
    ]
