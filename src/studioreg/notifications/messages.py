"""Builders for the emails sent after registration and waitlist transitions."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

from studioreg.notifications.models import Notification

if TYPE_CHECKING:
    from datetime import datetime

    from studioreg.store.models import Course, Registration, Student


def _greeting(student: Student) -> str:
    return f"Hi {student.first_name or 'there'},"


def registration_confirmed(
    student: Student, course: Course, registration: Registration, schedule_info: str = ""
) -> Notification:
    """Payment received; the student holds a place in the course."""
    lines = [
        _greeting(student),
        "",
        f"Your registration for {course.name} is confirmed.",
        f"Amount paid: ${registration.payment_amount}",
    ]
    if schedule_info:
        lines.append(f"Schedule: {schedule_info}")
    lines += ["", "See you on the dance floor!"]
    body = "\n".join(lines)
    return Notification(
        to_email=student.email,
        subject=f"Registration Confirmed - {course.name}",
        body=body,
        html_body="<p>" + "<br>".join(escape(line) for line in lines) + "</p>",
        template="registration_confirmed",
    )


def waitlist_spot_available(
    student: Student, course: Course, link: str, expires_at: datetime
) -> Notification:
    """A spot opened up; the link lets the student register before it expires."""
    expires = expires_at.strftime("%Y-%m-%d %H:%M UTC")
    lines = [
        _greeting(student),
        "",
        f"A spot has opened up in {course.name}.",
        f"Register using your personal link before {expires}:",
        link,
        "",
        "If you no longer want the spot, simply ignore this email.",
    ]
    return Notification(
        to_email=student.email,
        subject=f"A spot is available - {course.name}",
        body="\n".join(lines),
        html_body=(
            f"<p>{escape(_greeting(student))}</p>"
            f"<p>A spot has opened up in <strong>{escape(course.name)}</strong>.</p>"
            f'<p><a href="{escape(link)}">Register now</a> (link expires {escape(expires)})</p>'
        ),
        template="waitlist_spot_available",
    )


def registration_canceled(student: Student, course: Course, reason: str | None) -> Notification:
    """The student's registration was canceled by the studio."""
    lines = [
        _greeting(student),
        "",
        f"Your registration for {course.name} has been canceled.",
    ]
    if reason:
        lines.append(f"Reason: {reason}")
    lines += ["", "Reply to this email if you have any questions."]
    return Notification(
        to_email=student.email,
        subject=f"Registration Canceled - {course.name}",
        body="\n".join(lines),
        template="registration_canceled",
    )
