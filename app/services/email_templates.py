"""
HTML bodies for booking notifications.

Each function returns one body that is shared by every recipient of a send;
values coming from the booking form are HTML-escaped.
"""

from html import escape
from typing import Iterable, Optional

NOT_PROVIDED = "(not provided)"


def _e(value: Optional[object], default: str = NOT_PROVIDED) -> str:
    if value is None or str(value).strip() == "":
        return escape(default)
    return escape(str(value))


def _multiline(value: Optional[str]) -> str:
    return _e(value).replace("\n", "<br/>")


def _link(url: Optional[str], label: Optional[str] = None) -> str:
    if not url:
        return escape(NOT_PROVIDED)
    return f'<a href="{escape(url, quote=True)}" target="_blank">{escape(label or url)}</a>'


def meeting_notification(
    name: str,
    email: str,
    start_formatted: str,
    end_formatted: str,
    tz: str,
    meet_link: Optional[str],
    message: Optional[str],
    recipients: Iterable[str] = (),
    event_link: Optional[str] = None,
) -> str:
    """Confirmation sent once to requester, admin, team and guests"""
    recipients_text = ", ".join(recipients)
    event_row = f"<p>Calendar Event: {_link(event_link, 'Open Event')}</p>" if event_link else ""
    return f"""
    <div style="font-family: Arial, sans-serif;">
      <p>Hi {_e(name)},</p>
      <p><strong>User Email:</strong> {_e(email)}</p>
      <p>Your meeting is scheduled for <strong>{_e(start_formatted)}</strong> to <strong>{_e(end_formatted)}</strong> ({_e(tz)}).</p>
      <p>Join Google Meet: {_link(meet_link)}</p>
      {event_row}
      <p><strong>Message:</strong> {_multiline(message)}</p>
      <p><strong>Recipients:</strong> {escape(recipients_text)}</p>
      <p><em>Sent to the requester, admin, team members and guests</em></p>
      <p>Thanks,</p>
      <p>Your Team</p>
    </div>
    """


def fallback_admin_notification(
    name: str,
    email: str,
    phone: Optional[str],
    message: Optional[str],
    meeting_date: Optional[str],
    meeting_time: Optional[str],
    company_name: Optional[str] = None,
    industries: Optional[str] = None,
    job_titles: Optional[str] = None,
    priority: Optional[str] = None,
    monthly_contacts: Optional[str] = None,
    attendees: Iterable[str] = (),
) -> str:
    """Raw request forwarded to admin and team when no calendar event exists"""
    guests = ", ".join(attendees)
    return f"""
    <div style="font-family: Arial, sans-serif;">
      <h2>New Meeting Request (Calendar not created)</h2>
      <p><strong>Name:</strong> {_e(name)}</p>
      <p><strong>Email:</strong> {_e(email)}</p>
      <p><strong>Phone:</strong> {_e(phone)}</p>
      <p><strong>Company:</strong> {_e(company_name)}</p>
      <p><strong>Industries:</strong> {_e(industries)}</p>
      <p><strong>Job Titles:</strong> {_e(job_titles)}</p>
      <p><strong>Priority:</strong> {_e(priority)}</p>
      <p><strong>Monthly Contacts:</strong> {_e(monthly_contacts)}</p>
      <p><strong>Guests:</strong> {_e(guests)}</p>
      <p><strong>Message:</strong><br/>{_multiline(message)}</p>
      <p><strong>Selected Time:</strong> {_e(meeting_date, '')} {_e(meeting_time, '')}</p>
      <p>Please confirm this meeting with the requester manually.</p>
    </div>
    """


def fallback_requester_notification(
    name: str,
    meeting_date: Optional[str],
    meeting_time: Optional[str],
    tz: str,
) -> str:
    """Acknowledgement to the requester while confirmation is pending"""
    return f"""
    <div style="font-family: Arial, sans-serif;">
      <p>Hi {_e(name)},</p>
      <p>We have received your meeting request for <strong>{_e(meeting_date, '')} {_e(meeting_time, '')}</strong> ({_e(tz)}).</p>
      <p>Our team will confirm the meeting with you shortly and send the joining details.</p>
      <p>Thanks,</p>
      <p>Your Team</p>
    </div>
    """


def time_adjusted_notice(start_formatted: str, tz: str) -> str:
    return (
        f"<p><strong>Note:</strong> we could not read the requested date/time, "
        f"so the meeting was set for {_e(start_formatted)} ({_e(tz)}). "
        f"Reply to this email if you need a different slot.</p>"
    )


def cancellation_notification(name: str, start_formatted: str, tz: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif;">
      <p>Hi {_e(name)},</p>
      <p>Your meeting scheduled for <strong>{_e(start_formatted)}</strong> ({_e(tz)}) has been cancelled.</p>
      <p>Thanks,</p>
      <p>Your Team</p>
    </div>
    """


def diagnostic_notification() -> str:
    return "<p>This is a test email. If you received it, SMTP is configured.</p>"
