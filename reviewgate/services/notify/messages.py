"""Applicant-facing message text for each decision."""

from reviewgate.models.status import ReviewAction


def render_decision_message(
    action: ReviewAction,
    guild_name: str,
    reason: str | None = None,
) -> str | None:
    """Build the message sent to the applicant after a decision.

    Returns None for actions the applicant is not told about.
    """
    if action is ReviewAction.APPROVE:
        lines = [f"Hi, welcome to {guild_name}! Your application has been approved."]
        if reason:
            lines.append(f"Note from reviewer: {reason}")
        lines.append("Enjoy your stay!")
    elif action is ReviewAction.REJECT:
        lines = [
            f"Hello, thanks for applying to {guild_name}. The moderation team was "
            "not able to approve this application. You can submit a new one anytime!"
        ]
        if reason:
            lines.append(f"Reason: {reason}.")
    elif action is ReviewAction.PERM_REJECT:
        lines = [
            f"You've been permanently rejected from {guild_name} and cannot apply again."
        ]
    elif action is ReviewAction.KICK:
        lines = [
            f"Hi, your application with {guild_name} was reviewed and you were removed "
            "from the server. If you believe this was a mistake, you may re-apply in the future."
        ]
        if reason:
            lines.append(f"Reason: {reason}.")
    elif action is ReviewAction.NEED_INFO:
        lines = [
            f"Hi, the moderators reviewing your application to {guild_name} need a bit "
            "more information before they can decide."
        ]
        if reason:
            lines.append(reason)
    else:
        return None
    return "\n".join(lines)
