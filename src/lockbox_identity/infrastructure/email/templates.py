"""Subjects and bodies for the account lifecycle emails."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    text: str
    html: str

    def render(self, **values: str) -> tuple[str, str]:
        """Return the (text, html) bodies filled with ``values``."""
        return self.text.format(**values), self.html.format(**values)


_HTML_LAYOUT = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: Helvetica, Arial, sans-serif; background-color: #f3f4f6; margin: 0; padding: 24px;">
    <div style="max-width: 560px; margin: 0 auto; background-color: #ffffff; border-radius: 6px; padding: 32px;">
        <h2 style="color: #1f2937; margin-top: 0;">{title}</h2>
        {content}
        <p style="color: #9ca3af; font-size: 12px; margin-top: 32px;">{{app_name}}</p>
    </div>
</body>
</html>
"""


def _html(title: str, content: str) -> str:
    return _HTML_LAYOUT.format(title=title, content=content)


def _button(label: str) -> str:
    return (
        '<p style="margin: 24px 0; text-align: center;">'
        '<a href="{link}" style="display: inline-block; padding: 12px 24px; '
        "background-color: #1d4ed8; color: #ffffff; text-decoration: none; "
        f'border-radius: 4px; font-weight: bold;">{label}</a></p>'
        '<p style="color: #6b7280; font-size: 13px; word-break: break-all;">{link}</p>'
    )


VERIFICATION = EmailTemplate(
    subject="Confirm your email address",
    text="""Hello,

Please confirm the email address for your {app_name} account.

Open the link below to verify it (valid for 72 hours):
{link}

If you did not create an account, ignore this email.

-- {app_name}
""",
    html=_html(
        "Confirm your email address",
        "<p>Please confirm the email address for your account.</p>"
        "<p>This link is valid for 72 hours.</p>" + _button("Verify email"),
    ),
)

PASSWORD_RESET = EmailTemplate(
    subject="Password reset request",
    text="""Hello,

Someone requested a password reset for your {app_name} account.

Open the link below to choose a new password (valid for 1 hour):
{link}

If you did not request this, ignore this email. Your password is unchanged.

-- {app_name}
""",
    html=_html(
        "Password reset request",
        "<p>Someone requested a password reset for your account.</p>"
        "<p>This link is valid for 1 hour.</p>" + _button("Reset password"),
    ),
)

DELETION_CONFIRMATION = EmailTemplate(
    subject="Confirm account deletion",
    text="""Hello,

We received a request to permanently delete your {app_name} account.

Open the link below to confirm (valid for 24 hours):
{link}

If you did not request this, ignore this email and change your password.

-- {app_name}
""",
    html=_html(
        "Confirm account deletion",
        "<p>We received a request to permanently delete your account.</p>"
        "<p>This link is valid for 24 hours. Deletion cannot be undone.</p>"
        + _button("Delete my account"),
    ),
)

DELETION_COMPLETED = EmailTemplate(
    subject="Your account has been deleted",
    text="""Hello,

Your {app_name} account and its data have been permanently deleted.

If you did not expect this, contact support.

-- {app_name}
""",
    html=_html(
        "Your account has been deleted",
        "<p>Your account and its data have been permanently deleted.</p>"
        "<p>If you did not expect this, contact support.</p>",
    ),
)
