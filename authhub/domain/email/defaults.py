"""Built-in email templates seeded into every new environment.

Stored text is evaluated at send time (see templating.py), so it may refer to
anything in the send context: environment.*, user.*, token, inviter.*,
plus the appName / appURL / userFullName / userFirstName shortcuts.
"""

from ...models import EmailTemplateType

DEFAULT_FROM_NAME = "<%= appName %>"
DEFAULT_FROM_EMAIL_LOCAL_PART = "no-reply"


def _layout(title: str, body: str, cta_url: str = "", cta_label: str = "") -> str:
    button = ""
    if cta_url:
        button = (
            f'<p style="margin:32px 0"><a href="{cta_url}" style="background:#0f172a;color:#ffffff;'
            f'padding:14px 28px;border-radius:8px;text-decoration:none;font-weight:600">{cta_label}</a></p>'
        )
    return (
        f"<html><head><title>{title}</title></head>"
        '<body style="font-family:-apple-system,Helvetica,Arial,sans-serif;background:#f8fafc;padding:24px">'
        '<span style="display:none"><%= preview %></span>'
        '<div style="max-width:560px;margin:0 auto;background:#ffffff;padding:40px;border-radius:12px">'
        f'<h1 style="font-size:22px;color:#0f172a">{title}</h1>{body}{button}'
        "</div></body></html>"
    )


GREETING = "<p>Hey<% if (userFirstName) { %> <%= userFirstName %><% } else { %> there<% } %>,</p>"

DEFAULT_TEMPLATES = {
    EmailTemplateType.MagicLink: {
        "name": "Magic Link",
        "subject": "Sign in to <%= appName %>",
        "preview": "Your sign in link for <%= appName %>",
        "content": _layout(
            "Sign in to <%= appName %>",
            GREETING + "<p>Use the button below to sign in. The link can be used once.</p>",
            "<%= environment.authURL %>/magic/<%= token %>",
            "Sign in",
        ),
    },
    EmailTemplateType.ForgotPassword: {
        "name": "Forgot Password",
        "subject": "Reset your <%= appName %> password",
        "preview": "Reset your password",
        "content": _layout(
            "Reset your password",
            GREETING
            + "<p>We received a request to reset your password. "
            + "If it wasn't you, ignore this email.</p>",
            "<%= appURL %>/auth/reset-password/<%= token %>",
            "Reset password",
        ),
    },
    EmailTemplateType.ConfirmEmail: {
        "name": "Confirm Email",
        "subject": "Confirm your email for <%= appName %>",
        "preview": "Confirm your email address",
        "content": _layout(
            "Confirm your email",
            GREETING + "<p>Please confirm this is your email address.</p>",
            "<%= environment.authURL %>/confirm-email/<%= token %>",
            "Confirm email",
        ),
    },
    EmailTemplateType.Welcome: {
        "name": "Welcome",
        "subject": "Welcome to <%= appName %>",
        "preview": "Welcome aboard",
        "content": _layout(
            "Welcome to <%= appName %>",
            "<p>Hey<% if (userFullName) { %> <%= userFullName %><% } else { %> there<% } %>!</p>"
            + "<p>We're thrilled to welcome you aboard.</p>"
            + "<p>If you have any questions, feel free to reply to this email.</p>",
        ),
    },
    EmailTemplateType.Invite: {
        "name": "Invite User",
        "subject": "<%= inviter.fullName || appName %> invited you to <%= appName %>",
        "preview": "You have been invited to <%= appName %>",
        "content": _layout(
            "You're invited",
            "<p><% if (inviter.fullName) { %><%= inviter.fullName %><% } else { %>Someone<% } %>"
            + " invited you to join <%= appName %>.</p>",
            "<%= environment.authURL %>/magic/<%= token %>?inviteFlow=true",
            "Accept invite",
        ),
    },
}
