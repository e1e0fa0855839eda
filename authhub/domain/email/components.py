"""
MJML components for internal operational emails
Trusted, code-defined templates: no tenant text is evaluated here
"""

import logging
from typing import Optional

from mjml import mjml_to_html

from ...config import API_ROOT_URL
from ...utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

# Brand colors for platform emails
THEME = {
    "primary": "#2563eb",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_note: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all internal emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if footer_note:
        footer_notice = f"""
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          {footer_note}
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="32px 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              AuthHub
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def welcome_founder_template(first_name: str) -> str:
    """Personal welcome sent from the founder channel with an owner's first project"""
    greeting = f"Hey {sanitize_string(first_name)}," if first_name else "Hey there,"
    content = f"""
    <mj-text>
      {greeting}
    </mj-text>

    <mj-text>
      Thanks for signing up. Your first project is ready: copy its environment
      public key into your app and your users can sign in within minutes.
    </mj-text>

    <mj-text>
      If anything gets in your way, just reply to this email. It comes straight to me.
    </mj-text>
    """

    return get_base_template(
        title="Welcome to AuthHub",
        preview_text="Thanks for signing up",
        content_sections=content,
        cta_url=API_ROOT_URL,
        cta_label="Open dashboard",
        footer_note="You're receiving this because you created an AuthHub account.",
    )


def new_project_notification_template(app_name: str, owner_email: str, environment_id: str) -> str:
    """Support-channel notice that a project was provisioned"""
    content = f"""
    <mj-text>
      A new project was created.
    </mj-text>

    <mj-text padding="0 0 0 20px">
      • App: {sanitize_string(app_name)}<br/>
      • Owner: {sanitize_string(owner_email)}<br/>
      • Environment: {environment_id}
    </mj-text>
    """

    return get_base_template(
        title="New project created",
        preview_text=f"{sanitize_string(app_name)} was just created",
        content_sections=content,
    )


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e
