"""Text templates stored on EmailTemplate rows (subject, fromName, preview, content).

Templates are written with EJS-style tags, the format tenants author them in:

    <%= expr %>                     HTML-escaped output
    <%- expr %>                     raw output
    <% if (cond) { %> ... <% } %>   conditionals, with "} else if (cond) {" and "} else {"
    -%>                             close a tag and drop the newline after it

Each tag is rewritten into Jinja syntax (keeping "<%"/"%>" as the Jinja
delimiters so literal text is never reinterpreted) and rendered in a sandbox.
Missing names render as "" and are falsy; attribute access on a missing name
stays missing instead of raising.
"""

import re
from typing import Any, Optional

from jinja2 import ChainableUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

# A closing "-%>" also swallows one newline that follows it
_TAG = re.compile(r"<%([=\-#]?)(.*?)(?:-%>(?:\r?\n)?|%>)", re.DOTALL)

_IF = re.compile(r"^if\s*\((?P<cond>.*)\)\s*\{$", re.DOTALL)
_ELSE_IF = re.compile(r"^\}\s*else\s+if\s*\((?P<cond>.*)\)\s*\{$", re.DOTALL)
_ELSE = re.compile(r"^\}\s*else\s*\{$")
_CLOSE = re.compile(r"^\}$")

# JS operators and literals -> Jinja, applied outside string literals
_OPERATORS = [
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!=="), " != "),
    (re.compile(r"==="), " == "),
    (re.compile(r"!(?!=)"), " not "),
    (re.compile(r"\?\."), "."),
    (re.compile(r"\b(null|undefined)\b"), "none"),
]
_STRING_LITERAL = re.compile(r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")""")

_DELIMITERS = dict(
    block_start_string="<%",
    block_end_string="%>",
    variable_start_string="<%=",
    variable_end_string="%>",
    comment_start_string="<%#",
    comment_end_string="%>",
)

_html_env = SandboxedEnvironment(
    **_DELIMITERS, autoescape=True, undefined=ChainableUndefined, keep_trailing_newline=True
)
# Subjects and sender names are headers, not markup
_text_env = SandboxedEnvironment(
    **_DELIMITERS, autoescape=False, undefined=ChainableUndefined, keep_trailing_newline=True
)


class TemplateRenderError(Exception):
    """A stored text template could not be translated or evaluated"""


def translate_expression(expr: str) -> str:
    parts = _STRING_LITERAL.split(expr)
    # Odd indexes are the string literals captured by split()
    for index in range(0, len(parts), 2):
        for pattern, replacement in _OPERATORS:
            parts[index] = pattern.sub(replacement, parts[index])
    return "".join(parts).strip()


def translate_statement(code: str) -> str:
    code = code.strip()

    match = _IF.match(code)
    if match:
        return f"if {translate_expression(match.group('cond'))}"
    match = _ELSE_IF.match(code)
    if match:
        return f"elif {translate_expression(match.group('cond'))}"
    if _ELSE.match(code):
        return "else"
    if _CLOSE.match(code):
        return "endif"

    raise TemplateRenderError(f"Unsupported template statement: {code!r}")


def translate(source: str) -> str:
    """Rewrite EJS-style tags into Jinja statements using the same delimiters"""

    def _replace(match: re.Match) -> str:
        kind, code = match.group(1), match.group(2)
        if kind == "#":
            return ""
        if kind == "=":
            return f"<%= {translate_expression(code)} %>"
        if kind == "-":
            return f"<%= ({translate_expression(code)})|safe %>"
        return f"<% {translate_statement(code)} %>"

    return _TAG.sub(_replace, source)


def render_text_template(source: Optional[str], context: dict[str, Any], html: bool = True) -> str:
    """Evaluate a stored template against a flat data context"""
    if not source:
        return ""

    env = _html_env if html else _text_env
    try:
        template = env.from_string(translate(source))
        return template.render(**context)
    except TemplateRenderError:
        raise
    except (TemplateError, TypeError, ValueError, ArithmeticError, AttributeError) as e:
        raise TemplateRenderError(str(e)) from e
