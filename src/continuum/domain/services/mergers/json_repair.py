"""
Best-effort repair of truncated JSON text.

`repair_json` makes one pass over the text tracking string state and an
explicit stack of open containers, then appends the shortest suffix that
closes everything. Along the way it drops trailing commas, escapes raw control
characters inside strings and completes a literal or number the cut left
half-written. It never reorders or rewrites content that was already valid.
"""

from __future__ import annotations

import re

_LITERALS = ("true", "false", "null")
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_TAIL_TOKEN = re.compile(r"[A-Za-z0-9.+\-]+$")
_PARTIAL_UNICODE_ESCAPE = re.compile(r"\\u[0-9a-fA-F]{0,3}$")
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}

# Per-container expectations while scanning.
_EXPECT_KEY = "key"
_EXPECT_COLON = "colon"
_EXPECT_VALUE = "value"
_AFTER_VALUE = "after"


def _strip_trailing_comma(out: list[str]) -> None:
    idx = len(out) - 1
    while idx >= 0 and out[idx].isspace():
        idx -= 1
    if idx >= 0 and out[idx] == ",":
        del out[idx]


def _complete_tail_token(text: str) -> tuple[str, bool]:
    """
    Complete or drop a bare token cut off at the end of `text`.

    Returns the new text and whether a value was removed (so the caller knows a
    value is still owed).
    """
    match = _TAIL_TOKEN.search(text)
    if match is None:
        return text, False
    token = match.group(0)
    head = text[: match.start()]
    if token in _LITERALS or _NUMBER.fullmatch(token):
        return text, False
    if token.isalpha():
        for literal in _LITERALS:
            if literal.startswith(token):
                return head + literal, False
        return head, True
    trimmed = token.rstrip(".eE+-")
    if trimmed and _NUMBER.fullmatch(trimmed):
        return head + trimmed, False
    return head, True


def repair_json(text: str, /) -> str:
    out: list[str] = []
    stack: list[str] = []
    states: list[str] = []
    in_string = False
    escape = False
    string_is_key = False

    def value_done() -> None:
        if states:
            states[-1] = _AFTER_VALUE

    for ch in text:
        if in_string:
            if escape:
                out.append(ch)
                escape = False
            elif ch == "\\":
                out.append(ch)
                escape = True
            elif ch == '"':
                out.append(ch)
                in_string = False
                if string_is_key:
                    states[-1] = _EXPECT_COLON
                else:
                    value_done()
            else:
                out.append(_CONTROL_ESCAPES.get(ch, ch))
            continue

        if ch == '"':
            in_string = True
            string_is_key = bool(stack) and stack[-1] == "{" and states[-1] == _EXPECT_KEY
            out.append(ch)
        elif ch in "{[":
            stack.append(ch)
            states.append(_EXPECT_KEY if ch == "{" else _EXPECT_VALUE)
            out.append(ch)
        elif ch in "}]":
            _strip_trailing_comma(out)
            out.append(ch)
            if stack and (stack[-1], ch) in {("{", "}"), ("[", "]")}:
                stack.pop()
                states.pop()
                value_done()
        elif ch == ",":
            if stack:
                states[-1] = _EXPECT_KEY if stack[-1] == "{" else _EXPECT_VALUE
            out.append(ch)
        elif ch == ":":
            if stack and stack[-1] == "{":
                states[-1] = _EXPECT_VALUE
            out.append(ch)
        else:
            if not ch.isspace():
                value_done()
            out.append(ch)

    result = "".join(out)

    if in_string:
        if escape:
            result = result[:-1]
        result = _PARTIAL_UNICODE_ESCAPE.sub("", result) + '"'
        if string_is_key:
            states[-1] = _EXPECT_COLON
        else:
            value_done()

    result = result.rstrip()
    result, value_owed = _complete_tail_token(result)
    result = result.rstrip()

    if stack:
        if result.endswith(","):
            result = result[:-1].rstrip()
        elif result.endswith(":") or (value_owed and stack[-1] == "{"):
            result += " null"
        elif states[-1] == _EXPECT_COLON:
            result += ": null"

    for opener in reversed(stack):
        result += "}" if opener == "{" else "]"
    return result
