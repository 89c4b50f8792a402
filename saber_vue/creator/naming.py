"""npm package-name validation for new project names.

The rules mirror the registry's own: names must be lowercase, URL-friendly,
at most 214 characters, must not start with ``.`` or ``_``, and must not
shadow a Node core module.  Problems are reported, never auto-corrected.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from saber_vue.creator.models import NameValidation

BLACKLISTED_NAMES: frozenset[str] = frozenset({"node_modules", "favicon.ico"})

NODE_CORE_MODULES: frozenset[str] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "dns", "domain", "events", "fs", "http",
    "http2", "https", "inspector", "module", "net", "os", "path",
    "perf_hooks", "process", "punycode", "querystring", "readline", "repl",
    "stream", "string_decoder", "sys", "timers", "tls", "trace_events",
    "tty", "url", "util", "v8", "vm", "worker_threads", "zlib",
})

MAX_NAME_LENGTH = 214

_SPECIAL_CHARACTERS = re.compile(r"[~'!()*]")
_SCOPED_NAME = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")


def _encode_uri_component(value: str) -> str:
    """Percent-encode *value* with the same safe set as ``encodeURIComponent``."""
    return quote(value, safe="!~*'()")


def _is_url_friendly(value: str) -> bool:
    return _encode_uri_component(value) == value


def validate_project_name(name: str) -> NameValidation:
    """Check *name* against npm's package-name rules.

    Returns a :class:`NameValidation` listing every error and warning.  A name
    is only usable for a new package when it has neither.

    Examples::

        validate_project_name("my-vue-app").valid_for_new_packages -> True
        validate_project_name("My-App").warnings
        -> ["name can no longer contain capital letters"]
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not name:
        errors.append("name length must be greater than zero")
    if name.startswith("."):
        errors.append("name cannot start with a period")
    if name.startswith("_"):
        errors.append("name cannot start with an underscore")
    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")

    lowered = name.lower()
    if lowered in BLACKLISTED_NAMES:
        errors.append(f"{lowered} is a blacklisted name")
    if lowered in NODE_CORE_MODULES:
        warnings.append(f"{lowered} is a core module name")

    if len(name) > MAX_NAME_LENGTH:
        warnings.append(f"name can no longer contain more than {MAX_NAME_LENGTH} characters")
    if lowered != name:
        warnings.append("name can no longer contain capital letters")
    if _SPECIAL_CHARACTERS.search(name.split("/")[-1]):
        warnings.append('name can no longer contain special characters ("~\'!()*")')

    if not _is_url_friendly(name):
        match = _SCOPED_NAME.match(name)
        scoped_ok = False
        if match:
            user, package = match.group(1), match.group(2)
            scoped_ok = (user is None or _is_url_friendly(user)) and _is_url_friendly(package)
        if not scoped_ok:
            errors.append("name can only contain URL-friendly characters")

    return NameValidation(
        valid_for_new_packages=not errors and not warnings,
        valid_for_old_packages=not errors,
        errors=errors,
        warnings=warnings,
    )
