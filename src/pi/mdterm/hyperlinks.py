"""Terminal color and OSC 8 hyperlink support detection.

Detection reads the environment, the command line flags and whether the
output stream is a TTY.  Every input can be injected, so callers (and tests)
can ask about a hypothetical terminal without touching ``os.environ``.
"""

from __future__ import annotations

import logging
import os
import platform as platform_module
import re
import sys
from dataclasses import dataclass
from typing import IO, Mapping, Sequence

logger = logging.getLogger(__name__)

_TEAMCITY_COLOR_RE = re.compile(r"^(9\.(0*[1-9]\d*)\.|\d{2,}\.)")
_TERM_256_RE = re.compile(r"-256(color)?$", re.IGNORECASE)
_TERM_BASIC_RE = re.compile(r"^screen|^xterm|^vt100|^vt220|^rxvt|color|ansi|cygwin|linux", re.IGNORECASE)
_COMPACT_VERSION_RE = re.compile(r"^\d{3,4}$")


@dataclass
class Version:
    major: int = 0
    minor: int = 0
    patch: int = 0


@dataclass
class HyperlinkSupport:
    stdout: bool
    stderr: bool


def has_flag(flag: str, argv: Sequence[str] | None = None) -> bool:
    """Whether *flag* appears in *argv* before a ``--`` terminator.

    Bare names get ``--`` (or ``-`` for single letters) prepended.
    """
    if argv is None:
        argv = sys.argv
    if flag.startswith("-"):
        prefix = ""
    elif len(flag) == 1:
        prefix = "-"
    else:
        prefix = "--"
    argv = list(argv)
    try:
        position = argv.index(prefix + flag)
    except ValueError:
        return False
    try:
        terminator = argv.index("--")
    except ValueError:
        return True
    return position < terminator


def _parse_int(text: str) -> int | None:
    match = re.match(r"\s*[+-]?\d+", text)
    return int(match.group(0)) if match else None


def parse_version(version: str | None = "") -> Version:
    """Parse ``"1.72.0"``-style versions; ``"4601"`` means ``0.46.1``."""
    version = version or ""
    if _COMPACT_VERSION_RE.match(version):
        match = re.search(r"((\d{1,2})(\d{2}))", version)
        if match is None:
            return Version()
        # The minor part is the whole matched number, as VTE reports it.
        return Version(major=0, minor=int(match.group(1)), patch=int(match.group(2)))

    parts = [_parse_int(part) or 0 for part in version.split(".")]
    parts += [0] * (3 - len(parts))
    return Version(major=parts[0], minor=parts[1], patch=parts[2])


def _env_force_color(env: Mapping[str, str]) -> int | None:
    if "FORCE_COLOR" not in env:
        return None
    value = env["FORCE_COLOR"]
    if value == "true" or value == "":
        return 1
    if value == "false":
        return 0
    parsed = _parse_int(value)
    if parsed is None:
        return None
    level = min(parsed, 3)
    if level not in (0, 1, 2, 3):
        return None
    return level


def _flag_force_color(argv: Sequence[str]) -> int | None:
    if any(has_flag(f, argv) for f in ("no-color", "no-colors", "color=false", "color=never")):
        return 0
    if any(has_flag(f, argv) for f in ("color", "colors", "color=true", "color=always")):
        return 1
    return None


def _windows_color_level(release: str) -> int:
    parts = release.split(".")
    try:
        major = int(parts[0])
        build = int(parts[2])
    except (IndexError, ValueError):
        return 1
    if major >= 10 and build >= 10586:
        return 3 if build >= 14931 else 2
    return 1


def supports_color(
    stream: IO[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    argv: Sequence[str] | None = None,
    platform: str | None = None,
    os_release: str | None = None,
    sniff_flags: bool = True,
) -> int:
    """Return the color level of *stream*: 0 none, 1 basic, 2 256, 3 truecolor."""
    env = os.environ if env is None else env
    argv = sys.argv if argv is None else argv
    platform = sys.platform if platform is None else platform

    env_force = _env_force_color(env)
    flag_force = env_force if env_force is not None else _flag_force_color(argv)
    force = flag_force if sniff_flags else env_force

    if force == 0:
        return 0

    if sniff_flags:
        if any(has_flag(f, argv) for f in ("color=16m", "color=full", "color=truecolor")):
            return 3
        if has_flag("color=256", argv):
            return 2

    # Azure DevOps pipelines
    if "TF_BUILD" in env and "AGENT_NAME" in env:
        return 1

    if stream is not None and not _is_tty(stream) and force is None:
        return 0

    minimum = force or 0

    term = env.get("TERM", "")
    if term == "dumb":
        return minimum

    if platform == "win32":
        return _windows_color_level(os_release or platform_module.version())

    if "CI" in env:
        if any(key in env for key in ("GITHUB_ACTIONS", "GITEA_ACTIONS", "CIRCLECI")):
            return 3
        if (
            any(key in env for key in ("TRAVIS", "APPVEYOR", "GITLAB_CI", "BUILDKITE", "DRONE"))
            or env.get("CI_NAME") == "codeship"
        ):
            return 1
        return minimum

    if "TEAMCITY_VERSION" in env:
        return 1 if _TEAMCITY_COLOR_RE.match(env["TEAMCITY_VERSION"]) else 0

    if env.get("COLORTERM") == "truecolor":
        return 3

    if term == "xterm-kitty":
        return 3

    if "TERM_PROGRAM" in env:
        version = _parse_int(env.get("TERM_PROGRAM_VERSION", "").split(".")[0]) or 0
        match env["TERM_PROGRAM"]:
            case "iTerm.app":
                return 3 if version >= 3 else 2
            case "Apple_Terminal":
                return 2

    if _TERM_256_RE.search(term):
        return 2

    if _TERM_BASIC_RE.search(term):
        return 1

    if "COLORTERM" in env:
        return 1

    return minimum


def supports_hyperlinks(
    stream: IO[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    argv: Sequence[str] | None = None,
    platform: str | None = None,
) -> bool:
    """Whether OSC 8 hyperlinks written to *stream* will be rendered."""
    env = os.environ if env is None else env
    argv = sys.argv if argv is None else argv
    platform = sys.platform if platform is None else platform

    force = env.get("FORCE_HYPERLINK")
    if force:
        return _parse_int(force) != 0

    if any(
        has_flag(f, argv)
        for f in ("no-hyperlink", "no-hyperlinks", "hyperlink=false", "hyperlink=never")
    ):
        return False

    if has_flag("hyperlink=true", argv) or has_flag("hyperlink=always", argv):
        return True

    # Netlify builds have no TTY but render links.
    if env.get("NETLIFY"):
        return True

    if not supports_color(stream, env=env, argv=argv, platform=platform):
        return False

    if stream is not None and not _is_tty(stream):
        return False

    if "WT_SESSION" in env:
        return True

    if platform == "win32":
        return False

    if env.get("CI") or env.get("TEAMCITY_VERSION"):
        return False

    term_program = env.get("TERM_PROGRAM")
    if term_program:
        version = parse_version(env.get("TERM_PROGRAM_VERSION"))
        match term_program:
            case "iTerm.app":
                if version.major == 3:
                    return version.minor >= 1
                return version.major > 3
            case "WezTerm":
                return version.major >= 20200620
            case "vscode":
                # Cursor forked VS Code and supports hyperlinks in 0.x
                if env.get("CURSOR_TRACE_ID"):
                    return True
                return version.major > 1 or (version.major == 1 and version.minor >= 72)
            case "ghostty":
                return True

    vte_version = env.get("VTE_VERSION")
    if vte_version:
        # 0.50.0 advertised support but crashes on hyperlinks
        if vte_version == "0.50.0":
            return False
        version = parse_version(vte_version)
        return version.major > 0 or version.minor >= 50

    return env.get("TERM") == "alacritty"


def _is_tty(stream: IO[str]) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # Closed stream
        return False


_cached_support: HyperlinkSupport | None = None


def detect_hyperlink_support() -> HyperlinkSupport:
    support = HyperlinkSupport(
        stdout=supports_hyperlinks(sys.stdout),
        stderr=supports_hyperlinks(sys.stderr),
    )
    logger.debug("Hyperlink support: stdout=%s stderr=%s", support.stdout, support.stderr)
    return support


def get_hyperlink_support() -> HyperlinkSupport:
    global _cached_support
    if _cached_support is None:
        _cached_support = detect_hyperlink_support()
    return _cached_support


def reset_hyperlink_support_cache() -> None:
    global _cached_support
    _cached_support = None
