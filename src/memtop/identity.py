"""Application naming for memtop report rows."""

from collections.abc import Sequence
from pathlib import PurePosixPath

from memtop.models import JavaStrategy, ProcessSample

JAVA_LAUNCHERS = frozenset({"java", "javaw"})

# JVM options whose value is the following token. Any other "-" token is
# taken to be a bare flag, so an unlisted option with a separate value
# (e.g. "-p <modulepath>" or "--add-opens <module/package>") has its value
# read as the main class. This is a known limit of the heuristic.
CLASSPATH_OPTIONS = frozenset({"-cp", "-classpath", "--class-path"})


def _option_width(token: str) -> int:
    """Number of tokens an option occupies, including its value."""
    return 2 if token in CLASSPATH_OPTIONS else 1


def find_jar_name(argv: Sequence[str]) -> str | None:
    """
    Return the basename of the archive given to "-jar", if any.

    Scans the JVM options after argv[0] and stops at the first positional
    token; "-jar" is only honoured if it appears before that point.
    """
    i = 1
    while i < len(argv):
        token = argv[i]
        if token == "-jar":
            if i + 1 >= len(argv):
                return None
            return PurePosixPath(argv[i + 1]).name or None
        if not token.startswith("-"):
            break
        i += _option_width(token)
    return None


def find_main_class(argv: Sequence[str]) -> str | None:
    """Return the first token after the JVM options, normally the main class."""
    i = 1
    while i < len(argv) and argv[i].startswith("-"):
        i += _option_width(argv[i])
    if i < len(argv):
        return argv[i]
    return None


def strip_package(class_name: str) -> str:
    """Drop the package prefix from a fully qualified class name."""
    short = class_name.rsplit(".", 1)[-1]
    return short or class_name


def java_display_name(argv: Sequence[str], strategy: JavaStrategy = JavaStrategy.AUTO) -> str | None:
    """
    Recover a readable application name from a JVM command line.

    Jar names are returned as-is; main class names lose their package prefix.
    Returns None if the strategy finds nothing.
    """
    if strategy is not JavaStrategy.MAIN:
        jar = find_jar_name(argv)
        if jar is not None or strategy is JavaStrategy.JAR:
            return jar

    main_class = find_main_class(argv)
    if main_class is None:
        return None
    return strip_package(main_class)


def resolve_key(sample: ProcessSample, strategy: JavaStrategy = JavaStrategy.AUTO) -> str:
    """Return the report row a process belongs to."""
    if sample.command not in JAVA_LAUNCHERS:
        return sample.command

    name = java_display_name(sample.argv, strategy)
    if name:
        return f"java: {name}"
    return f"java ({sample.exe_name or 'java'})"
