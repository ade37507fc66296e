"""Error handling for lscript. Only ScriptErrors should be encountered while running a program: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every stage of the pipeline raises on the first problem it detects and never recovers, so the first error of a run is
also the only one. The diagnostic shape shared by all phases is

    [<phase> error] line <L>, col <C>: <message>
"""

import sys

from termcolor import colored


class ScriptError(Exception):
    """Base error of the lscript pipeline: a phase tag, a 1-based source position and a human-readable message."""
    phase = "lscript"

    def __init__(self, msg, line=None, col=None, internal=False):
        super().__init__(msg)
        self.msg = msg
        self.line = line
        self.col = col
        self.internal = internal

    @property
    def has_position(self):
        return self.line is not None and self.col is not None

    def __str__(self):
        if self.has_position:
            return f"[{self.phase} error] line {self.line}, col {self.col}: {self.msg}"
        return f"[{self.phase} error] {self.msg}"


class LexError(ScriptError):
    """Malformed token stream: unknown character, lone '&'/'|', unterminated string, token buffer overflow."""
    phase = "lex"


class ParseError(ScriptError):
    """Grammar violation. Positioned at the offending token, whose lexeme is appended to the message."""
    phase = "parse"

    def __init__(self, msg, token):
        super().__init__(f"{msg} (found '{token.lexeme}')", token.line, token.col)
        self.token = token


class ScriptRuntimeError(ScriptError):
    """Type mismatch, undefined variable, division by zero, capacity exceeded, input failure or loop bound exceeded.
    Positioned at the node whose evaluation failed.
    """
    phase = "runtime"

    def __init__(self, msg, node):
        super().__init__(msg, node.line, node.col)
        self.node = node


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report lscript errors."""
    ERROR = "red"

    def __init__(self, fatal=True, color=True, stream=None):
        self.fatal = fatal
        self.color = color
        self.stream = stream
        self.traceback = {}  # path: source lines, used to show the offending line

    def register_file(self, path, source=None):
        """Registers path (and its source text, if already read) in traceback. Should be called prior to Session
        add/run.
        """
        self.traceback[path] = source.splitlines() if source is not None else []

    def remove_file(self, path):
        """Removes path from traceback. Should be called after a successful Session run."""
        self.traceback.pop(path, None)

    def _colored(self, text, color=None, attrs=None):
        if not self.color:
            return text
        return colored(text, color, attrs=attrs)

    def diagnose(self, error):
        """Returns the offending source line of error with a caret under its column, or None if the line is not
        known.
        """
        if not error.has_position:
            return None

        for lines in self.traceback.values():
            if 0 < error.line <= len(lines):
                line = lines[error.line - 1].expandtabs(1)
                break
        else:
            return None

        diagnosis = "  " + line + "\n"
        diagnosis += "  " + " " * (error.col - 1) + self._colored("^", ErrorHandler.ERROR, attrs=["bold"])
        return diagnosis

    def format(self, error):
        """Formats error as a one-line diagnostic, phase tag highlighted."""
        tag = f"[{error.phase} error]"
        if error.internal:
            tag = "[internal] " + tag

        error_msg = self._colored(tag, ErrorHandler.ERROR, attrs=["bold"])
        if error.has_position:
            error_msg += f" line {error.line}, col {error.col}:"
        return error_msg + " " + error.msg

    def throw(self, error):
        """Reports error using self.traceback for the source line. error must be a ScriptError. Exits with status 1 if
        self.fatal.
        """
        stream = self.stream if self.stream is not None else sys.stderr
        print(self.format(error), file=stream)

        diagnosis = None if error.internal else self.diagnose(error)
        if diagnosis:
            print(diagnosis, file=stream)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(ScriptError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(ScriptError("maximum nesting depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, ScriptError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(ScriptError(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
