"""Session control for lscript. Runs the interpreter pipeline either on a whole file or line by line in command-line
mode, reporting errors through the session's ErrorHandler.
"""

from lscript.interpreter import parse, run, tokenize
from lscript.lang.config import Limits, recursion_room
from lscript.lang.error import LexError, ScriptError
from lscript.lang.evaluator import Evaluator
from lscript.lang.lexical import Lexer, TokenKind


class Session:
    """Governs a lscript session. All programs run in one session share a single variable table."""
    SH_FILE = "<in>"          # command-line interpreter filename
    INLINE_FILE = "<string>"  # filename of source passed on the command line

    def __init__(self, error_handler, path, cmd_line, source=None, limits=None, stdin=None, stdout=None,
                 show_tree=False):
        self.error_handler = error_handler

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode
        self.show_tree = show_tree  # print each parsed tree before running it

        self.limits = limits if limits is not None else Limits()
        self.evaluator = Evaluator(self.limits, stdin, stdout)

        if self.cmd_line:
            self.error_handler.fatal = False

        if path == Session.SH_FILE and not cmd_line:
            raise ScriptError("'<in>' is a reserved filename")

        if source is None and path not in (Session.SH_FILE, Session.INLINE_FILE):
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except (OSError, UnicodeDecodeError):
                raise ScriptError(f"'{path}' could not be opened") from None

        self.source = source
        self.error_handler.register_file(path, source)

    @property
    def variables(self):
        return self.evaluator.variables

    @staticmethod
    def preprocess_line(line):
        """Preprocesses a line typed in command-line mode. Returns the line and whether or not it opens more blocks
        than it closes, in which case it must be continued by the next line before it can run.
        """
        try:
            tokens = Lexer(line).tokenize()
        except LexError:
            return line, False  # let add report it

        depth = 0
        for token in tokens:
            if token.kind is TokenKind.LBRACE:
                depth += 1
            elif token.kind is TokenKind.RBRACE:
                depth -= 1
        return line, depth > 0

    def compile(self, source):
        """Tokenizes and parses source, raising the first LexError or ParseError."""
        tokens, error = tokenize(source, self.limits)
        if error is not None:
            raise error

        program, error = parse(tokens)
        if error is not None:
            raise error

        return program

    def execute(self, source):
        """Runs source against this session's variables. Will raise any error that is encountered."""
        program = self.compile(source)
        if self.show_tree:
            with recursion_room(self.limits.max_frames):
                print(program.display(), file=self.evaluator.stdout)

        error = run(program, self.evaluator)
        if error is not None:
            raise error

    def run(self):
        """Runs the session's file (or inline source) from the start, with a fresh variable table."""
        if self.source is None:
            raise ScriptError(f"'{self.path}' has no source to run")

        self.evaluator.reset()
        self.execute(self.source)
        self.error_handler.remove_file(self.path)  # error was not raised

    def add(self, line):
        """Runs one command-line fragment. Variables from previous fragments stay visible."""
        self.error_handler.register_file(self.path, line)  # in case error is raised
        self.execute(line)
        self.error_handler.remove_file(self.path)
