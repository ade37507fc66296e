"""lscript interpreter: the three pipeline stages as exposed to a host.

Basic program flow:
    1. Lexer: converts source text to a token list (see lscript/lang/lexical.py for the token grammar)
    2. Parser: builds a tree from the token list by recursive descent (see lscript/lang/parser.py for the grammar)
    3. Evaluator: not a compiler, so it walks the tree and executes it on the fly against a variable table

Each stage stops at its first error. The functions here never raise ScriptErrors: they return them, so a host can
halt on the first non-empty error and report it in the `[<phase> error] line <L>, col <C>: <message>` shape that
str(error) already produces.

Any program that fits in max_tokens parses and runs however deeply it nests, and ints are not limited in digits when
written or read as text. The parser and the evaluator widen both Python limits for the duration of their stage only.
"""

from lscript.lang.error import LexError, ParseError, ScriptRuntimeError
from lscript.lang.evaluator import Evaluator
from lscript.lang.lexical import Lexer
from lscript.lang.parser import Parser


def tokenize(source, limits=None):
    """Returns (tokens, None) on success or (None, LexError)."""
    try:
        return Lexer(source, limits).tokenize(), None
    except LexError as error:
        return None, error


def parse(tokens):
    """Returns (program, None) on success or (None, ParseError)."""
    try:
        return Parser(tokens).parse(), None
    except ParseError as error:
        return None, error


def run(program, evaluator=None, limits=None):
    """Executes program with evaluator (a fresh one on the standard streams by default). Returns the
    ScriptRuntimeError that stopped it, or None.
    """
    if evaluator is None:
        evaluator = Evaluator(limits)

    try:
        evaluator.run(program)
    except ScriptRuntimeError as error:
        return error
    return None


def execute(source, evaluator=None, limits=None):
    """Tokenizes, parses and runs source, halting on the first error. Returns that error, or None."""
    if evaluator is not None and limits is None:
        limits = evaluator.limits

    tokens, error = tokenize(source, limits)
    if error is not None:
        return error

    program, error = parse(tokens)
    if error is not None:
        return error

    return run(program, evaluator, limits)
