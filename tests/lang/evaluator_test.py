import io
import unittest

from lscript.lang.config import Limits
from lscript.lang.error import ScriptRuntimeError
from lscript.lang.evaluator import Evaluator, int_divide, truthy
from lscript.lang.lexical import tokenize
from lscript.lang.parser import parse


class EvaluatorTestCase(unittest.TestCase):

    def setUp(self):
        self.stdin = io.StringIO()
        self.stdout = io.StringIO()
        self.evaluator = Evaluator(Limits(), self.stdin, self.stdout)

    def run_source(self, source, stdin=""):
        """Runs source and returns everything it printed."""
        self.stdin.write(stdin)
        self.stdin.seek(0)
        self.evaluator.run(parse(tokenize(source)))
        return self.stdout.getvalue()

    def value(self, source):
        """Value of source as an expression, read back through an assignment."""
        self.run_source(f"result = {source};")
        return self.evaluator.variables["result"]

    def assertRuntimeError(self, source, msg=None):
        with self.assertRaises(ScriptRuntimeError, msg=source) as cm:
            self.run_source(source)
        if msg is not None:
            self.assertEqual(msg, cm.exception.msg)
        return cm.exception


class ExpressionTestCase(EvaluatorTestCase):

    def test_literals(self):
        cases = {
            "0": 0,
            "7": 7,
            "007": 7,
            "123456789012345678901234567890": 123456789012345678901234567890,
            "\"text\"": "text",
            "\"\"": "",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.value(case), case)

    def test_arithmetic(self):
        cases = {
            "1 + 2 * 3": 7,
            "(1 + 2) * 3": 9,
            "10 - 2 - 3": 5,
            "100 / 10 / 5": 2,
            "7 / 2": 3,
            "-7 / 2": -3,
            "7 / -2": -3,
            "-7 / -2": 3,
            "0 / 5": 0,
            "-5": -5,
            "+5": 5,
            "--5": 5,
            "2 * -3": -6,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.value(case), case)

    def test_string_concatenation(self):
        cases = {
            "\"a\" + \"b\"": "ab",
            "\"x\" + 1": "x1",
            "1 + \"x\"": "1x",
            "\"n=\" + -3": "n=-3",
            "\"a\" + 1 + 2": "a12",
            "1 + 2 + \"a\"": "3a",
            "\"a\" + (1 + 2)": "a3",
            "\"\" + 0": "0",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.value(case), case)

    def test_concatenation_grouping(self):
        self.assertEqual(self.value("(\"a\" + \"b\") + \"c\""), self.value("\"a\" + (\"b\" + \"c\")"))

    def test_comparisons(self):
        cases = {
            "1 < 2": 1,
            "2 < 1": 0,
            "2 <= 2": 1,
            "3 > 2": 1,
            "2 >= 3": 0,
            "1 == 1": 1,
            "1 != 1": 0,
            "-1 < 0": 1,
            "\"abc\" == \"abc\"": 1,
            "\"abc\" != \"abd\"": 1,
            "\"abc\" < \"abd\"": 1,
            "\"ab\" < \"abc\"": 1,
            "\"B\" < \"a\"": 1,
            "\"\" < \"a\"": 1,
            "\"b\" >= \"a\"": 1,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.value(case), case)

    def test_mixed_comparison(self):
        for op in ["==", "!=", "<", "<=", ">", ">="]:
            for case in [f"1 {op} \"1\"", f"\"1\" {op} 1"]:
                self.assertRuntimeError(case + ";", f"incompatible operand types for '{op}'")

    def test_logical(self):
        cases = {
            "1 && 1": 1,
            "1 && 0": 0,
            "0 || 0": 0,
            "0 || 5": 1,
            "7 && 9": 1,
            "\"a\" && \"b\"": 1,
            "\"\" || 0": 0,
            "!0": 1,
            "!3": 0,
            "!\"\"": 1,
            "!\"a\"": 0,
            "!!7": 1,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.value(case), case)

    def test_short_circuit(self):
        should_pass = ["0 && (1 / 0)", "1 || (1 / 0)", "0 && undefined", "\"s\" || (1 < \"x\")"]
        for case in should_pass:
            self.value(case)

        should_raise = ["1 && (1 / 0)", "0 || (1 / 0)"]
        for case in should_raise:
            self.assertRuntimeError(case + ";", "division by zero")

    def test_division_by_zero(self):
        for case in ["5 / 0;", "0 / 0;", "-123456789 / 0;", "x = 0; output(1 / x);"]:
            self.assertRuntimeError(case, "division by zero")

    def test_not_int(self):
        cases = {
            "\"a\" - 1;": "arithmetic operand of '-' is not int",
            "2 * \"a\";": "arithmetic operand of '*' is not int",
            "\"a\" / \"b\";": "arithmetic operand of '/' is not int",
            "-\"a\";": "unary '-' operand is not int",
            "+\"a\";": "unary '+' operand is not int",
        }
        for case, msg in cases.items():
            self.assertRuntimeError(case, msg)

    def test_error_position(self):
        error = self.assertRuntimeError("x = 1;\ny = x +\n  \"a\" * 2;")
        self.assertEqual((3, 7), (error.line, error.col))
        self.assertEqual("[runtime error] line 3, col 7: arithmetic operand of '*' is not int", str(error))


class VariableTestCase(EvaluatorTestCase):

    def test_assignment_creates(self):
        self.run_source("a = 1; b = \"two\"; a = a + 1;")
        self.assertEqual({"a": 2, "b": "two"}, self.evaluator.variables)

    def test_assignment_yields_value(self):
        program = parse(tokenize("x = 5;"))
        self.assertEqual(5, self.evaluator.evaluate(program.statements[0]))

    def test_undefined(self):
        error = self.assertRuntimeError("output(y);", "variable 'y' is not defined")
        self.assertEqual((1, 8), (error.line, error.col))

        self.assertRuntimeError("x = x + 1;", "variable 'x' is not defined")
        self.assertNotIn("x", self.evaluator.variables)

    def test_case_sensitive(self):
        self.run_source("name = 1;")
        self.assertRuntimeError("output(Name);", "variable 'Name' is not defined")

    def test_values_are_copied(self):
        self.run_source("a = \"x\"; b = a; a = a + \"y\"; output(a, b);")
        self.assertEqual("xy x\n", self.stdout.getvalue())

    def test_variable_limit(self):
        self.evaluator.limits = Limits(max_vars=2)
        self.run_source("a = 1; b = 2; a = 3;")
        self.assertRuntimeError("c = 3;", "variable limit of 2 exceeded")
        self.assertRuntimeError("input(c);", "variable limit of 2 exceeded")

    def test_reset(self):
        self.run_source("a = 1;")
        self.evaluator.reset()
        self.assertRuntimeError("output(a);")

    def test_isolation(self):
        other = Evaluator(stdout=io.StringIO())
        self.run_source("shared = 1;")
        self.assertRaises(ScriptRuntimeError, other.run, parse(tokenize("output(shared);")))


class StatementTestCase(EvaluatorTestCase):

    def test_output(self):
        cases = {
            "output(1);": "1\n",
            "output(\"a\", 2, -3);": "a 2 -3\n",
            "output();": "\n",
            "output(\"tab\\there\");": "tab\there\n",
            "output(1 < 2, \"\");": "1 \n",
        }
        for case, expected in cases.items():
            self.stdout.seek(0)
            self.stdout.truncate()
            self.assertEqual(expected, self.run_source(case), case)

    def test_output_stops_at_failing_argument(self):
        self.assertRuntimeError("output(1, 2 / 0, 3);", "division by zero")
        self.assertEqual("1", self.stdout.getvalue())

    def test_input(self):
        output = self.run_source("input(name); output(\"hi \" + name);", stdin="Ada\nignored\n")
        self.assertEqual("> hi Ada\n", output)
        self.assertEqual("Ada", self.evaluator.variables["name"])

    def test_input_is_string(self):
        self.run_source("input(n); output(n + 1);", stdin="41\n")
        self.assertEqual("> 411\n", self.stdout.getvalue())

    def test_input_line_endings(self):
        cases = {"a\r\n": "a", "b": "b", "\n": "", "  c  \n": "  c  "}
        for stdin, expected in cases.items():
            self.setUp()
            self.run_source("input(v);", stdin=stdin)
            self.assertEqual(expected, self.evaluator.variables["v"], repr(stdin))

    def test_input_failure(self):
        error = self.assertRuntimeError("input(v);")
        self.assertTrue(error.msg.startswith("input failed"))
        self.assertEqual(0, self.evaluator.variables["v"])

    def test_input_prompt(self):
        self.evaluator.limits = Limits(input_prompt="? ")
        self.assertEqual("? ", self.run_source("input(v);", stdin="x\n"))

    def test_if(self):
        cases = {
            "if (1 < 2) { output(\"yes\"); } else { output(\"no\"); }": "yes\n",
            "if (2 < 1) { output(\"yes\"); } else { output(\"no\"); }": "no\n",
            "if (0) { output(\"yes\"); }": "",
            "if (\"s\") output(\"str\");": "str\n",
            "if (\"\") output(1); else if (0) output(2); else output(3);": "3\n",
        }
        for case, expected in cases.items():
            self.stdout.seek(0)
            self.stdout.truncate()
            self.assertEqual(expected, self.run_source(case), case)

    def test_loop(self):
        output = self.run_source("i = 0; loop (i < 3) { output(i); i = i + 1; }")
        self.assertEqual("0\n1\n2\n", output)

        self.run_source("loop (0) { output(\"never\"); }")
        self.assertNotIn("never", self.stdout.getvalue())

    def test_loop_bound(self):
        error = self.assertRuntimeError("loop (1) { }", "loop exceeded maximum of 1000000 iterations")
        self.assertEqual((1, 1), (error.line, error.col))

    def test_configurable_loop_bound(self):
        self.evaluator.limits = Limits(max_iterations=3)
        self.run_source("i = 0; loop (i < 3) i = i + 1;")
        self.assertEqual(3, self.evaluator.variables["i"])

        self.assertRuntimeError("i = 0; loop (i < 4) i = i + 1;")
        self.assertEqual(3, self.evaluator.variables["i"])

    def test_block_stops_at_error(self):
        self.assertRuntimeError("{ output(1); output(x); output(2); }")
        self.assertEqual("1\n", self.stdout.getvalue())

    def test_expression_statement(self):
        self.assertEqual("", self.run_source("1 + 2; \"a\";"))
        self.assertRuntimeError("undefined_name;", "variable 'undefined_name' is not defined")

    def test_fizzbuzz(self):
        source = """
            i = 1;
            loop (i <= 15) {
                line = "";
                if (i - i / 3 * 3 == 0) line = line + "Fizz";
                if (i - i / 5 * 5 == 0) line = line + "Buzz";
                if (line == "") line = line + i;
                output(line);
                i = i + 1;
            }
        """
        expected = "1 2 Fizz 4 Buzz Fizz 7 8 Fizz Buzz 11 Fizz 13 14 FizzBuzz".split()
        self.assertEqual(expected, self.run_source(source).split("\n")[:-1])


class HelperTestCase(unittest.TestCase):

    def test_truthy(self):
        should_pass = [1, -1, "a", " ", "0"]
        for case in should_pass:
            self.assertTrue(truthy(case), repr(case))

        should_fail = [0, ""]
        for case in should_fail:
            self.assertFalse(truthy(case), repr(case))

    def test_int_divide(self):
        cases = {(7, 2): 3, (-7, 2): -3, (7, -2): -3, (-7, -2): 3, (6, 3): 2, (0, -4): 0}
        for (a, b), expected in cases.items():
            self.assertEqual(expected, int_divide(a, b), (a, b))


if __name__ == '__main__':
    unittest.main()
