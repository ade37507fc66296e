"""Handles interactive/command-line mode for lscript interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """lscript interpreter shell."""
    intro = "lscript interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for unfinished blocks
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""

    def parseline(self, line):
        """Only a bare command word such as 'help' or 'exit' is a shell command. Anything longer, like 'help = 1;' or
        'EOF = 1;', is lscript source and goes to default as typed.
        """
        command, arg, parsed = super().parseline(line)
        if arg:
            return None, None, line.strip()
        return command, arg, parsed

    def default(self, line):
        """Executes arbitrary lscript statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lscript interpreter!\n\n"
              "lscript is a small imperative language with integers, strings and one set of \n"
              "global variables. Statements end with ';', blocks are wrapped in '{' and '}'.\n\n"
              "Try it out by typing 'x = 3;'. This creates a variable 'x'. Next, try typing \n"
              "'output(x + 4);'. This will print '7'. There are also 'input(name);', \n"
              "'if (cond) { ... } else { ... }' and 'loop (cond) { ... }'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
