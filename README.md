# tinyshell

The parts of a small command shell, written in Python: a lexer that turns a
command line into typed tokens, an environment of shell variables, the
builtin commands, redirections and here-documents, `*` wildcard matching, and
an executor that runs a single command or a pipeline of them.

It has no dependencies outside the standard library.

## Running a command line

```python
import os
import sys

from tinyshell.builtins import ShellExit
from tinyshell.environment import Environment
from tinyshell.executor import execute
from tinyshell.lexer import LexerError, tokenize
from tinyshell.status import get_exit_code

env = Environment(os.environ)

while True:
    try:
        line = input("tinyshell$ ")
    except EOFError:
        break
    try:
        tokens = tokenize(line)
    except LexerError as exc:
        if exc.message:
            print(exc.message, file=sys.stderr)
        continue
    try:
        execute(tokens, env)
    except ShellExit as exc:
        sys.exit(exc.code)

sys.exit(get_exit_code())
```

`execute(tokens, env, stdin=None, stdout=None)` returns the exit status and
also records it. A lone builtin runs in the calling process, so `cd`,
`export` and `unset` change the process and `env`, and `exit` raises
`ShellExit`. In a pipeline every member runs apart, builtins included, and
the status is that of the last member. Here-documents are read from `stdin`
(a `> ` prompt is written for each line); output that is not redirected goes
to `stdout`.

## Modules

- `tinyshell.lexer` — `tokenize(line)` returns a list of `Token`s and raises
  `LexerError` for lines it rejects. Quotes keep spaces and delimiters inside
  one word; an unclosed quote is an error. The characters `\`, `` ` ``, `[`,
  `]`, `;`, `#`, `{`, `}` and the sequences `()`, `<&`, `>&`, `&>`, `$(`,
  `)$`, `[]`, `&&`, `||` are rejected, as is a `$` word right after a
  redirection ("ambiguous redirect"). `classify(content, previous)` gives a
  token's `TokenType`.
- `tinyshell.tokens` — `Token`, `TokenType` (`REDIRECT`, `HEREDOC`, `PIPE`,
  `OPERATOR`, `LIMITER`, `FILENAME`, `WORD`, `PAREN`) and
  `count_type(tokens, token_type)`.
- `tinyshell.environment` — `Environment` keeps variables in the order they
  were defined; a variable may exist without a value. It gives the lines for
  `export` (sorted by name) and `env`, the `PATH` search directories, and a
  mapping for child processes. `split_assignment("NAME=value")` splits an
  assignment.
- `tinyshell.builtins` — `echo` (with `-n`), `cd` (`~`, `/`, `-`, `~-`),
  `pwd`, `export`, `unset`, `env` (`print_env`) and `exit`
  (`exit_builtin`), plus `run_builtin(args, env, out)` and `is_builtin(name)`.
- `tinyshell.redirections` — `open_redirections(tokens, stdin)` opens the
  files for `<`, `>`, `>>` and `<<` of one command and returns a
  `Redirections`, usable as a context manager; failures raise
  `RedirectionError`. `read_heredoc(delimiter, stream)` reads a
  here-document.
- `tinyshell.commands` — `split_pipeline(tokens)`, `command_args(tokens)`,
  `find_command(paths, name)` (raises `CommandNotFound`) and
  `operator_allows(token, status)`, which tells whether the command after
  `&&` or `||` should run.
- `tinyshell.wildcards` — `match_wildcard(entry, pattern)` and
  `expand_wildcard(pattern, directory=".")`, which returns the sorted
  matching entries (hidden ones only when the pattern starts with `.`), or
  the pattern itself when nothing matches.
- `tinyshell.executor` — `execute`, `resolve_program(args, env)` and
  `status_from_returncode(returncode)`.
- `tinyshell.status` — `get_exit_code()`, `set_exit_code(code)`, and
  `install_prompt_handlers()` / `install_child_handlers()` for Ctrl-C and
  Ctrl-\.

## Exit status

0 for success; 1 for general errors, a missing input file or an output file
that cannot be opened; 126 for a directory or a file that cannot be executed
and for an input file that cannot be read; 127 when a command is not found;
2 for a non-numeric or out-of-range `exit` argument or a redirection with no
file name; 130 for a here-document cut short by Ctrl-C; 128 plus the signal
number when a program is killed by a signal.

## What it does not do

- There is no command to start and no prompt loop of its own: no line
  editing or history. The caller reads lines and passes them to `tokenize`
  and `execute`, as above.
- `$NAME` variables are not expanded and quotes are not removed: words reach
  commands exactly as they were typed.
- Wildcards are not expanded by `execute`; call `expand_wildcard` on the
  words yourself.
- `&&` and `||` are rejected by the lexer, so command lists are not run;
  only `operator_allows` is there to decide them. Parentheses are passed
  through as ordinary words, not run as subshells.