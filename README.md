# minishell

The building blocks of a small shell, for use from Python. The package
covers the following steps:

- splitting a command line into tokens
- expanding `$VARIABLES` and `$?`
- grouping tokens into the commands of a pipeline, with their redirections
- keeping the shell's own environment
- running the builtins `echo`, `cd`, `pwd`, `env`, `export`, `unset` and `exit`
- opening redirection files and reading here-documents

## Installing

```
pip install .
```

## Modules

| Module | What it offers |
|--------|----------------|
| `minishell.lexer` | `tokenize(line)` gives a list of `Token` (text and `TokenType`). It raises `ShellSyntaxError` on misplaced `|`, `<`, `>`, `<<`, `>>`. `count_pipelines(tokens)` counts the commands. |
| `minishell.expand` | `expand_variables(text, entries, last_status)` replaces `$?` and `$NAME` using `NAME=value` entries. `lookup_env(name, entries)` does a single lookup. |
| `minishell.parser` | `parse(line, entries, last_status)` returns a `ParsedLine` with classified tokens and one `Instruction` per pipeline command. Each instruction has `cmd`, `arg`, `argv` and a list of `Redirection`. |
| `minishell.environment` | `Environment` holds `NAME=value` entries. `Environment.from_startup(os.environ)` copies the environment and raises `SHLVL` by one. It also has `update`, `append`, `unset`, `get_path`, `env_lines`, `declare_lines` and `as_dict`. |
| `minishell.builtins` | `run_builtin(instr, ctx)` runs a builtin with a `BuiltinContext` (environment, tokens, line, output streams). `exit` raises `ShellExit` with the status to end with. |
| `minishell.redirection` | `open_redirections(instr)` opens the redirection files and returns `Streams`, which works as a context manager. `collect_heredocs(...)` and `read_heredoc(...)` read here-document bodies. `RedirectionError` is raised when a file cannot be opened. |
| `minishell.utils` | Small helpers: `is_builtin`, `var_len`, `count_words`, `check_number`, `check_alpha`, `is_name_char`. |

## Example

```python
import io
from minishell.environment import Environment
from minishell.expand import expand_variables
from minishell.parser import parse
from minishell.builtins import BuiltinContext, run_builtin

print(expand_variables("$HOME/notes", ["HOME=/tmp"], 0))   # /tmp/notes

env = Environment(["HOME=/tmp", "GREETING=hi"])
line = "echo $GREETING there"
parsed = parse(line, env, 0)
instr = parsed.instructions[0]
print(instr.cmd, instr.arg)                               # echo hi there

out = io.StringIO()
ctx = BuiltinContext(env=env, tokens=parsed.tokens, line=line, stdout=out)
status = run_builtin(instr, ctx)
print(repr(out.getvalue()), status)                       # 'hi there\n' 0
```

## What this package does not do

There is no interactive prompt and no command to run. The package does
not start external programs and does not join commands with real pipes.
It parses lines, runs builtins, opens redirection files and collects
here-documents. A program that puts these pieces together into a
read-and-run loop has to supply the prompt, process start-up and
signal handling itself.

## Tests

```
pip install .[test]
pytest
```