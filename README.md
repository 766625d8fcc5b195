# minish

`minish` is a library of the parts a small POSIX-style shell needs between
reading a line and running the commands on it. It has no third-party
dependencies and needs Python 3.10 or later on a POSIX system.

## Modules

- `minish.environment` – `Environment`, an ordered set of variables (a
  variable may exist without a value), and `ShellState`, which holds the
  variables, the last exit status and whether an exit was requested.
- `minish.syntax` – `is_valid_syntax(line)` and `check_syntax(line)`, which
  reject unclosed quotes, pipes without a command on each side and
  redirections without a target. `check_syntax` raises `ShellSyntaxError`
  (its `exit_status` is 2).
- `minish.quotes` – `QuoteTracker`, which follows single and double quotes
  character by character.
- `minish.expand` – `Expander` and `expand_line(state, line)`, which replace
  `$NAME`, `$?` and `$$` outside single quotes.
- `minish.tokens` – `Token`, `TokenType`, `Redirect` and `Process`, plus
  `split_words`, `assign_redirect_types`, `mark_redirect_values`,
  `unquote_word` and `unquote`.
- `minish.redirect` – here-documents (`read_heredoc`, `read_all_heredocs`),
  opening redirection targets (`open_redirects`, raising `RedirectError`) and
  `runs_in_parent`.
- `minish.executor` – command lookup through `PATH` (`path_from_env`,
  `resolve_command`, `prepare_command`, `is_directory`), raising
  `CommandError` with the status the shell reports.
- `minish.builtins` – `cd`, `echo`, `pwd`, `env`, `export`, `unset` and
  `exit_builtin`, dispatched by `run_builtin` and recognised by `is_builtin`.
- `minish.signals` – `SignalMonitor`, which records SIGINT and SIGQUIT and
  later applies their effect on the exit status.
- `minish.pipeline` – `run_pipeline`, `run_parent_builtin` and
  `format_processes`.

## Using it

```python
from minish.environment import ShellState
from minish.expand import expand_line
from minish.syntax import check_syntax, is_valid_syntax

state = ShellState(["HOME=/home/user", "PATH=/usr/bin:/bin"], 4242)

is_valid_syntax("ls | wc -l")       # True
is_valid_syntax("ls |")             # False
check_syntax("cat <")               # raises ShellSyntaxError

expand_line(state, "echo $HOME")    # "echo /home/user"
expand_line(state, "echo $$")       # "echo 4242"
expand_line(state, "echo '$HOME'")  # left as it is
```

Creating a `ShellState` raises `SHLVL` by one, or sets it to `1` when it is
missing.

```python
from minish.environment import Environment

environment = Environment(["SHELL=/bin/sh", "EMPTY"])
environment.add("GREETING", "hello")
"GREETING" in environment           # True
environment.to_envp()               # ["SHELL=/bin/sh", "GREETING=hello"]
environment.export_lines()          # 'declare -x ...' lines sorted by name
environment.delete("GREETING")
```

Variables without a value, such as `EMPTY`, are listed by `export_lines()`
but left out of `to_envp()` and `env_lines()`.

Builtins write to the streams they are given:

```python
import io
from minish.builtins import run_builtin

out, err = io.StringIO(), io.StringIO()
run_builtin(state, ["echo", "-n", "hi"], out, err)   # out holds "hi"
```

`exit` with no argument asks the session to end (`state.running()` then
returns False); with one argument it sets the exit status (non-numeric
arguments give 2, others are taken modulo 256); with more it writes an error
and raises `BuiltinExit(1)`.

## Running commands

A command line is run as a list of `Process` objects, each holding its
`argv` and its `redirects`:

```python
from minish.pipeline import run_pipeline
from minish.tokens import Process, TokenType

first = Process(["printf", "a\\nb\\n"])
second = Process(["wc", "-l"])
second.add_redirect(TokenType.WRITE_FILE, "count.txt")
status = run_pipeline(state, [first, second], input)
```

`run_pipeline` first reads every here-document through the `read_line`
callable it is given (called with the prompt `">"`, returning `None` at end
of input); lines are written to a file in the temporary directory as they
are read, with no line breaks added. If the first command is `cd`, `unset`,
`exit` or `export` with arguments, it runs alone inside the shell and the
rest of the line is not run. Otherwise every command is started with its
input and output connected; `echo`, `pwd`, `env` and `export` without
arguments are answered by the shell itself. The exit status of the last
command is stored in `state.exit_code` and returned.

`format_processes(processes)` renders commands and their redirections as text
for inspection.

## Exit statuses

- `126` – the command is a directory or cannot be run.
- `127` – the command is not found.
- `2` – a syntax error, or a non-numeric argument to `exit`.
- `1` – a redirection target is missing or not accessible.
- `130` / `131` – SIGINT or SIGQUIT was received while commands ran, or
  SIGINT while a here-document was read.

## What it does not do

There is no interactive prompt, no line editing or history, and no command to
start: the package is driven from Python code. It also does not turn a raw
command line into `Process` objects by itself: `split_words` splits on
unquoted whitespace, but cutting a line at pipes and separating redirection
operators from the words next to them is left to the caller.