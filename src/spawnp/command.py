"""Command parsing and command specification types.

spawnp.command
~~~~~~~~~~~~~~

A command specification is what callers hand to :func:`spawnp.run`:

- a ``str``, e.g. ``"ls -la"``, runs one process;
- a :class:`Sequential` (or a plain ``list`` / ``tuple``) runs its entries one
  after another;
- a :class:`Pipeline` connects each entry's standard output to the next
  entry's standard input.

Command strings are split naively on single spaces. Quoting is not
understood, so arguments containing spaces must be passed through ``args``:

>>> parse_command('grep -n', ['two words', 'notes.txt']).argv
['grep', '-n', 'two words', 'notes.txt']
"""

from __future__ import annotations

import dataclasses
import typing as t

from spawnp import exc


@dataclasses.dataclass(frozen=True)
class ParsedCommand:
    """Executable and argument list produced by :func:`parse_command`.

    Attributes
    ----------
    executable : str
        first token of the command string, may be empty
    args : list[str]
        tokens after the executable, followed by caller-supplied arguments
    command : str
        the command string as given
    """

    executable: str
    args: list[str]
    command: str

    @property
    def argv(self) -> list[str]:
        """Return executable and arguments as one list."""
        return [self.executable, *self.args]


def parse_command(
    command: str,
    args: t.Sequence[t.Any] | None = None,
) -> ParsedCommand:
    """Split a command string into executable and arguments.

    Tokens embedded in ``command`` come before ``args``.

    Parameters
    ----------
    command : str
        command string, split on single spaces after trimming
    args : sequence, optional
        extra arguments, converted with :func:`str`

    Returns
    -------
    :class:`ParsedCommand`

    Examples
    --------
    >>> parse_command('ls -la', ['/tmp'])
    ParsedCommand(executable='ls', args=['-la', '/tmp'], command='ls -la')

    Repeated spaces are not collapsed:

    >>> parse_command('echo  hi').args
    ['', 'hi']

    Whitespace-only commands produce an empty executable, which fails to
    spawn later on:

    >>> parse_command('   ').executable
    ''
    """
    parts = command.strip().split(" ")
    executable = parts[0]
    merged = parts[1:] + [str(arg) for arg in args or []]
    return ParsedCommand(executable=executable, args=merged, command=command)


@dataclasses.dataclass(frozen=True)
class _CommandList:
    commands: tuple[t.Any, ...] = ()

    def __post_init__(self) -> None:
        commands = self.commands
        if isinstance(commands, str):
            commands = (commands,)
        object.__setattr__(self, "commands", tuple(commands))

    def __iter__(self) -> t.Iterator[t.Any]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def __getitem__(self, index: t.Any) -> t.Any:
        if isinstance(index, slice):
            return type(self)(self.commands[index])
        return self.commands[index]


class Sequential(_CommandList):
    """Commands run one after another, without any I/O between them.

    Entries may be strings, nested :class:`Sequential` / :class:`Pipeline`
    values or plain lists.

    Examples
    --------
    >>> steps = Sequential(['true', pipe_line(['echo hi', 'cat'])])
    >>> len(steps)
    2
    >>> steps[1:]
    Sequential(commands=(Pipeline(commands=('echo hi', 'cat')),))
    """


class Pipeline(_CommandList):
    """Command strings whose standard streams are chained like a shell pipe.

    Examples
    --------
    >>> Pipeline(['echo hi', 'cat'])[:1]
    Pipeline(commands=('echo hi',))

    >>> Pipeline(['echo hi', ['cat']])
    Traceback (most recent call last):
    ...
    spawnp.exc.UnexpectedCommand: unexpected command ['cat']
    """

    def __post_init__(self) -> None:
        super().__post_init__()
        for stage in self.commands:
            if not isinstance(stage, str):
                raise exc.UnexpectedCommand(stage)


CommandSpec = t.Union[str, Sequential, Pipeline, t.Sequence[t.Any]]


def pipe_line(commands: str | t.Sequence[str]) -> Pipeline:
    """Return ``commands`` tagged as a :class:`Pipeline`.

    Parameters
    ----------
    commands : str or sequence of str
        a single command string, or the pipeline stages in order

    Examples
    --------
    >>> pipe_line('echo hi')
    Pipeline(commands=('echo hi',))

    >>> pipe_line(['echo hi', 'tr a-z A-Z', 'cat'])
    Pipeline(commands=('echo hi', 'tr a-z A-Z', 'cat'))
    """
    if isinstance(commands, Pipeline):
        return commands
    return Pipeline(commands)
