"""
Shell Built-in Commands

Implements built-in shell commands.

Built-ins run inside the shell process, so anything they print goes
through the shell's own descriptors. The pipeline applies a stage's
redirections to those descriptors before calling into this module.

Author: YSNRFD
Version: 1.0.0
"""

import os
import sys
from typing import Callable, List


class BuiltinCommands:
    """
    Built-in shell commands.

    These commands are executed directly by the shell without
    creating a new process.
    """

    def __init__(self, shell):
        """
        Initialize built-in commands.

        Args:
            shell: The shell instance
        """
        self._shell = shell
        self._commands: dict[str, Callable[[List[str]], int]] = {
            'help': self.cmd_help,
            'exit': self.cmd_exit,
            'cd': self.cmd_cd,
            'pwd': self.cmd_pwd,
            'prompt': self.cmd_prompt,
            'history': self.cmd_history,
        }

    def is_builtin(self, name: str) -> bool:
        """Check if a command is built-in."""
        return name in self._commands

    def execute(self, name: str, args: List[str]) -> int:
        """
        Execute a built-in command.

        Args:
            name: Command name
            args: Command arguments

        Returns:
            Exit code
        """
        cmd = self._commands.get(name)
        if cmd is None:
            return 127
        try:
            return cmd(args)
        finally:
            sys.stdout.flush()

    # Command implementations

    def cmd_help(self, args: List[str]) -> int:
        """Display help information."""
        help_text = """minish - Built-in Commands

  cd [path]         Change directory (HOME when omitted)
  pwd               Print working directory
  prompt <text>     Change the prompt
  history           Display command history
  !N                Run history entry N again
  !prefix           Run the newest history entry starting with prefix
  help              Display this help
  exit              Exit the shell

Anything else is run as a program found on PATH. Commands may be
joined with '|', separated with ';' or sent to the background with '&'.
'<', '>' and '2>' redirect standard input, output and error."""
        print(help_text)
        return 0

    def cmd_exit(self, args: List[str]) -> int:
        """Exit the shell."""
        print("Exiting the shell.")
        self._shell.request_exit()
        return 0

    def cmd_cd(self, args: List[str]) -> int:
        """Change directory."""
        path = os.path.expanduser(args[0]) if args else os.path.expanduser('~')

        try:
            os.chdir(path)
        except OSError as e:
            print(f"cd: {path}: {e.strerror}", file=sys.stderr)
            return 1

        print(os.getcwd())
        return 0

    def cmd_pwd(self, args: List[str]) -> int:
        """Print working directory."""
        print(f"Current directory: {os.getcwd()}")
        return 0

    def cmd_prompt(self, args: List[str]) -> int:
        """Change the prompt to the given text followed by a space."""
        if not args:
            print("prompt: missing operand", file=sys.stderr)
            return 1

        self._shell.prompt = " ".join(args) + " "
        print(f"Changing prompt to: {self._shell.prompt}")
        return 0

    def cmd_history(self, args: List[str]) -> int:
        """Display command history."""
        print("Command History:")
        for entry in self._shell.history:
            print(f"{entry.index}: {entry.text}")
        return 0
