"""
Confirmation gate for destructive or overwriting binding operations.
"""

import sys
from enum import Enum
from typing import Optional, TextIO


class ConfirmationPolicy(Enum):
    """
    Answers yes/no to "proceed with this overwrite or delete?".

    Chosen once per command and passed to the writer and store as a single value.
    """

    ALWAYS = "always"
    NEVER = "never"
    INTERACTIVE = "interactive"

    @classmethod
    def from_force(cls, force: bool) -> "ConfirmationPolicy":
        """`--force` approves everything, otherwise the user is asked."""
        return cls.ALWAYS if force else cls.INTERACTIVE

    def decide(
        self,
        prompt: str,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> bool:
        if self is ConfirmationPolicy.ALWAYS:
            return True
        if self is ConfirmationPolicy.NEVER:
            return False

        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        print(f"{prompt} (yes or no)", file=stdout, flush=True)
        try:
            answer = stdin.readline()
        except (OSError, ValueError):
            return False
        return answer.strip().lower() in ("y", "yes")
