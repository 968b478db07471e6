"""Exceptions raised while composing a payload from a template."""


class ComposeError(Exception):
    """Base class for template composition errors."""

    pass


class InvalidSyntax(ComposeError):
    """Raised when a template has unbalanced delimiters or a dangling escape."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (at position {position})")
        self.position = position


class UnknownInstruction(ComposeError):
    """Raised in text mode when a template calls an instruction that does not exist."""

    def __init__(self, instruction: str):
        super().__init__(f"Unknown instruction '{instruction}'")
        self.instruction = instruction
