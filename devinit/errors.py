"""Error taxonomy shared by every devinit component.

Each error kind carries a stable process exit code so that scripts invoking
the CLI can branch on the failure class.
"""

from __future__ import annotations


class DevinitError(Exception):
    """Base class for all expected devinit failures."""

    exit_code = 1
    summary = "Unexpected error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        """Return the user-facing description of this failure."""
        if self.message:
            return f"{self.summary}: {self.message}"
        return self.summary


class FileReadWriteError(DevinitError):
    exit_code = 1
    summary = "File read/write error"


class NoConfigError(DevinitError):
    exit_code = 2
    summary = (
        "No configuration file found - validate your devinit installation "
        "or use --config"
    )


class InvalidConfigError(DevinitError):
    exit_code = 3
    summary = "Invalid or malformed config syntax"


class IdNotFoundError(DevinitError):
    exit_code = 4
    summary = "No template was found with id"


class PreprocessorError(DevinitError):
    """A fault in `{: ... :}` directive syntax, located by line number."""

    def __init__(self, text: str, line_number: int) -> None:
        super().__init__(f"{text!r} on line {line_number}")
        self.text = text
        self.line_number = line_number


class TemplateSyntaxError(PreprocessorError):
    exit_code = 5
    summary = "Template syntax error"


class InvalidTokenError(PreprocessorError):
    exit_code = 6
    summary = "Invalid token in template directive"


class IncorrectArgsError(PreprocessorError):
    exit_code = 7
    summary = "Incorrect number of arguments in template directive"


class MissingProjectDirError(DevinitError):
    exit_code = 8
    summary = "Failed to get parent of project config file at"


class InvalidProjectConfigError(DevinitError):
    exit_code = 9
    summary = "Invalid or malformed project template config syntax"


class TemplateParseError(DevinitError):
    exit_code = 10
    summary = "Error when parsing template"

    def __init__(self, template_id: str, reason: str) -> None:
        super().__init__(f"{template_id!r}: {reason}")
        self.template_id = template_id
        self.reason = reason


class TemplateRenderError(DevinitError):
    exit_code = 11
    summary = "Error when rendering template"

    def __init__(self, template_id: str, reason: str) -> None:
        super().__init__(f"{template_id!r}: {reason}")
        self.template_id = template_id
        self.reason = reason


class MalformedExpressionError(PreprocessorError):
    exit_code = 12
    summary = "Malformed template directive"


class UnknownVariableError(TemplateRenderError):
    exit_code = 13
    summary = "Unknown variable"

    def __init__(self, identifier: str, template_id: str) -> None:
        super().__init__(template_id, f"variable {identifier!r} is not defined")
        self.identifier = identifier


class UnknownFunctionError(TemplateRenderError):
    exit_code = 14
    summary = "Unknown function"

    def __init__(self, identifier: str, template_id: str) -> None:
        super().__init__(template_id, f"function {identifier!r} is not defined")
        self.identifier = identifier
