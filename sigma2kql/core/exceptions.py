"""
Translation Errors

Typed failures raised by the translation stages. Every error carries a `kind`
so callers can present it without inspecting the class hierarchy.
"""


class TranslationError(Exception):
    """
    Base class for all rule translation failures.
    """

    kind = "TranslationError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RuleDecodeError(TranslationError):
    """Rule text is not valid YAML."""

    kind = "DecodeError"


class RuleValidationError(TranslationError):
    """Decoded rule does not have the shape of a Sigma rule."""

    kind = "ValidationError"


class ConditionSyntaxError(TranslationError):
    """
    The detection condition does not match the condition grammar.
    """

    kind = "SyntaxError"

    def __init__(self, message: str, position: int = -1):
        if position >= 0:
            message = f"{message} (token {position})"
        super().__init__(message)
        self.position = position
