class FormBuilderError(Exception):
    """Base class for errors raised by the form builder."""


class NotARecordError(FormBuilderError):
    """The object handed to the builder is not an instance of a mapped class."""

    def __init__(self, obj):
        self.obj = obj
        super().__init__(f"{type(obj).__name__} is not a mapped record class")


class InvalidDate(FormBuilderError):
    """Posted date/time parts do not form a valid calendar value."""

    def __init__(self, field: str, parts):
        self.field = field
        self.parts = parts
        super().__init__(f"Invalid date for field '{field}': {parts!r}")
