## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘


class PrayogError(Exception):
    """Base class for all errors raised while running a unit of script code."""
    php_class = 'Error'

    def __init__(self, message: str = "", *, php_class: str | None = None):
        super().__init__(message)
        self.message = message
        if php_class is not None:
            self.php_class = php_class

class PrayogSyntaxError(PrayogError):
    php_class = 'ParseError'

    def __init__(self, message, *, filename=None, line=None, column=None, token=None):
        super().__init__(message)
        self.filename = filename
        self.line = line
        self.column = column
        self.token = token

class PrayogRuntimeError(PrayogError, RuntimeError):
    pass

class PrayogNameError(PrayogRuntimeError, NameError):
    pass

class PrayogTypeError(PrayogRuntimeError, TypeError):
    php_class = 'TypeError'

class PrayogArgumentCountError(PrayogTypeError):
    php_class = 'ArgumentCountError'

class PrayogDivisionByZeroError(PrayogRuntimeError, ZeroDivisionError):
    php_class = 'DivisionByZeroError'


class PrayogThrown(PrayogRuntimeError):
    """A script-level exception object that was thrown and not caught by the script itself."""
    def __init__(self, exception):
        message = exception.props.get('message', '') if hasattr(exception, 'props') else ''
        super().__init__(str(message), php_class=exception.cls.name)
        self.exception = exception
