from optbind.option import Option, get_options

from optbind.parser import (Parser,
                            ParseResult,
                            parse_args,
                            preprocess)

from optbind.errors import (OptbindException,
                            SchemaError,
                            ArgumentParseError,
                            AmbiguousArgument,
                            UnknownArgument,
                            InvalidArgumentValue,
                            ArgumentOutOfRange,
                            MissingRequiredArgument,
                            DuplicateParameter,
                            ParamFileError,
                            ParseNote)

from optbind.registry import build_registry
from optbind.helpers import HelpFormatter
