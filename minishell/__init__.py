"""Building blocks of a small shell: lexer, parser, expansion, environment, builtins and redirections."""

__version__ = "0.1.0"
__all__ = ["__version__"]