"""Result schemas and terminal formatters."""
