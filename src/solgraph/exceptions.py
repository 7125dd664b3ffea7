# Custom exceptions for solgraph

class SolgraphError(Exception):
    """Base exception for all application-specific errors."""
    pass


class EmptyInputError(SolgraphError):
    """Raised when no files or sources were given for analysis."""
    def __init__(self, message: str = "No files were specified for analysis."):
        super().__init__(message)


class ParseError(SolgraphError):
    """Raised when a source unit cannot be parsed."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")


class ImportResolutionError(SolgraphError):
    """Base class for failures of the import closure resolver."""
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


class InvalidImportPath(ImportResolutionError):
    """Raised for a path outside the project root or without a Solidity extension."""
    def __init__(self, path: str):
        super().__init__(path, f"Invalid import path: {path}")


class UnresolvedImport(ImportResolutionError):
    """Raised when an import does not resolve to an existing file."""
    def __init__(self, path: str):
        super().__init__(path, f"Import path not resolved to a file: {path}")


class AmbiguousRemapping(ImportResolutionError):
    """Raised when a remappings.txt line holds more than one '=' separator."""
    def __init__(self, path: str, line: str):
        self.line = line
        super().__init__(path, f"Multiple assignment symbols found in {path}: {line!r}")


class UnresolvedRemapping(ImportResolutionError):
    """Raised when no remappings.txt or node_modules is found below the project root."""
    def __init__(self, path: str):
        super().__init__(
            path,
            f"Import '{path}' looks like a remapped import, but no remappings.txt "
            f"or node_modules directory was found inside the project root.",
        )


class InconsistentInheritance(SolgraphError):
    """Raised when no linearization of a contract's bases exists."""
    def __init__(self, contract: str, message: str):
        self.contract = contract
        super().__init__(f"Cannot linearize '{contract}': {message}")


class ConfigError(SolgraphError):
    """Raised for configuration-related problems."""
    pass


class DirectorySkipped(SolgraphError):
    """
    Diagnostic for a directory given where a source file was expected.

    Never raised: instances are logged and collected so that processing
    continues with the remaining inputs.
    """
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Skipping directory {path}")
