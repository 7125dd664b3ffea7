"""
Import closure resolution.

Expands a list of seed files into every Solidity source reachable through
import directives, confined to a project root. Non-relative imports are
resolved through Forge-style ``remappings.txt`` files or a ``node_modules``
directory.
"""

from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from solgraph.exceptions import (
    AmbiguousRemapping,
    DirectorySkipped,
    InvalidImportPath,
    ParseError,
    UnresolvedImport,
    UnresolvedRemapping,
)
from solgraph.logging_config import logger
from solgraph.parser import parse, visit
from solgraph.tracing import trace
from .config import DEPENDENCY_DIR, REMAPPINGS_FILE, SOURCE_EXTENSION

PathLike = Union[str, Path]


class ImportResolver:
    """
    Resolves the transitive import closure of Solidity files.

    Handles:
    - Relative and absolute imports: import "./Token.sol"
    - Remapped imports: import "@oz/token/ERC20.sol" with "@oz/=lib/openzeppelin/"
    - Package imports: import "pkg/Lib.sol" -> node_modules/pkg/Lib.sol
    """

    def __init__(self, project_root: Optional[PathLike] = None):
        """
        Initialize the resolver.

        Args:
            project_root: Highest directory files may be read from
                (default: current working directory)
        """
        self.project_root = Path(project_root or Path.cwd()).resolve()
        self.skipped: List[DirectorySkipped] = []

    @trace
    def profile(self, files: List[PathLike]) -> List[str]:
        """
        Compute the import closure of the given seed files.

        Args:
            files: Seed file paths, relative to the project root or absolute

        Returns:
            Absolute paths of the seeds and everything they import,
            deduplicated, in depth-first discovery order

        Raises:
            InvalidImportPath: A path leaves the project root or is not a .sol file
            ImportResolutionError: An import cannot be resolved
            ParseError: A file cannot be parsed even in tolerant mode
        """
        self.skipped = []
        visited: Set[Path] = set()
        closure: List[str] = []

        # Work-list of (path, is_seed); popped from the end
        pending: List[Tuple[Path, bool]] = [
            (self.project_root / Path(f), True) for f in reversed(files)
        ]

        while pending:
            raw_path, is_seed = pending.pop()
            path = raw_path.resolve()
            if path in visited:
                continue

            self._check_inside_root(path)

            if is_seed and path.is_dir():
                diagnostic = DirectorySkipped(str(path))
                logger.warning(str(diagnostic))
                self.skipped.append(diagnostic)
                continue

            if path.suffix != SOURCE_EXTENSION:
                raise InvalidImportPath(str(path))

            visited.add(path)
            closure.append(str(path))

            imports = []
            for import_path in self._import_paths(path):
                resolved = self.resolve_import_path(path, import_path)
                if resolved not in visited:
                    imports.append(resolved)

            logger.debug(f"{path}: {len(imports)} new import(s)")
            pending.extend((p, False) for p in reversed(imports))

        logger.debug(f"Import closure: {len(closure)} file(s), {len(self.skipped)} skipped")
        return closure

    def resolve_import_path(self, base_file: PathLike, import_path: str) -> Path:
        """
        Resolve an import directive to the file it names.

        Args:
            base_file: File containing the import directive
            import_path: Path string of the import directive

        Returns:
            Absolute path of the imported file

        Raises:
            UnresolvedRemapping: No remappings.txt or node_modules is found
                between the importing file and the project root
            AmbiguousRemapping: A remapping line has more than one '='
            UnresolvedImport: The resolved path is not an existing file
        """
        base_dir = Path(base_file).resolve().parent

        if import_path.startswith((".", "/")):
            resolved = (base_dir / import_path).resolve()
        else:
            resolved = self._resolve_remapped(base_dir, import_path)

        if not resolved.is_file():
            raise UnresolvedImport(str(resolved))

        logger.debug(f"Resolved import '{import_path}' from {base_file} -> {resolved}")
        return resolved

    def _resolve_remapped(self, base_dir: Path, import_path: str) -> Path:
        manifest_dir = self._find_manifest_dir(base_dir, import_path)

        remappings = manifest_dir / REMAPPINGS_FILE
        if remappings.is_file():
            remapping = self._match_remapping(remappings, import_path)
            if remapping is not None:
                prefix, target = remapping
                return (manifest_dir / import_path.replace(prefix, target, 1)).resolve()

        return (manifest_dir / DEPENDENCY_DIR / import_path).resolve()

    def _find_manifest_dir(self, base_dir: Path, import_path: str) -> Path:
        """Walk upward from base_dir to the project root for a dependency manifest."""
        current = base_dir
        while self._is_inside_root(current):
            if (current / REMAPPINGS_FILE).exists() or (current / DEPENDENCY_DIR).exists():
                return current
            if current == self.project_root:
                break
            current = current.parent
        raise UnresolvedRemapping(import_path)

    def _match_remapping(self, remappings: Path, import_path: str) -> Optional[Tuple[str, str]]:
        """
        Pick the remapping line for an import.

        Every non-blank line is validated. The first line whose prefix
        contains the import's leading segment wins, with lines whose prefix
        the import actually starts with taking precedence.
        """
        import_base = import_path.split("/")[0]
        candidates: List[Tuple[str, str]] = []

        for line in remappings.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            parts = line.split("=")
            if len(parts) > 2:
                raise AmbiguousRemapping(str(remappings), line)
            if len(parts) == 2 and import_base in parts[0]:
                candidates.append((parts[0], parts[1]))

        for prefix, target in candidates:
            if import_path.startswith(prefix):
                return prefix, target
        return candidates[0] if candidates else None

    def _import_paths(self, path: Path) -> List[str]:
        source = path.read_text(encoding="utf-8")
        try:
            tree = parse(source, tolerant=True, path=str(path))
        except ParseError:
            logger.error(f"Error found while parsing file: {path}")
            raise

        paths: List[str] = []
        visit(tree, {"ImportDirective": lambda node: paths.append(node.path)})
        return paths

    def _is_inside_root(self, path: Path) -> bool:
        return path == self.project_root or self.project_root in path.parents

    def _check_inside_root(self, path: Path) -> None:
        if not self._is_inside_root(path):
            raise InvalidImportPath(str(path))
