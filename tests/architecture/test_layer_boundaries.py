"""
Layer boundary tests.

1. proposal_kernel/** may NOT import proposal_engines, proposal_config or
   proposal_services.  The kernel never depends upward.
2. The pure layers (proposal_kernel/domain, proposal_engines) import no
   SQLAlchemy and never read the wall clock.
3. proposal_engines may not import proposal_services or proposal_config.

These tests read source code via AST.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(path: Path) -> list[tuple[int, str]]:
    tree = ast.parse(path.read_text(), filename=str(path))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(files: list[Path], forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in files:
        for lineno, module in _extract_imports(path):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {path.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestKernelNoUpwardDependencies:
    def test_kernel_does_not_import_outer_packages(self):
        violations = _violations(
            _python_files("proposal_kernel"),
            ("proposal_engines", "proposal_config", "proposal_services"),
        )
        assert not violations, "Kernel boundary violation:\n" + "\n".join(violations)


class TestPureLayers:
    PURE = ("proposal_kernel/domain", "proposal_engines")

    def test_no_persistence_imports(self):
        files = [f for pkg in self.PURE for f in _python_files(pkg)]
        violations = _violations(
            files,
            ("sqlalchemy", "proposal_kernel.db", "proposal_kernel.models", "proposal_kernel.services"),
        )
        assert not violations, "Pure layer imports persistence:\n" + "\n".join(violations)

    def test_engines_do_not_import_services_or_config(self):
        violations = _violations(
            _python_files("proposal_engines"), ("proposal_services", "proposal_config"),
        )
        assert not violations, "\n".join(violations)

    def test_no_wall_clock_reads(self):
        offenders = []
        for pkg in self.PURE:
            for path in _python_files(pkg):
                if path.name == "clock.py":
                    continue
                source = path.read_text()
                for needle in ("datetime.now(", "date.today(", "datetime.utcnow("):
                    if needle in source:
                        offenders.append(f"  {path.relative_to(ROOT)} calls {needle}")
        assert not offenders, "\n".join(offenders)
