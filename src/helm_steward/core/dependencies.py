"""Check declared chart dependencies and fetch them when they are not on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from helm_steward.core.dependency_manager import DependencyManager
from helm_steward.core.errors import DependencyError
from helm_steward.models import DependencyUpdatePolicy
from helm_steward.models.chart import Chart
from helm_steward.utils.version_compare import satisfies

logger = logging.getLogger(__name__)


def check_dependencies(chart: Chart) -> list[str]:
    """Return one problem per declared dependency that is missing or mismatched.

    An empty list means every enabled dependency has a loaded subchart whose
    version satisfies the declared constraint.
    """
    problems: list[str] = []
    for dep in chart.metadata.dependencies:
        if not dep.enabled:
            continue
        sub = chart.subchart(dep.name)
        if sub is None:
            problems.append(f"{dep.name}: found in Chart.yaml, but missing in charts/ directory")
            continue
        if dep.version and not satisfies(sub.version, dep.version):
            problems.append(f"{dep.name}: version {sub.version} in charts/ does not satisfy {dep.version}")
    return problems


class DependencyResolver:
    def __init__(self, manager: DependencyManager, policy: DependencyUpdatePolicy = DependencyUpdatePolicy.CHECK):
        self.manager = manager
        self.policy = policy

    def ensure_dependencies(self, chart: Chart, chart_path: Path) -> None:
        """Make every declared dependency of ``chart`` present under ``chart_path``.

        Raises:
            DependencyError: the dependency update failed
        """
        if not chart.metadata.dependencies:
            return

        if self.policy == DependencyUpdatePolicy.CHECK:
            problems = check_dependencies(chart)
            if not problems:
                logger.debug("All dependencies of %s are present", chart.name)
                return
            logger.info("Updating dependencies of %s: %s", chart.name, "; ".join(problems))

        try:
            self.manager.update(chart, chart_path)
        except DependencyError:
            raise
        except Exception as err:
            raise DependencyError(
                f"can't update dependencies of chart `{chart.name}`: {err}",
                chart=chart.name,
                path=chart_path,
            ) from err

    def verify(self, chart: Chart) -> None:
        """Raise DependencyError if anything declared is still unresolved."""
        problems = check_dependencies(chart)
        if problems:
            raise DependencyError(
                f"chart `{chart.name}` has unresolved dependencies: {'; '.join(problems)}",
                chart=chart.name,
                path=chart.path,
            )
