"""automation-checker: decide whether a task is ready to automate (PV_PM_001)."""

import sys

from hybridops.configuration import AUTOMATION_CHECK_ID

from . import cli

TOOL = cli.ToolSpec(
    prog="automation-checker",
    title="Automation Checker",
    heuristic_id=AUTOMATION_CHECK_ID,
    heuristic_name="Automation Tipping Point",
    examples=(
        """automation-checker --json '{"frequency": 5, "standardizable": 0.8, "hasGuardrails": true}'""",
        """automation-checker --json '{"executionsPerMonth": 5, "standardization": 0.8, "guardrails": true}'""",
        """echo '{"frequency": 3, "standardizable": 0.9, "hasGuardrails": true}' | automation-checker --stdin""",
    ),
)


def main(argv=None) -> int:
    return cli.main(TOOL, argv)


if __name__ == "__main__":
    sys.exit(main())
