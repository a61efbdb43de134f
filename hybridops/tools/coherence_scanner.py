"""coherence-scanner: screen an executor for systemic coherence (PV_PA_001)."""

import sys

from hybridops.configuration import COHERENCE_SCAN_ID

from . import cli

TOOL = cli.ToolSpec(
    prog="coherence-scanner",
    title="Coherence Scanner",
    heuristic_id=COHERENCE_SCAN_ID,
    heuristic_name="Systemic Coherence Scan",
    examples=(
        """coherence-scanner --json '{"truthfulness": 0.9, "systemAdherence": 0.8, "skill": 0.7}'""",
        """coherence-scanner --input executor.json""",
    ),
)


def main(argv=None) -> int:
    return cli.main(TOOL, argv)


if __name__ == "__main__":
    sys.exit(main())
