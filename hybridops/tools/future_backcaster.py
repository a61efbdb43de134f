"""future-backcaster: rank an initiative by strategic fit (PV_BS_001)."""

import sys

from hybridops.configuration import BACK_CASTING_ID

from . import cli

TOOL = cli.ToolSpec(
    prog="future-backcaster",
    title="Future Backcaster",
    heuristic_id=BACK_CASTING_ID,
    heuristic_name="Future System Back-Casting",
    examples=(
        """future-backcaster --json '{"endStateVision": {"clarity": 0.9}, "marketSignals": {"alignment": 0.3}}'""",
        """future-backcaster --json '{"endStateClarity": 0.9, "marketAlignment": 0.3}'""",
        """echo '{"endStateClarity": 0.85}' | future-backcaster --stdin""",
    ),
)


def main(argv=None) -> int:
    return cli.main(TOOL, argv)


if __name__ == "__main__":
    sys.exit(main())
