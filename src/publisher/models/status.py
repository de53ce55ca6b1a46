"""Exit codes and stages for a publish run."""

from enum import Enum, IntEnum


class ExitCode(IntEnum):
    """Process exit codes of the ota-publish command."""

    OK = 0
    FAILED = 1
    USAGE = 2
    TOOL_MISSING = 3
    BUILD_OUTPUT_MISSING = 4
    ARTIFACT_MISSING = 5
    CHECKSUM_FAILED = 6


class PublishStage(str, Enum):
    """Publish lifecycle stages.

    State transitions:
    preflight → compiling → locating → checksumming → placing → committing → done
         ↓          ↓           ↓            ↓            ↓           ↓
       failed ←──────────────────────────────────────────────────────
    """

    PREFLIGHT = "preflight"
    COMPILING = "compiling"
    LOCATING = "locating"
    CHECKSUMMING = "checksumming"
    PLACING = "placing"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"
