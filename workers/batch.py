#!/usr/bin/env python3
"""Sequential batch driver: one fresh run per file, failures stay per-file."""
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from core.errors import AnalysisAborted, ValidationError, WorkspaceError
from orchestrator.orchestrator import process_target

LOG = logging.getLogger("batch")


@dataclass
class BatchReport:
    attempted: int = 0
    succeeded: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    def as_dict(self):
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failures": [{"file": f, "error": e} for f, e in self.failures],
        }


def run_batch(paths, options, process=process_target):
    report = BatchReport()
    for path in paths:
        report.attempted += 1
        LOG.info(f"Processing: {path}")
        try:
            process(path, options)
        except (ValidationError, WorkspaceError) as e:
            LOG.error(f"Skipping {path}: {e}")
            report.failures.append((str(path), str(e)))
            continue
        except AnalysisAborted:
            raise
        except Exception as e:
            LOG.exception(f"Unexpected failure while analysing {path}")
            report.failures.append((str(path), f"exception: {e}"))
            continue
        report.succeeded.append(str(path))
    LOG.info(f"Batch processing complete: {len(report.succeeded)} of {report.attempted} files analysed")
    return report
