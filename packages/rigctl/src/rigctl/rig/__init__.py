from .model import RunReport, RunRequest, StepRecord, coordinator_name, default_report_folder
from .orchestrator import TestRunOrchestrator

__all__ = [
    "RunReport",
    "RunRequest",
    "StepRecord",
    "TestRunOrchestrator",
    "coordinator_name",
    "default_report_folder",
]
