"""Services wiring the graph model, lifecycles and analytics to a `WorkflowStore`."""

from workflow_console.services.dashboard import DashboardService
from workflow_console.services.definitions import DefinitionService
from workflow_console.services.instances import InstanceService

__all__ = ["DashboardService", "DefinitionService", "InstanceService"]
