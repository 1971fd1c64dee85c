"""Alert acknowledgement and manual resolution: commands and handler."""

from protean import handle
from protean.fields import Identifier

from supplies.alert.alert import LowStockAlert
from supplies.alert.lifecycle import AlertLifecycleManager
from supplies.domain import supplies


@supplies.command(part_of="LowStockAlert")
class AcknowledgeAlert:
    alert_id = Identifier(required=True)
    user_id = Identifier(required=True)


@supplies.command(part_of="LowStockAlert")
class ResolveAlert:
    """Close an open alert by hand, e.g. after a purchase order was placed."""

    alert_id = Identifier(required=True)
    user_id = Identifier(required=True)


@supplies.command_handler(part_of=LowStockAlert)
class AlertStaffHandler:
    @handle(AcknowledgeAlert)
    def acknowledge_alert(self, command):
        return AlertLifecycleManager().acknowledge(command.alert_id, command.user_id)

    @handle(ResolveAlert)
    def resolve_alert(self, command):
        return AlertLifecycleManager().resolve(command.alert_id, command.user_id)
